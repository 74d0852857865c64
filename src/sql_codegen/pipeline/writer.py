"""Write-if-changed output of generated files."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)

WriteStatus = Literal["written", "unchanged", "failed"]


@dataclass(frozen=True)
class WriteOutcome:
    path: Path
    status: WriteStatus
    error: str | None = None


def resolve_output_dir(output_dir: str | Path, project_dir: str | Path | None = None) -> Path:
    """Absolute output directory; relative paths resolve against `project_dir` (or the cwd)."""
    path = Path(output_dir)
    if path.is_absolute():
        return path
    base = Path(project_dir) if project_dir else Path.cwd()
    return (base / path).resolve()


def write_if_changed(directory: str | Path, file_name: str, content: str) -> WriteOutcome:
    """Write `content` unless the file already holds exactly that text.

    OS errors are logged and reported as a failed outcome instead of raised,
    so one unwritable file does not stop the rest of the batch.
    """
    path = Path(directory) / file_name
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            existing = path.read_text(encoding="utf-8", errors="replace")
            if existing == content:
                logger.debug(f"Unchanged: {path}")
                return WriteOutcome(path, "unchanged")
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        logger.warning(f"Failed to write {path}: {e}")
        return WriteOutcome(path, "failed", str(e))

    logger.debug(f"Wrote: {path}")
    return WriteOutcome(path, "written")
