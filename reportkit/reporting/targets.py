"""
reporting/targets.py - Save targets for export artifacts.

A save target takes a named artifact and puts it somewhere. The directory
target writes through a transient temp file that is always released,
whether or not the final rename succeeds.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Protocol, Union
import logging
import os
import tempfile

from .schema import ExportArtifact

logger = logging.getLogger("reporting.targets")


class SaveTarget(Protocol):
    """Downstream "save this named content" mechanism."""

    def save(self, artifact: ExportArtifact) -> str:
        ...


class DirectorySaveTarget:
    """Saves artifacts as files in a directory (created on first use)."""

    def __init__(self, directory: Union[str, Path], overwrite: bool = True):
        self.directory = Path(directory)
        self.overwrite = overwrite

    def save(self, artifact: ExportArtifact) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        final_path = self.directory / Path(artifact.filename).name

        if final_path.exists() and not self.overwrite:
            raise FileExistsError(f"Export already exists: {final_path}")

        fd, temp_name = tempfile.mkstemp(prefix=".export-", suffix=".part", dir=str(self.directory))
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(artifact.as_bytes())
            os.replace(temp_name, final_path)
        finally:
            # Released on every path; after a successful replace it is already gone
            if os.path.exists(temp_name):
                os.unlink(temp_name)

        logger.debug(f"Wrote {final_path}")
        return str(final_path)


class MemorySaveTarget:
    """Keeps saved artifacts in memory, keyed by filename."""

    def __init__(self):
        self.saved: List[ExportArtifact] = []

    def save(self, artifact: ExportArtifact) -> str:
        self.saved.append(artifact)
        return f"memory://{artifact.filename}"

    def by_filename(self) -> Dict[str, ExportArtifact]:
        return {a.filename: a for a in self.saved}

    def clear(self) -> None:
        self.saved.clear()
