"""Scoped temporary directory holding a run's intermediate files."""

import shutil
import tempfile
from pathlib import Path

import structlog

from podcast2video.errors import WorkspaceError

logger = structlog.get_logger(__name__)


class Workspace:
    """A private temporary directory with explicit acquire and release.

    Release never raises: a directory that cannot be removed is logged
    so it does not hide the outcome of the run.
    """

    def __init__(self, prefix: str = "podcast2video-", base_dir: Path | None = None) -> None:
        self.prefix = prefix
        self.base_dir = base_dir
        self._path: Path | None = None
        self.logger = logger.bind(component="workspace")

    @property
    def path(self) -> Path:
        if self._path is None:
            raise WorkspaceError("workspace has not been acquired")
        return self._path

    def acquire(self) -> Path:
        """Create the temporary directory."""
        if self._path is not None:
            return self._path
        try:
            self._path = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.base_dir))
        except OSError as e:
            raise WorkspaceError(f"could not create temp directory: {e}") from e
        self.logger.debug("Acquired workspace", path=str(self._path))
        return self._path

    def release(self) -> None:
        """Remove the directory and everything in it."""
        if self._path is None:
            return
        path, self._path = self._path, None
        try:
            shutil.rmtree(path)
        except OSError as e:
            self.logger.warning("Could not remove workspace", path=str(path), error=str(e))
            return
        self.logger.debug("Released workspace", path=str(path))

    def __enter__(self) -> Path:
        return self.acquire()

    def __exit__(self, *exc_info: object) -> None:
        self.release()
