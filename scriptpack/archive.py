"""Archive creation for packaged extensions.

Store validators are picky about zip layout: entries must be relative,
use forward slashes, and start at the package root (manifest.json at the
top level, not inside a folder).
"""

import shutil
import subprocess
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path

from loguru import logger

from scriptpack.errors import ArchiveError

# Fixed entry timestamp so identical inputs produce identical archives.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


class Archiver(ABC):
    """Compresses a package directory into a zip archive."""

    name: str = ""

    @abstractmethod
    def create(self, source_dir: Path, archive_path: Path) -> Path:
        """Write archive_path from the contents of source_dir and return it."""

    def _prepare(self, source_dir: Path, archive_path: Path) -> None:
        if not source_dir.is_dir():
            raise ArchiveError(f"Nothing to archive: {source_dir} is not a directory")
        try:
            archive_path.parent.mkdir(parents=True, exist_ok=True)
            if archive_path.exists():
                archive_path.unlink()
        except OSError as e:
            raise ArchiveError(f"Cannot prepare {archive_path}: {e}") from e


class ZipfileArchiver(Archiver):
    """In-process archiver using DEFLATE at maximum compression."""

    name = "zipfile"

    def __init__(self, compresslevel: int = 9):
        self.compresslevel = compresslevel

    def create(self, source_dir: Path, archive_path: Path) -> Path:
        source_dir = Path(source_dir)
        archive_path = Path(archive_path)
        self._prepare(source_dir, archive_path)

        files = sorted(p for p in source_dir.rglob("*") if p.is_file())
        try:
            with zipfile.ZipFile(
                archive_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=self.compresslevel
            ) as zf:
                for path in files:
                    rel = path.relative_to(source_dir).as_posix()
                    info = zipfile.ZipInfo(rel, date_time=_ZIP_EPOCH)
                    info.compress_type = zipfile.ZIP_DEFLATED
                    info.external_attr = (path.stat().st_mode & 0xFFFF) << 16
                    zf.writestr(info, path.read_bytes(), compresslevel=self.compresslevel)
        except (OSError, zipfile.BadZipFile) as e:
            archive_path.unlink(missing_ok=True)
            raise ArchiveError(f"Failed to write {archive_path}: {e}") from e

        logger.info(f"Created {archive_path} ({len(files)} files)")
        return archive_path


class SevenZipArchiver(Archiver):
    """External 7-Zip invocation (`7z a -tzip -mx=9`)."""

    name = "7z"

    def __init__(self, executable: str | None = None):
        self.executable = executable

    def _resolve_executable(self) -> str:
        if self.executable:
            return self.executable
        for candidate in ("7z", "7za", "7zz"):
            found = shutil.which(candidate)
            if found:
                return found
        raise ArchiveError("7-Zip executable not found (tried 7z, 7za, 7zz)")

    def create(self, source_dir: Path, archive_path: Path) -> Path:
        source_dir = Path(source_dir)
        archive_path = Path(archive_path).resolve()
        self._prepare(source_dir, archive_path)

        # Run inside the package directory so entries are rooted at its contents.
        cmd = [self._resolve_executable(), "a", "-tzip", "-mx=9", str(archive_path), "."]
        logger.debug(f"Running {' '.join(cmd)} in {source_dir}")
        try:
            result = subprocess.run(cmd, cwd=source_dir, capture_output=True, text=True)
        except OSError as e:
            raise ArchiveError(f"Failed to run 7-Zip: {e}") from e

        if result.returncode != 0:
            archive_path.unlink(missing_ok=True)
            detail = (result.stderr or result.stdout or "").strip()
            raise ArchiveError(f"7-Zip exited with code {result.returncode}: {detail}")

        logger.info(f"Created {archive_path}")
        return archive_path


_ARCHIVERS: dict[str, type[Archiver]] = {
    ZipfileArchiver.name: ZipfileArchiver,
    SevenZipArchiver.name: SevenZipArchiver,
}


def get_archiver(name: str) -> Archiver:
    """Return an archiver instance by name ("zipfile" or "7z")."""
    cls = _ARCHIVERS.get((name or "").strip().lower())
    if cls is None:
        raise ArchiveError(f"Unknown archiver '{name}' (expected one of: {', '.join(_ARCHIVERS)})")
    return cls()
