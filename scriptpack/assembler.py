"""Package directory assembly."""

import fnmatch
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from scriptpack.errors import FilesystemError
from scriptpack.manifest import ASSETS_DIRNAME

MANIFEST_FILENAME = "manifest.json"

DEFAULT_EXCLUDES = [".git", ".github", ".gitignore", ".gitattributes", "README.md"]


@dataclass
class PackageDescriptor:
    """A package directory to build: where, which manifest, which icons."""

    directory: Path
    manifest_text: str
    assets: list[Path] = field(default_factory=list)


def clean_directory(path: Path) -> None:
    """Remove a previous package directory (or stray file) at path."""
    path = Path(path)
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
    except OSError as e:
        raise FilesystemError(f"Cannot remove {path}: {e}") from e


def write_manifest(directory: Path, text: str) -> Path:
    """Write manifest.json as ASCII with no trailing newline."""
    target = Path(directory) / MANIFEST_FILENAME
    try:
        data = text.encode("ascii")
    except UnicodeEncodeError as e:
        raise FilesystemError(f"Manifest text for {target} is not ASCII: {e}") from e
    try:
        target.write_bytes(data)
    except OSError as e:
        raise FilesystemError(f"Cannot write {target}: {e}") from e
    return target


def _is_excluded(name: str, excludes: list[str]) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in excludes)


def _copy_tree(source_dir: Path, dest_dir: Path, excludes: list[str]) -> int:
    copied = 0
    for entry in sorted(source_dir.iterdir()):
        if _is_excluded(entry.name, excludes):
            logger.debug(f"Skipping excluded {entry}")
            continue
        target = dest_dir / entry.name
        if entry.is_dir():
            target.mkdir(exist_ok=True)
            copied += _copy_tree(entry, target, excludes)
        else:
            shutil.copy2(entry, target)
            copied += 1
    return copied


def assemble_package(
    descriptor: PackageDescriptor,
    source_dir: Path,
    excludes: list[str] | None = None,
) -> Path:
    """
    Build a package directory ready for archiving.

    Creates `assets/` with the icon files, copies the source tree (minus
    excluded names, overwriting on conflict) and writes manifest.json.
    On any failure the partially built directory is removed.

    Returns:
        The package directory.
    """
    directory = Path(descriptor.directory)
    source_dir = Path(source_dir)
    excludes = DEFAULT_EXCLUDES if excludes is None else excludes

    if not source_dir.is_dir():
        raise FilesystemError(f"Source directory not found: {source_dir}")

    try:
        assets_dir = directory / ASSETS_DIRNAME
        assets_dir.mkdir(parents=True, exist_ok=True)
        for asset in descriptor.assets:
            shutil.copy2(asset, assets_dir / Path(asset).name)
            logger.debug(f"Copied asset {asset}")

        copied = _copy_tree(source_dir, directory, excludes)
        logger.debug(f"Copied {copied} source files into {directory}")

        write_manifest(directory, descriptor.manifest_text)
    except (OSError, FilesystemError) as e:
        shutil.rmtree(directory, ignore_errors=True)
        if isinstance(e, FilesystemError):
            raise
        raise FilesystemError(f"Failed to assemble package {directory}: {e}") from e

    logger.info(f"Assembled package directory {directory}")
    return directory
