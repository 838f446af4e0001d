"""Source repository fetching."""

import shutil
import subprocess
from pathlib import Path

from loguru import logger

from scriptpack.assembler import clean_directory
from scriptpack.errors import FetchError


def clone_repository(
    url: str,
    dest: Path,
    branch: str | None = None,
    depth: int = 1,
    git: str = "git",
) -> Path:
    """
    Clone url into dest, deleting any previous copy first.

    Raises:
        FetchError: No URL configured, git is missing, or the clone fails.
    """
    if not (url or "").strip():
        raise FetchError("No source repository configured (set source.repoUrl or use --source-dir)")

    git_exe = shutil.which(git)
    if git_exe is None:
        raise FetchError(f"'{git}' executable not found on PATH")

    dest = Path(dest)
    clean_directory(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)

    cmd = [git_exe, "clone"]
    if depth and depth > 0:
        cmd += ["--depth", str(depth)]
    if branch:
        cmd += ["--branch", branch]
    cmd += [url, str(dest)]

    logger.info(f"Cloning {url} into {dest}")
    logger.debug(f"Running {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise FetchError(f"Failed to run git: {e}") from e

    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        raise FetchError(f"git clone of {url} failed (exit {result.returncode}): {detail}")

    return dest
