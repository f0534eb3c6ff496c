"""Common helpers shared by the build, watch, serve and clean commands."""

from __future__ import annotations

import functools
import logging
import os
import shutil
import stat
import subprocess
from collections.abc import Iterable
from pathlib import Path

BUILDING = "📦"
SUCCESS = "✅"
ERROR = "❌"
SERVER = "📡"

log = logging.getLogger(__name__)

StrPath = str | os.PathLike[str]


class TrunkError(Exception):
    """An error raised by the build tooling, carrying a human readable message."""


def parse_public_url(val: str) -> str:
    """Ensure a public URL value starts and ends with a slash."""
    prefix = "" if val.startswith("/") else "/"
    suffix = "" if val.endswith("/") else "/"
    return f"{prefix}{val}{suffix}"


@functools.cache
def _cwd() -> Path:
    return Path.cwd()


def path_exists(path: StrPath) -> bool:
    """Return whether ``path`` exists; errors other than "not found" are raised."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise TrunkError(
            f"error checking for existence of path at {os.fspath(path)!r}"
        ) from exc
    return True


def is_executable(path: StrPath) -> bool:
    """Return whether ``path`` exists, is a regular file and is marked executable."""
    try:
        meta = os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise TrunkError(f"error checking file mode for file {os.fspath(path)!r}") from exc
    if not stat.S_ISREG(meta.st_mode):
        return False
    if os.name == "posix":
        return bool(meta.st_mode & stat.S_IXUSR)
    return True


def copy_dir_recursive(from_dir: StrPath, to_dir: StrPath) -> None:
    """Copy the contents of ``from_dir`` into ``to_dir``, overwriting existing files."""
    if not path_exists(from_dir):
        raise TrunkError(
            f"directory can not be copied as it does not exist {os.fspath(from_dir)!r}"
        )
    try:
        shutil.copytree(from_dir, to_dir, dirs_exist_ok=True)
    except (shutil.Error, OSError) as exc:
        raise TrunkError("error copying directory") from exc


def remove_dir_all(from_dir: StrPath) -> None:
    """Recursively delete a directory; a missing directory is not an error."""
    if not path_exists(from_dir):
        return
    try:
        shutil.rmtree(from_dir)
    except OSError as exc:
        raise TrunkError("error removing directory") from exc


def strip_prefix(target: StrPath) -> Path:
    """Strip the current working directory prefix from ``target`` if it has one."""
    target = Path(target)
    try:
        return target.relative_to(_cwd())
    except ValueError:
        return target


def run_command(name: str, path: StrPath, args: Iterable[StrPath]) -> None:
    """Run a program with the given arguments, raising if it does not succeed."""
    argv = [os.fspath(path), *(os.fspath(arg) for arg in args)]
    log.debug("%s args: %r", name, argv[1:])
    try:
        completed = subprocess.run(argv, check=False)
    except OSError as exc:
        raise TrunkError(f"error spawning {name} call") from exc
    if completed.returncode != 0:
        raise TrunkError(f"{name} call returned a bad status")