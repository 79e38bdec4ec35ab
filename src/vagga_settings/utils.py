"""Utility functions for vagga-settings."""

import os
from collections.abc import Mapping
from pathlib import Path

from .exceptions import NoHomeError


def expand_home(path: Path, environ: Mapping[str, str] | None = None) -> Path:
    """Expand a leading `~` component using the HOME variable.

    Unlike Path.expanduser this never falls back to the password database,
    and `~user` forms are left untouched.

    Args:
        path: Path that may start with `~`
        environ: Environment to read HOME from (default: os.environ)

    Returns:
        Expanded path, or the original path when it does not start with `~`

    Raises:
        NoHomeError: If the path starts with `~` and HOME is unset or empty

    Examples:
        >>> expand_home(Path("~/cache"), {"HOME": "/home/user"})
        PosixPath('/home/user/cache')

        >>> expand_home(Path("/var/cache"), {})
        PosixPath('/var/cache')
    """
    if not path.parts or path.parts[0] != "~":
        return path
    env = os.environ if environ is None else environ
    home = env.get("HOME")
    if not home:
        raise NoHomeError("HOME is not set")
    return Path(home).joinpath(*path.parts[1:])


def create_dir(path: Path, recursive: bool = False) -> None:
    """Create a directory with mode 0o755.

    Does nothing if the directory already exists. The mode is applied with
    chmod so it does not depend on the process umask.

    Args:
        path: Directory to create
        recursive: Also create missing parents (each with mode 0o755)
    """
    if path.is_dir():
        return
    if recursive and path.parent != path:
        create_dir(path.parent, recursive=True)
    create_dir_mode(path, 0o755)


def create_dir_mode(path: Path, mode: int) -> None:
    """Create a single directory and set its permission bits to `mode`."""
    if path.is_dir():
        return
    path.mkdir()
    path.chmod(mode)


def read_visible_entries(directory: Path) -> list[Path]:
    """List directory entries whose names don't start with a dot."""
    return sorted(entry for entry in directory.iterdir() if not entry.name.startswith("."))
