"""Exclusive advisory lock on a filesystem path.

Used to serialize access to shared resources such as a shared cache
directory between independent processes. The lock never blocks: if another
holder has it, acquisition fails immediately with LockWouldBlock and the
caller decides whether to retry.

Example:
    ```python
    from vagga_settings import LockWouldBlock, acquire_exclusive

    try:
        with acquire_exclusive(cache_dir / ".lock"):
            populate(cache_dir)
    except LockWouldBlock:
        print("Cache is busy")
    ```
"""

import logging
from pathlib import Path

from filelock import FileLock
from filelock import Timeout

from .exceptions import LockIoError
from .exceptions import LockWouldBlock

logger = logging.getLogger(__name__)

LOCK_FILE_MODE = 0o644


class Lock:
    """A held exclusive lock. Released when its `with` block ends.

    Create with `Lock.exclusive()` or `acquire_exclusive()`. The lock file is
    only a rendezvous point; its contents are never read.

    Args:
        path: Lock file path
        file_lock: Already acquired underlying lock
    """

    def __init__(self, path: Path, file_lock: FileLock):
        self.path = path
        self._file_lock = file_lock
        self._released = False

    @classmethod
    def exclusive(cls, path: Path) -> "Lock":
        """Take an exclusive lock on `path` without waiting.

        The file is created if missing.

        Args:
            path: Lock file path

        Returns:
            Held lock

        Raises:
            LockWouldBlock: If the lock is held elsewhere
            LockIoError: If the lock file can't be created or locked
        """
        path = Path(path)
        file_lock = FileLock(str(path), mode=LOCK_FILE_MODE, thread_local=False)
        try:
            file_lock.acquire(blocking=False)
        except Timeout as e:
            raise LockWouldBlock(path) from e
        except (OSError, NotImplementedError) as e:
            raise LockIoError(path, str(e)) from e
        logger.debug(f"Acquired lock {path}")
        return cls(path, file_lock)

    @property
    def is_held(self) -> bool:
        """True until the lock has been released."""
        return not self._released

    def release(self) -> None:
        """Release the lock. Calling it again does nothing.

        Unlock failures are logged, never raised.
        """
        if self._released:
            return
        self._released = True
        try:
            self._file_lock.release(force=True)
        except OSError as e:
            logger.error(f"Couldn't unlock file {self.path}: {e}")
        else:
            logger.debug(f"Released lock {self.path}")

    def __enter__(self) -> "Lock":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "held" if self.is_held else "released"
        return f"<Lock {self.path} {state}>"


def acquire_exclusive(path: Path) -> Lock:
    """Take an exclusive, non-blocking lock on `path`. See Lock.exclusive."""
    return Lock.exclusive(path)
