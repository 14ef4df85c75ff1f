"""
Backup tree writing for Exasol Backup.
"""

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path, PurePath
from typing import Iterator, TextIO

from .exceptions import WriteError


class TreeWriter:
    """
    Writes files below a destination root and remembers, per directory,
    which entries were produced during the current run.

    Files are written to a hidden temporary sibling and moved into place,
    so an interrupted write never leaves a truncated file under the final
    name.
    """

    TEMP_SUFFIX = '.tmp'

    def __init__(self, root: Path):
        self.root = Path(root)
        self._written: dict[Path, set[str]] = {}
        self._lock = threading.Lock()

    def _resolve(self, path: PurePath) -> Path:
        relative = PurePath(path)
        if relative.is_absolute() or '..' in relative.parts:
            raise WriteError(self.root / relative, "path escapes the backup root")
        return self.root / relative

    def _register(self, target: Path) -> None:
        """Record target and each of its parent directories up to the root."""
        with self._lock:
            current = target
            while current != self.root and current.parent != current:
                self._written.setdefault(current.parent, set()).add(current.name)
                current = current.parent

    @contextmanager
    def open(self, path: PurePath) -> Iterator[TextIO]:
        """
        Open a file in the tree for writing text.

        The file replaces any existing file at the same path once the
        block exits cleanly; on error the partial file is discarded.

        Raises:
            WriteError: On any filesystem failure.
        """
        target = self._resolve(path)
        temp = target.with_name(f'.{target.name}{self.TEMP_SUFFIX}')

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            handle = open(temp, 'w', encoding='utf-8', newline='')
        except OSError as e:
            raise WriteError(target, str(e)) from e

        try:
            with handle:
                yield handle
            os.replace(temp, target)
        except OSError as e:
            self._discard(temp)
            raise WriteError(target, str(e)) from e
        except BaseException:
            self._discard(temp)
            raise

        self._register(target)
        logging.debug(f"Wrote {target}")

    def write(self, path: PurePath, content: str) -> Path:
        """Write text to a file in the tree, creating parent directories."""
        with self.open(path) as handle:
            handle.write(content)
        return self._resolve(path)

    def keep(self, path: PurePath) -> None:
        """Mark an existing entry as current without rewriting it."""
        self._register(self._resolve(path))

    def written(self, directory: Path) -> frozenset[str]:
        """Names produced or kept in a directory during this run."""
        with self._lock:
            return frozenset(self._written.get(Path(directory), ()))

    @staticmethod
    def _discard(temp: Path) -> None:
        try:
            temp.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logging.warning(f"Unable to remove temporary file {temp}: {e}")
