"""
Removal of stale backup entries (drop-extras).
"""

import fnmatch
import logging
import shutil
from pathlib import Path

from .exceptions import ReconcileError
from .registry import ROOT, KindSpec
from .writer import TreeWriter


class Reconciler:
    """Deletes entries that were not produced by the current run."""

    def __init__(self, writer: TreeWriter):
        self.writer = writer
        self.root = writer.root
        self.deleted: list[Path] = []
        self.errors: list[ReconcileError] = []

    def _scope_directories(self, directory_glob: str) -> list[Path]:
        if directory_glob == ROOT:
            candidates = [self.root]
        else:
            candidates = sorted(self.root.glob(directory_glob))
        return [d for d in candidates if d.is_dir()]

    def reconcile(self, spec: KindSpec) -> None:
        """
        Remove stale entries from every directory owned by a kind.

        Must only be called once every write of the kind has finished;
        failures are collected in ``errors`` and do not stop other deletions.
        """
        for directory_glob, pattern in spec.reconcile_scopes:
            for directory in self._scope_directories(directory_glob):
                self.reconcile_directory(directory, pattern)

    def reconcile_directory(self, directory: Path, pattern: str = '*') -> None:
        written = self.writer.written(directory)
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            self.errors.append(ReconcileError(directory, f"unable to list directory: {e}"))
            logging.error(f"Unable to list {directory}: {e}")
            return

        for entry in entries:
            if not fnmatch.fnmatchcase(entry.name, pattern) or entry.name in written:
                continue
            self._delete(entry)

    def _delete(self, entry: Path) -> None:
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as e:
            self.errors.append(ReconcileError(entry, f"unable to delete: {e}"))
            logging.error(f"Unable to delete {entry}: {e}")
            return
        self.deleted.append(entry)
        logging.info(f"Dropped extra {entry}")
