"""
Main backup orchestration for Exasol Backup.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from .data_exporter import DataExporter
from .exceptions import ExtractionError, SerializationError, WriteError
from .models import BackupConfig, BackupStats, KindStats, ObjectKind, ObjectRecord
from .reconciler import Reconciler
from .registry import KindSpec, get_kind_spec
from .serializer import serialize
from .writer import TreeWriter


class BackupRunner:
    """Main class for backup operations."""

    def __init__(self, config: BackupConfig):
        self.config = config
        self.writer = TreeWriter(config.destination)
        self.exporter = DataExporter()
        self.stats = BackupStats()

    def run(self) -> BackupStats:
        """
        Back up every requested kind, then drop extras when enabled.

        Kinds run concurrently on up to ``config.workers`` threads. Stale
        entries are only removed for kinds that completed without errors,
        and never after a cancelled run.
        """
        self.config.destination.mkdir(parents=True, exist_ok=True)
        kinds = self.config.kinds
        logging.info(f"Starting backup of {len(kinds)} object kind(s) to {self.config.destination}")

        results: dict[ObjectKind, KindStats] = {}
        pool = ThreadPoolExecutor(max_workers=self.config.workers)
        try:
            futures = {pool.submit(self._backup_kind, kind): kind for kind in kinds}
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        except KeyboardInterrupt:
            self.stats.cancelled = True
            logging.warning("Backup cancelled, waiting for running kinds to finish")
            pool.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            pool.shutdown(wait=True)

        for kind in kinds:
            kind_stats = results[kind]
            self.stats.kinds.append(kind_stats)
            self.stats.total_objects += kind_stats.objects
            self.stats.total_files += kind_stats.files_written
            self.stats.total_rows += kind_stats.rows_exported
            self.stats.errors.extend(kind_stats.errors)

        if self.config.drop_extras:
            self._drop_extras(results)

        return self.stats

    def _backup_kind(self, kind: ObjectKind) -> KindStats:
        """Extract, serialize and write all objects of one kind."""
        spec = get_kind_spec(kind)
        kind_stats = KindStats(kind=kind)
        logging.info(f"Backing up {kind.value}")

        try:
            for record in spec.extract(self.config.source):
                self._backup_record(spec, record, kind_stats)
        except ExtractionError as e:
            logging.error(f"Extraction of {kind.value} failed: {e}")
            kind_stats.errors.append(e)
        except Exception as e:
            logging.exception(f"Unexpected error backing up {kind.value}")
            kind_stats.errors.append(e)

        self._log_kind_result(kind_stats)
        return kind_stats

    def _backup_record(self, spec: KindSpec, record: ObjectRecord, kind_stats: KindStats) -> None:
        """Write one object's script and, when requested, its data."""
        kind_stats.objects += 1

        try:
            text = serialize(record)
        except SerializationError as e:
            logging.exception(f"Unable to serialize {record.label}")
            kind_stats.errors.append(e)
            return

        try:
            self.writer.write(spec.path(record), text)
            kind_stats.files_written += 1
        except WriteError as e:
            logging.error(f"Unable to write {record.label}: {e}")
            kind_stats.errors.append(e)
            return

        if not spec.exports_data:
            return

        row_cap = self.config.row_cap(spec.row_cap_attr)
        data_path = spec.data_path(record)
        if row_cap == 0:
            # Data of live objects is left as it is
            self.writer.keep(data_path)
            return

        try:
            with self.writer.open(data_path) as handle:
                rows = self.exporter.export_rows(self.config.source, record, row_cap, handle)
        except (ExtractionError, WriteError) as e:
            logging.error(f"Unable to export data of {record.label}: {e}")
            kind_stats.errors.append(e)
            return

        kind_stats.files_written += 1
        kind_stats.rows_exported += rows
        logging.debug(f"Exported {rows} row(s) of {record.label}")

    def _drop_extras(self, results: dict[ObjectKind, KindStats]) -> None:
        reconciler = Reconciler(self.writer)
        for kind in self.config.kinds:
            if not results[kind].success:
                logging.warning(f"Not dropping extras for {kind.value}: backup had errors")
                continue
            reconciler.reconcile(get_kind_spec(kind))

        self.stats.deleted.extend(reconciler.deleted)
        self.stats.errors.extend(reconciler.errors)

    def _log_kind_result(self, kind_stats: KindStats) -> None:
        """Log the result of a kind backup."""
        if kind_stats.success:
            logging.info(
                f"  ✓ {kind_stats.kind.value}: {kind_stats.objects} object(s), "
                f"{kind_stats.files_written} file(s)"
            )
        else:
            logging.error(
                f"  ✗ {kind_stats.kind.value}: {len(kind_stats.errors)} error(s)"
            )
