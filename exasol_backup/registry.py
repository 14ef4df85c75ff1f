"""
Object kind registry for Exasol Backup.

Adding a kind means adding an entry to KIND_REGISTRY; the runner,
writer and reconciler are driven entirely by these entries.
"""

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Iterator, Optional

from . import extractor
from .models import ObjectKind, ObjectRecord
from .queries import CatalogQueries

ROOT = '.'


@dataclass(frozen=True)
class KindSpec:
    """Behavior of one object kind."""
    kind: ObjectKind
    extract: Callable[..., Iterator[ObjectRecord]]
    path: Callable[[ObjectRecord], PurePosixPath]
    queries: tuple[str, ...]
    # (directory glob relative to the destination, entry pattern)
    reconcile_scopes: tuple[tuple[str, str], ...]
    row_cap_attr: Optional[str] = None

    @property
    def exports_data(self) -> bool:
        return self.row_cap_attr is not None

    def data_path(self, record: ObjectRecord) -> PurePosixPath:
        return self.path(record).with_suffix('.csv')


def _flat(filename: str) -> Callable[[ObjectRecord], PurePosixPath]:
    return lambda record: PurePosixPath(filename)


def _principal(directory: str) -> Callable[[ObjectRecord], PurePosixPath]:
    return lambda record: PurePosixPath(directory, f'{record.name}.sql')


def _schema_scoped(directory: str) -> Callable[[ObjectRecord], PurePosixPath]:
    return lambda record: PurePosixPath('schemas', record.schema, directory, f'{record.name}.sql')


def _schema_file(record: ObjectRecord) -> PurePosixPath:
    return PurePosixPath('schemas', record.name, 'schema.sql')


GRANT_QUERIES = tuple(source[0] for source in extractor.GRANT_SOURCES)

KIND_REGISTRY: dict[ObjectKind, KindSpec] = {
    spec.kind: spec for spec in (
        KindSpec(
            kind=ObjectKind.PARAMETERS,
            extract=extractor.extract_parameters,
            path=_flat('parameters.sql'),
            queries=(CatalogQueries.PARAMETERS,),
            reconcile_scopes=((ROOT, 'parameters.sql'),),
        ),
        KindSpec(
            kind=ObjectKind.SCHEMAS,
            extract=extractor.extract_schemas,
            path=_schema_file,
            queries=(
                CatalogQueries.SCHEMAS,
                CatalogQueries.VIRTUAL_SCHEMAS,
                CatalogQueries.VIRTUAL_SCHEMA_PROPERTIES,
            ),
            reconcile_scopes=(('schemas', '*'),),
        ),
        KindSpec(
            kind=ObjectKind.TABLES,
            extract=extractor.extract_tables,
            path=_schema_scoped('tables'),
            queries=(
                CatalogQueries.LOCAL_SCHEMAS,
                CatalogQueries.TABLES,
                CatalogQueries.COLUMNS,
                CatalogQueries.CONSTRAINTS,
            ),
            reconcile_scopes=(('schemas/*/tables', '*'),),
            row_cap_attr='max_table_rows',
        ),
        KindSpec(
            kind=ObjectKind.VIEWS,
            extract=extractor.extract_views,
            path=_schema_scoped('views'),
            queries=(CatalogQueries.LOCAL_SCHEMAS, CatalogQueries.VIEWS),
            reconcile_scopes=(('schemas/*/views', '*'),),
            row_cap_attr='max_view_rows',
        ),
        KindSpec(
            kind=ObjectKind.FUNCTIONS,
            extract=extractor.extract_functions,
            path=_schema_scoped('functions'),
            queries=(CatalogQueries.LOCAL_SCHEMAS, CatalogQueries.FUNCTIONS),
            reconcile_scopes=(('schemas/*/functions', '*'),),
        ),
        KindSpec(
            kind=ObjectKind.SCRIPTS,
            extract=extractor.extract_scripts,
            path=_schema_scoped('scripts'),
            queries=(CatalogQueries.LOCAL_SCHEMAS, CatalogQueries.SCRIPTS),
            reconcile_scopes=(('schemas/*/scripts', '*'),),
        ),
        KindSpec(
            kind=ObjectKind.USERS,
            extract=extractor.extract_users,
            path=_principal('users'),
            queries=(CatalogQueries.USERS,) + GRANT_QUERIES,
            reconcile_scopes=(('users', '*'),),
        ),
        KindSpec(
            kind=ObjectKind.ROLES,
            extract=extractor.extract_roles,
            path=_principal('roles'),
            queries=(CatalogQueries.ROLES,) + GRANT_QUERIES,
            reconcile_scopes=(('roles', '*'),),
        ),
        KindSpec(
            kind=ObjectKind.CONNECTIONS,
            extract=extractor.extract_connections,
            path=_flat('connections.sql'),
            queries=(CatalogQueries.CONNECTIONS,),
            reconcile_scopes=((ROOT, 'connections.sql'),),
        ),
        KindSpec(
            kind=ObjectKind.PRIORITY_GROUPS,
            extract=extractor.extract_priority_groups,
            path=_flat('priority_groups.sql'),
            queries=(CatalogQueries.PRIORITY_GROUPS,),
            reconcile_scopes=((ROOT, 'priority_groups.sql'),),
        ),
        KindSpec(
            kind=ObjectKind.PRIVILEGES,
            extract=extractor.extract_privileges,
            path=_flat('privileges.sql'),
            queries=(CatalogQueries.USERS, CatalogQueries.ROLES) + GRANT_QUERIES,
            reconcile_scopes=((ROOT, 'privileges.sql'),),
        ),
    )
}


def get_kind_spec(kind: ObjectKind) -> KindSpec:
    """Look up the registry entry for a kind."""
    return KIND_REGISTRY[kind]


def extract(kind: ObjectKind, source) -> Iterator[ObjectRecord]:
    """Yield the object records of one kind from the catalog source."""
    return get_kind_spec(kind).extract(source)
