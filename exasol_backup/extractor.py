"""
Catalog extraction for Exasol Backup.

Each ``extract_*`` generator issues the catalog queries for one object kind
and yields one ObjectRecord per file to be written.
"""

import logging
from typing import Any, Iterator, Optional

from .ddl import (
    bracket,
    build_create_user,
    build_table_ddl,
    build_virtual_schema_ddl,
    principal,
    qualified,
    quote_literal,
    rename_view_header,
)
from .exceptions import ExtractionError
from .models import ObjectKind, ObjectRecord, Terminator
from .queries import CatalogQueries

BUILTIN_ROLES = ('DBA', 'PUBLIC')
DEFAULT_PRIORITY_GROUP = 'MEDIUM'
EXCLUDED_PARAMETERS = ('NICE',)
UNQUOTED_PARAMETERS = ('NLS_FIRST_DAY_OF_WEEK',)


def run_query(
    source,
    kind: ObjectKind,
    query: str,
    params: Optional[dict[str, Any]] = None,
    required: tuple[str, ...] = (),
    schema: Optional[str] = None
) -> list[dict[str, Any]]:
    """Run a catalog query, checking every row carries the required columns."""
    logging.debug(f"[{kind.value}] {' '.join(query.split())[:200]}")
    try:
        rows = source.execute_query(query, params)
    except Exception as e:
        raise ExtractionError(kind, f"catalog query failed: {e}", schema) from e

    for row in rows:
        missing = [col for col in required if col not in row]
        if missing:
            raise ExtractionError(
                kind, f"catalog row is missing column(s): {', '.join(missing)}", schema
            )
    return rows


def _group_by(rows: list[dict[str, Any]], key: str) -> dict[str, list[dict[str, Any]]]:
    grouped: dict[str, list[dict[str, Any]]] = {}
    for row in rows:
        grouped.setdefault(row[key], []).append(row)
    return grouped


def _admin_option(row: dict[str, Any]) -> str:
    return ' WITH ADMIN OPTION' if row.get('ADMIN_OPTION') else ''


# -- Database-global kinds ---------------------------------------------------

def extract_parameters(source) -> Iterator[ObjectRecord]:
    kind = ObjectKind.PARAMETERS
    rows = run_query(source, kind, CatalogQueries.PARAMETERS, required=('PARAMETER_NAME',))

    record = ObjectRecord(kind, 'parameters')
    for row in rows:
        name = row['PARAMETER_NAME']
        if name in EXCLUDED_PARAMETERS:
            continue
        value = row.get('SYSTEM_VALUE')
        if name in UNQUOTED_PARAMETERS and value is not None:
            rendered = str(value)
        else:
            rendered = quote_literal(value)
        record.add(f"ALTER SYSTEM SET {name}={rendered}")

    if record.fragments:
        yield record


def extract_connections(source) -> Iterator[ObjectRecord]:
    """
    Connections share one file. The catalog never exposes connection
    passwords, so an empty secret literal is emitted and later masked.
    """
    kind = ObjectKind.CONNECTIONS
    rows = run_query(source, kind, CatalogQueries.CONNECTIONS, required=('CONNECTION_NAME',))

    record = ObjectRecord(kind, 'connections')
    for row in rows:
        name = principal(row['CONNECTION_NAME'])
        statement = (
            f"CREATE OR REPLACE CONNECTION {name} "
            f"TO {quote_literal(row.get('CONNECTION_STRING'))}"
        )
        if row.get('USER_NAME'):
            statement += (
                f" USER {quote_literal(row['USER_NAME'])}"
                f" IDENTIFIED BY {quote_literal(row.get('PASSWORD'))}"
            )
        record.add(statement)
        if row.get('CONNECTION_COMMENT'):
            record.add(f"COMMENT ON CONNECTION {name} IS {quote_literal(row['CONNECTION_COMMENT'])}")

    if record.fragments:
        yield record


def extract_priority_groups(source) -> Iterator[ObjectRecord]:
    kind = ObjectKind.PRIORITY_GROUPS
    rows = run_query(
        source, kind, CatalogQueries.PRIORITY_GROUPS,
        required=('PRIORITY_GROUP_NAME', 'PRIORITY_GROUP_WEIGHT')
    )

    record = ObjectRecord(kind, 'priority_groups')
    for row in rows:
        group = bracket(row['PRIORITY_GROUP_NAME'])
        weight = row['PRIORITY_GROUP_WEIGHT']
        # MEDIUM is the default group and cannot be dropped
        if row['PRIORITY_GROUP_NAME'] == DEFAULT_PRIORITY_GROUP:
            record.add(f"ALTER PRIORITY GROUP {group} SET WEIGHT = {weight}")
        else:
            record.add(f"DROP PRIORITY GROUP {group}")
            record.add(f"CREATE PRIORITY GROUP {group} WITH WEIGHT = {weight}")
        if row.get('PRIORITY_GROUP_COMMENT'):
            record.add(
                f"COMMENT ON PRIORITY GROUP {group} IS "
                f"{quote_literal(row['PRIORITY_GROUP_COMMENT'])}"
            )

    if record.fragments:
        yield record


# -- Principals and grants ---------------------------------------------------

def _connection_grant(row: dict[str, Any], grantee: str) -> Optional[str]:
    return (
        f"GRANT CONNECTION {principal(row['GRANTED_CONNECTION'])} "
        f"TO {grantee}{_admin_option(row)}"
    )


def _object_grant(row: dict[str, Any], grantee: str) -> Optional[str]:
    if row['OBJECT_TYPE'] == 'SCHEMA':
        target = f"SCHEMA {bracket(row['OBJECT_NAME'])}"
    else:
        target = qualified(row.get('OBJECT_SCHEMA'), row['OBJECT_NAME'])
    return f"GRANT {row['PRIVILEGE']} ON {target} TO {grantee}"


def _restricted_grant(row: dict[str, Any], grantee: str) -> Optional[str]:
    if row['FOR_OBJECT_TYPE'] == 'SCHEMA':
        target = bracket(row['FOR_OBJECT_NAME'])
    else:
        target = qualified(row.get('FOR_OBJECT_SCHEMA'), row['FOR_OBJECT_NAME'])
    return (
        f"GRANT {row['PRIVILEGE']} ON {row['OBJECT_TYPE']} {bracket(row['OBJECT_NAME'])} "
        f"FOR {row['FOR_OBJECT_TYPE']} {target} TO {grantee}"
    )


def _role_grant(row: dict[str, Any], grantee: str) -> Optional[str]:
    # Every principal holds PUBLIC implicitly
    if row['GRANTED_ROLE'] == 'PUBLIC':
        return None
    return (
        f"GRANT {principal(row['GRANTED_ROLE'])} "
        f"TO {grantee}{_admin_option(row)}"
    )


def _system_grant(row: dict[str, Any], grantee: str) -> Optional[str]:
    return f"GRANT {row['PRIVILEGE']} TO {grantee}{_admin_option(row)}"


def _impersonation_grant(row: dict[str, Any], grantee: str) -> Optional[str]:
    return (
        f"GRANT IMPERSONATION ON {principal(row['IMPERSONATION_ON'])} "
        f"TO {grantee}"
    )


def _schema_owner(row: dict[str, Any], grantee: str) -> Optional[str]:
    return f"ALTER SCHEMA {bracket(row['SCHEMA_NAME'])} CHANGE OWNER {grantee}"


# Category order of grants within a principal's script:
# (query, grantee column, other required columns, renderer)
GRANT_SOURCES = (
    (CatalogQueries.CONNECTION_PRIVS, 'GRANTEE', ('GRANTED_CONNECTION',), _connection_grant),
    (
        CatalogQueries.OBJECT_PRIVS, 'GRANTEE',
        ('PRIVILEGE', 'OBJECT_NAME', 'OBJECT_TYPE'), _object_grant,
    ),
    (
        CatalogQueries.RESTRICTED_PRIVS, 'GRANTEE',
        ('PRIVILEGE', 'OBJECT_NAME', 'OBJECT_TYPE', 'FOR_OBJECT_NAME', 'FOR_OBJECT_TYPE'),
        _restricted_grant,
    ),
    (CatalogQueries.ROLE_PRIVS, 'GRANTEE', ('GRANTED_ROLE',), _role_grant),
    (CatalogQueries.SYSTEM_PRIVS, 'GRANTEE', ('PRIVILEGE',), _system_grant),
    (CatalogQueries.IMPERSONATION_PRIVS, 'GRANTEE', ('IMPERSONATION_ON',), _impersonation_grant),
    (CatalogQueries.SCHEMA_OWNERS, 'SCHEMA_OWNER', ('SCHEMA_NAME',), _schema_owner),
)


def collect_grants(source, kind: ObjectKind) -> dict[str, list[str]]:
    """
    Read every grant view once and group the rendered statements by grantee.

    Statements keep the category order of GRANT_SOURCES and, within a
    category, the order in which the catalog returned them.
    """
    grants: dict[str, list[str]] = {}
    for query, grantee_column, columns, render in GRANT_SOURCES:
        rows = run_query(source, kind, query, required=(grantee_column,) + columns)
        for row in rows:
            grantee = row[grantee_column]
            statement = render(row, principal(grantee))
            if statement:
                grants.setdefault(grantee, []).append(statement)
    return grants


def principal_grants(
    name: str,
    priority_group: Optional[str],
    grants: dict[str, list[str]]
) -> list[str]:
    """All grant statements for one user or role, priority group first."""
    statements = []
    if priority_group:
        statements.append(f"GRANT PRIORITY GROUP {bracket(priority_group)} TO {principal(name)}")
    statements.extend(grants.get(name, []))
    return statements


def _user_rows(source, kind: ObjectKind) -> list[dict[str, Any]]:
    return run_query(source, kind, CatalogQueries.USERS, required=('USER_NAME',))


def _role_rows(source, kind: ObjectKind) -> list[dict[str, Any]]:
    return run_query(source, kind, CatalogQueries.ROLES, required=('ROLE_NAME',))


def extract_users(source) -> Iterator[ObjectRecord]:
    kind = ObjectKind.USERS
    users = _user_rows(source, kind)
    grants = collect_grants(source, kind)

    for row in users:
        name = row['USER_NAME']
        user = principal(name)
        record = ObjectRecord(kind, name)
        record.add(build_create_user(row))
        if row.get('USER_COMMENT'):
            record.add(f"COMMENT ON USER {user} IS {quote_literal(row['USER_COMMENT'])}")
        if row.get('PASSWORD_EXPIRY_POLICY'):
            record.add(
                f"ALTER USER {user} SET PASSWORD_EXPIRY_POLICY="
                f"{quote_literal(row['PASSWORD_EXPIRY_POLICY'])}"
            )
        if row.get('PASSWORD_STATE') == 'EXPIRED':
            record.add(f"ALTER USER {user} PASSWORD EXPIRE")
        for statement in principal_grants(name, row.get('USER_PRIORITY'), grants):
            record.add(statement)
        yield record


def extract_roles(source) -> Iterator[ObjectRecord]:
    kind = ObjectKind.ROLES
    roles = _role_rows(source, kind)
    grants = collect_grants(source, kind)

    for row in roles:
        name = row['ROLE_NAME']
        role = principal(name)
        record = ObjectRecord(kind, name)
        if name not in BUILTIN_ROLES:
            record.add(f"CREATE ROLE {role}")
        if row.get('ROLE_COMMENT'):
            record.add(f"COMMENT ON ROLE {role} IS {quote_literal(row['ROLE_COMMENT'])}")
        # DBA implicitly holds every privilege
        if name != 'DBA':
            for statement in principal_grants(name, row.get('ROLE_PRIORITY'), grants):
                record.add(statement)

        if not record.fragments:
            logging.debug(f"Role '{name}' has nothing to back up")
            continue
        yield record


def extract_privileges(source) -> Iterator[ObjectRecord]:
    """Every grant of every user, then every role, in a single script."""
    kind = ObjectKind.PRIVILEGES
    users = _user_rows(source, kind)
    roles = _role_rows(source, kind)
    grants = collect_grants(source, kind)

    record = ObjectRecord(kind, 'privileges')
    for row in users:
        for statement in principal_grants(row['USER_NAME'], row.get('USER_PRIORITY'), grants):
            record.add(statement)
    for row in roles:
        if row['ROLE_NAME'] == 'DBA':
            continue
        for statement in principal_grants(row['ROLE_NAME'], row.get('ROLE_PRIORITY'), grants):
            record.add(statement)

    if record.fragments:
        yield record


# -- Schema-scoped kinds -----------------------------------------------------

def extract_schemas(source) -> Iterator[ObjectRecord]:
    kind = ObjectKind.SCHEMAS
    schemas = run_query(
        source, kind, CatalogQueries.SCHEMAS, required=('SCHEMA_NAME', 'SCHEMA_IS_VIRTUAL')
    )
    adapters = {
        row['SCHEMA_NAME']: row
        for row in run_query(
            source, kind, CatalogQueries.VIRTUAL_SCHEMAS,
            required=('SCHEMA_NAME', 'ADAPTER_SCRIPT_SCHEMA', 'ADAPTER_SCRIPT_NAME')
        )
    }
    properties = _group_by(
        run_query(
            source, kind, CatalogQueries.VIRTUAL_SCHEMA_PROPERTIES,
            required=('SCHEMA_NAME', 'PROPERTY_NAME', 'PROPERTY_VALUE')
        ),
        'SCHEMA_NAME'
    )

    for row in schemas:
        name = row['SCHEMA_NAME']
        record = ObjectRecord(kind, name)

        if row['SCHEMA_IS_VIRTUAL']:
            adapter = adapters.get(name)
            if adapter is None:
                raise ExtractionError(kind, f"no adapter found for virtual schema '{name}'")
            record.add(build_virtual_schema_ddl(
                name,
                adapter['ADAPTER_SCRIPT_SCHEMA'],
                adapter['ADAPTER_SCRIPT_NAME'],
                [(p['PROPERTY_NAME'], p['PROPERTY_VALUE']) for p in properties.get(name, [])]
            ))
        else:
            record.add(f"CREATE SCHEMA IF NOT EXISTS {bracket(name)}")
            if row.get('SCHEMA_COMMENT'):
                record.add(f"COMMENT ON SCHEMA {bracket(name)} IS {quote_literal(row['SCHEMA_COMMENT'])}")
            if row.get('RAW_OBJECT_SIZE_LIMIT'):
                record.add(
                    f"ALTER SCHEMA {bracket(name)} SET RAW_SIZE_LIMIT = {row['RAW_OBJECT_SIZE_LIMIT']}"
                )
        yield record


def local_schemas(source, kind: ObjectKind) -> list[str]:
    """Names of the non-virtual schemas, which hold the schema-scoped objects."""
    rows = run_query(source, kind, CatalogQueries.LOCAL_SCHEMAS, required=('SCHEMA_NAME',))
    return [row['SCHEMA_NAME'] for row in rows]


def extract_tables(source) -> Iterator[ObjectRecord]:
    kind = ObjectKind.TABLES
    for schema in local_schemas(source, kind):
        params = {'schema': schema}
        tables = run_query(
            source, kind, CatalogQueries.TABLES, params,
            required=('TABLE_NAME',), schema=schema
        )
        if not tables:
            continue

        columns = _group_by(run_query(
            source, kind, CatalogQueries.COLUMNS, params,
            required=('COLUMN_TABLE', 'COLUMN_NAME', 'COLUMN_TYPE'), schema=schema
        ), 'COLUMN_TABLE')
        constraints = _group_by(run_query(
            source, kind, CatalogQueries.CONSTRAINTS, params,
            required=(
                'CONSTRAINT_TABLE', 'CONSTRAINT_TYPE', 'CONSTRAINT_NAME',
                'CONSTRAINT_ENABLED', 'COLUMN_NAME'
            ),
            schema=schema
        ), 'CONSTRAINT_TABLE')

        for row in tables:
            name = row['TABLE_NAME']
            table_columns = columns.get(name)
            if not table_columns:
                raise ExtractionError(kind, f"no columns found for table '{name}'", schema)
            record = ObjectRecord(kind, name, schema)
            record.add(build_table_ddl(
                schema, name, row.get('TABLE_COMMENT'),
                table_columns, constraints.get(name, [])
            ))
            yield record


def extract_views(source) -> Iterator[ObjectRecord]:
    kind = ObjectKind.VIEWS
    for schema in local_schemas(source, kind):
        views = run_query(
            source, kind, CatalogQueries.VIEWS, {'schema': schema},
            required=('VIEW_NAME', 'VIEW_TEXT'), schema=schema
        )
        for row in views:
            name = row['VIEW_NAME']
            # Views resolve unqualified names against the schema open at creation
            record = ObjectRecord(kind, name, schema, open_schema=row.get('SCOPE_SCHEMA') or schema)
            record.add(rename_view_header(row['VIEW_TEXT'], schema, name))
            yield record


def _extract_routines(
    source,
    kind: ObjectKind,
    query: str,
    prefix: str,
    object_type: str
) -> Iterator[ObjectRecord]:
    name_col, text_col, comment_col = f'{prefix}_NAME', f'{prefix}_TEXT', f'{prefix}_COMMENT'
    for schema in local_schemas(source, kind):
        rows = run_query(
            source, kind, query, {'schema': schema},
            required=(name_col, text_col), schema=schema
        )
        for row in rows:
            name = row[name_col]
            record = ObjectRecord(kind, name, schema, open_schema=schema)
            record.add(row[text_col], Terminator.BLOCK)
            if row.get(comment_col):
                record.add(
                    f"COMMENT ON {object_type} {qualified(schema, name)} "
                    f"IS {quote_literal(row[comment_col])}"
                )
            yield record


def extract_functions(source) -> Iterator[ObjectRecord]:
    return _extract_routines(
        source, ObjectKind.FUNCTIONS, CatalogQueries.FUNCTIONS, 'FUNCTION', 'FUNCTION'
    )


def extract_scripts(source) -> Iterator[ObjectRecord]:
    return _extract_routines(
        source, ObjectKind.SCRIPTS, CatalogQueries.SCRIPTS, 'SCRIPT', 'SCRIPT'
    )
