"""DDL building helpers for rebuilding Exasol objects from catalog rows."""

import re
from typing import Any, Optional

PLAIN_IDENTIFIER = re.compile(r'^[A-Z][A-Z0-9_]*$')

_NAME_PART = r'(?:"(?:[^"]|"")+"|\[[^\]]+\]|[A-Za-z_][\w$#]*)'
VIEW_HEADER_PATTERN = re.compile(
    rf'^(\s*CREATE\s+(?:OR\s+REPLACE\s+)?(?:FORCE\s+)?VIEW\s+)'
    rf'({_NAME_PART}(?:\s*\.\s*{_NAME_PART})?)',
    re.IGNORECASE
)

SYSTEM_NAME_PREFIX = 'SYS_'


def quote_ident(name: str) -> str:
    """Double-quote an identifier, as used in table DDL."""
    return '"' + name.replace('"', '""') + '"'


def bracket(name: str) -> str:
    """Bracket-quote an identifier, as used in OPEN SCHEMA and COMMENT ON."""
    return f'[{name}]'


def qualified(schema: Optional[str], name: str) -> str:
    if schema:
        return f'{bracket(schema)}.{bracket(name)}'
    return bracket(name)


def quote_literal(value: Any) -> str:
    """Single-quote a string literal, doubling embedded quotes."""
    if value is None:
        value = ''
    return "'" + str(value).replace("'", "''") + "'"


def principal(name: str) -> str:
    """Render a user, role or connection name, bare when it is a plain identifier."""
    if PLAIN_IDENTIFIER.match(name):
        return name
    return bracket(name)


def is_system_name(name: Optional[str]) -> bool:
    """True for constraint names generated by the database."""
    return not name or name.startswith(SYSTEM_NAME_PREFIX)


def _column_list(columns: list[str]) -> str:
    return ','.join(quote_ident(c) for c in columns)


def _group_constraints(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Fold one-row-per-column constraint rows into one entry per constraint."""
    groups: dict[tuple[str, str], dict[str, Any]] = {}
    for row in rows:
        key = (row['CONSTRAINT_TYPE'], row['CONSTRAINT_NAME'])
        group = groups.get(key)
        if group is None:
            group = {
                'type': row['CONSTRAINT_TYPE'],
                'name': row['CONSTRAINT_NAME'],
                'enabled': bool(row['CONSTRAINT_ENABLED']),
                'columns': [],
                'ref_schema': row.get('REFERENCED_SCHEMA'),
                'ref_table': row.get('REFERENCED_TABLE'),
                'ref_columns': [],
            }
            groups[key] = group
        group['columns'].append(row['COLUMN_NAME'])
        if row.get('REFERENCED_COLUMN'):
            group['ref_columns'].append(row['REFERENCED_COLUMN'])
    return list(groups.values())


def _constraint_prefix(name: str) -> str:
    if is_system_name(name):
        return ''
    return f'CONSTRAINT {quote_ident(name)} '


def build_table_ddl(
    schema: str,
    table: str,
    comment: Optional[str],
    columns: list[dict[str, Any]],
    constraints: list[dict[str, Any]]
) -> str:
    """
    Build a CREATE OR REPLACE TABLE statement from catalog rows.

    Args:
        schema: Schema holding the table.
        table: Table name.
        comment: Table comment, if any.
        columns: EXA_ALL_COLUMNS rows for the table in ordinal order.
        constraints: Constraint rows for the table, one per constrained column.

    Returns:
        The statement text without a trailing terminator.
    """
    groups = _group_constraints(constraints)
    not_null = {
        g['columns'][0]: g for g in groups if g['type'] == 'NOT NULL'
    }

    lines = []
    for col in columns:
        name = col['COLUMN_NAME']
        parts = [quote_ident(name), col['COLUMN_TYPE']]
        if col.get('COLUMN_DEFAULT') is not None:
            parts.append(f"DEFAULT {col['COLUMN_DEFAULT']}")
        if col.get('COLUMN_IDENTITY') is not None:
            parts.append(f"IDENTITY {col['COLUMN_IDENTITY']}")
        nn = not_null.get(name)
        if nn:
            clause = f"{_constraint_prefix(nn['name'])}NOT NULL"
            if not nn['enabled']:
                clause += ' DISABLE'
            parts.append(clause)
        if col.get('COLUMN_COMMENT'):
            parts.append(f"COMMENT IS {quote_literal(col['COLUMN_COMMENT'])}")
        lines.append(' '.join(parts))

    for group in groups:
        if group['type'] == 'FOREIGN KEY':
            clause = (
                f"{_constraint_prefix(group['name'])}FOREIGN KEY "
                f"({_column_list(group['columns'])}) REFERENCES "
                f"{quote_ident(group['ref_schema'])}.{quote_ident(group['ref_table'])} "
                f"({_column_list(group['ref_columns'])})"
            )
        elif group['type'] == 'PRIMARY KEY':
            clause = (
                f"{_constraint_prefix(group['name'])}PRIMARY KEY "
                f"({_column_list(group['columns'])})"
            )
        else:
            continue
        if not group['enabled']:
            clause += ' DISABLE'
        lines.append(clause)

    distribution = [c['COLUMN_NAME'] for c in columns if c.get('COLUMN_IS_DISTRIBUTION_KEY')]
    if distribution:
        lines.append(f"DISTRIBUTE BY {_column_list(distribution)}")

    partition = sorted(
        (c for c in columns if c.get('COLUMN_PARTITION_KEY_ORDINAL_POSITION')),
        key=lambda c: c['COLUMN_PARTITION_KEY_ORDINAL_POSITION']
    )
    if partition:
        lines.append(f"PARTITION BY {_column_list([c['COLUMN_NAME'] for c in partition])}")

    ddl = f"CREATE OR REPLACE TABLE {quote_ident(schema)}.{quote_ident(table)} (\n"
    ddl += ',\n'.join(f'    {line}' for line in lines)
    ddl += '\n)'
    if comment:
        ddl += f' COMMENT IS {quote_literal(comment)}'
    return ddl


def build_virtual_schema_ddl(
    name: str,
    adapter_schema: str,
    adapter_name: str,
    properties: list[tuple[str, Any]]
) -> str:
    """Build a CREATE VIRTUAL SCHEMA statement."""
    ddl = (
        f"CREATE VIRTUAL SCHEMA IF NOT EXISTS {bracket(name)}\n"
        f"    USING {qualified(adapter_schema, adapter_name)}"
    )
    if properties:
        ddl += '\n    WITH'
        for key, value in properties:
            ddl += f'\n        {key} = {quote_literal(value)}'
    return ddl


def build_create_user(row: dict[str, Any]) -> str:
    """Build a CREATE USER statement for the user's authentication method."""
    user = principal(row['USER_NAME'])
    if row.get('DISTINGUISHED_NAME'):
        return f"CREATE USER {user} IDENTIFIED AT LDAP AS {quote_literal(row['DISTINGUISHED_NAME'])}"
    if row.get('KERBEROS_PRINCIPAL'):
        return (
            f"CREATE USER {user} IDENTIFIED BY KERBEROS PRINCIPAL "
            f"{quote_literal(row['KERBEROS_PRINCIPAL'])}"
        )
    password = (row.get('PASSWORD') or '').replace('"', '""')
    return f'CREATE USER {user} IDENTIFIED BY "{password}"'


def _unquote(part: str) -> str:
    part = part.strip()
    if part.startswith('"'):
        return part[1:-1].replace('""', '"')
    if part.startswith('['):
        return part[1:-1]
    return part.upper()


def rename_view_header(text: str, schema: str, name: str) -> str:
    """
    Point a stored view definition at the view's current name.

    Exasol keeps the original CREATE text when a view is renamed. The
    header is rewritten only when its object name differs from ``name``.
    """
    match = VIEW_HEADER_PATTERN.match(text)
    if not match:
        return text
    target = match.group(2)
    last = re.findall(_NAME_PART, target)[-1]
    if _unquote(last) == name:
        return text
    replacement = f'{quote_ident(schema)}.{quote_ident(name)}'
    return text[:match.start(2)] + replacement + text[match.end(2):]
