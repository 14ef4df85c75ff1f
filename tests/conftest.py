"""
Shared fixtures: an in-memory catalog source that answers system view queries.
"""

import copy
import re

import pytest

VIEW_PATTERN = re.compile(r'FROM\s+(EXA_\w+)', re.IGNORECASE)
DATA_PATTERN = re.compile(
    r'FROM\s+"((?:[^"]|"")+)"\."((?:[^"]|"")+)"\s+LIMIT\s+(\d+)', re.IGNORECASE
)

# Column scoping each schema-level system view to one schema
SCHEMA_COLUMNS = {
    'EXA_ALL_TABLES': 'TABLE_SCHEMA',
    'EXA_ALL_COLUMNS': 'COLUMN_SCHEMA',
    'EXA_ALL_CONSTRAINTS': 'CONSTRAINT_SCHEMA',
    'EXA_ALL_VIEWS': 'VIEW_SCHEMA',
    'EXA_ALL_FUNCTIONS': 'FUNCTION_SCHEMA',
    'EXA_ALL_SCRIPTS': 'SCRIPT_SCHEMA',
}


class FakeCatalogSource:
    """Catalog source serving rows from dictionaries keyed by system view."""

    def __init__(self, catalog=None, data=None):
        self.catalog = catalog if catalog is not None else {}
        self.data = data if data is not None else {}
        self.failures = {}
        self.queries = []

    def execute_query(self, query, params=None):
        self.queries.append((query, params))
        view = VIEW_PATTERN.search(query).group(1).upper()
        if view in self.failures:
            raise self.failures[view]

        rows = self.catalog.get(view, [])
        if params and 'schema' in params:
            column = SCHEMA_COLUMNS[view]
            rows = [r for r in rows if r.get(column) == params['schema']]
        if view == 'EXA_SCHEMAS' and 'schema_is_virtual = FALSE' in query:
            rows = [r for r in rows if not r.get('SCHEMA_IS_VIRTUAL')]
        return [dict(r) for r in rows]

    def iter_rows(self, query):
        self.queries.append((query, None))
        match = DATA_PATTERN.search(query)
        schema, name, limit = match.group(1), match.group(2), int(match.group(3))
        if (schema, name) in self.failures:
            raise self.failures[(schema, name)]
        yield from self.data.get((schema, name), [])[:limit]


def _schema(name, comment=None, virtual=False, size_limit=None, owner='SYS'):
    return {
        'SCHEMA_NAME': name,
        'SCHEMA_COMMENT': comment,
        'SCHEMA_IS_VIRTUAL': virtual,
        'RAW_OBJECT_SIZE_LIMIT': size_limit,
        'SCHEMA_OWNER': owner,
    }


def _column(table, name, type_='DECIMAL(18,0)', default=None, identity=None,
            dist=False, partition=None, comment=None, schema='test'):
    return {
        'COLUMN_SCHEMA': schema,
        'COLUMN_TABLE': table,
        'COLUMN_NAME': name,
        'COLUMN_TYPE': type_,
        'COLUMN_DEFAULT': default,
        'COLUMN_IDENTITY': identity,
        'COLUMN_IS_DISTRIBUTION_KEY': dist,
        'COLUMN_PARTITION_KEY_ORDINAL_POSITION': partition,
        'COLUMN_COMMENT': comment,
    }


def _constraint(table, type_, name, column, enabled=True, ref_table=None,
                ref_column=None, schema='test'):
    return {
        'CONSTRAINT_SCHEMA': schema,
        'CONSTRAINT_TABLE': table,
        'CONSTRAINT_TYPE': type_,
        'CONSTRAINT_NAME': name,
        'CONSTRAINT_ENABLED': enabled,
        'COLUMN_NAME': column,
        'REFERENCED_SCHEMA': schema if ref_table else None,
        'REFERENCED_TABLE': ref_table,
        'REFERENCED_COLUMN': ref_column,
    }


VIEW1_TEXT = (
    'CREATE OR REPLACE FORCE VIEW "test"."V1"\n'
    "  (c COMMENT IS 'column comment') AS\n"
    "    SELECT 'Hi Mom!!' AS col\n"
    "  COMMENT IS 'view comment'"
)
VIEW2_TEXT = 'CREATE OR REPLACE FORCE VIEW "test"."V2" AS SELECT 1 c'

FUNC1_TEXT = (
    '--/\n'
    'CREATE OR REPLACE FUNCTION "test"."F1" ()\n'
    'RETURN DECIMAL res DECIMAL; BEGIN RETURN 1; END;\n'
    '/\n'
)
FUNC2_TEXT = (
    'CREATE OR REPLACE FUNCTION "test"."F2" ()\n'
    'RETURN DECIMAL res DECIMAL; BEGIN RETURN 1; END\n'
)

UDF_TEXT = (
    'CREATE OR REPLACE LUA SCALAR SCRIPT "UDF_SCRIPT" () RETURNS DECIMAL(18,0) AS\n'
    'function run(ctx)\n'
    '    return 1\n'
    'end\n'
)


BASE_CATALOG = {
    'EXA_PARAMETERS': [
        {'PARAMETER_NAME': 'DEFAULT_LIKE_ESCAPE_CHARACTER', 'SYSTEM_VALUE': '\\'},
        {'PARAMETER_NAME': 'NICE', 'SYSTEM_VALUE': None},
        {'PARAMETER_NAME': 'NLS_FIRST_DAY_OF_WEEK', 'SYSTEM_VALUE': '7'},
        {'PARAMETER_NAME': 'QUERY_TIMEOUT', 'SYSTEM_VALUE': '0'},
        {'PARAMETER_NAME': 'SCRIPT_OUTPUT_ADDRESS', 'SYSTEM_VALUE': None},
    ],
    'EXA_SCHEMAS': [
        _schema('test', comment='HI MOM!!!', size_limit=1234567890, owner='JOE'),
        _schema('testvs', virtual=True),
    ],
    'EXA_ALL_VIRTUAL_SCHEMAS': [
        {'SCHEMA_NAME': 'testvs', 'ADAPTER_SCRIPT_SCHEMA': 'test',
         'ADAPTER_SCRIPT_NAME': 'VS_ADAPTER'},
    ],
    'EXA_ALL_VIRTUAL_SCHEMA_PROPERTIES': [
        {'SCHEMA_NAME': 'testvs', 'PROPERTY_NAME': 'A', 'PROPERTY_VALUE': 'b'},
        {'SCHEMA_NAME': 'testvs', 'PROPERTY_NAME': 'P', 'PROPERTY_VALUE': 'v'},
    ],
    'EXA_ALL_TABLES': [
        {'TABLE_SCHEMA': 'test', 'TABLE_NAME': 'T1', 'TABLE_COMMENT': None},
        {'TABLE_SCHEMA': 'test', 'TABLE_NAME': 'T2', 'TABLE_COMMENT': 'table comment'},
    ],
    'EXA_ALL_COLUMNS': [
        _column('T1', 'A'),
        _column('T1', 'B'),
        _column('T2', 'A', identity=321, dist=True, comment='column A comment'),
        _column('T2', 'B', dist=True, partition=1, comment='column B comment'),
        _column('T2', 'C', default='123', partition=2),
    ],
    'EXA_ALL_CONSTRAINTS': [
        _constraint('T1', 'PRIMARY KEY', 'SYS_PK_1', 'A'),
        _constraint('T1', 'PRIMARY KEY', 'SYS_PK_1', 'B'),
        _constraint('T2', 'FOREIGN KEY', 'SYS_FK_2', 'B', enabled=False,
                    ref_table='T1', ref_column='A'),
        _constraint('T2', 'FOREIGN KEY', 'SYS_FK_2', 'C', enabled=False,
                    ref_table='T1', ref_column='B'),
        _constraint('T2', 'NOT NULL', 'SYS_NN_3', 'A'),
        _constraint('T2', 'NOT NULL', 'cnst', 'C', enabled=False),
        _constraint('T2', 'PRIMARY KEY', 'mypk', 'A'),
        _constraint('T2', 'PRIMARY KEY', 'mypk', 'C'),
    ],
    'EXA_ALL_VIEWS': [
        {'VIEW_SCHEMA': 'test', 'VIEW_NAME': 'V1', 'SCOPE_SCHEMA': 'test', 'VIEW_TEXT': VIEW1_TEXT},
        {'VIEW_SCHEMA': 'test', 'VIEW_NAME': 'V2', 'SCOPE_SCHEMA': 'test', 'VIEW_TEXT': VIEW2_TEXT},
    ],
    'EXA_ALL_FUNCTIONS': [
        {'FUNCTION_SCHEMA': 'test', 'FUNCTION_NAME': 'F1', 'FUNCTION_TEXT': FUNC1_TEXT,
         'FUNCTION_COMMENT': 'func comment'},
        {'FUNCTION_SCHEMA': 'test', 'FUNCTION_NAME': 'F2', 'FUNCTION_TEXT': FUNC2_TEXT,
         'FUNCTION_COMMENT': None},
    ],
    'EXA_ALL_SCRIPTS': [
        {'SCRIPT_SCHEMA': 'test', 'SCRIPT_NAME': 'UDF_SCRIPT', 'SCRIPT_TEXT': UDF_TEXT,
         'SCRIPT_COMMENT': None},
    ],
    'EXA_DBA_USERS': [
        {'USER_NAME': 'JANE', 'PASSWORD': None, 'DISTINGUISHED_NAME': None,
         'KERBEROS_PRINCIPAL': 'jane', 'USER_COMMENT': None, 'PASSWORD_STATE': None,
         'PASSWORD_EXPIRY_POLICY': None, 'USER_PRIORITY': None},
        {'USER_NAME': 'JOE', 'PASSWORD': '12345678', 'DISTINGUISHED_NAME': None,
         'KERBEROS_PRINCIPAL': None, 'USER_COMMENT': 'a tough guy',
         'PASSWORD_STATE': 'EXPIRED',
         'PASSWORD_EXPIRY_POLICY': 'EXPIRY_DAYS=180:GRACE_DAYS=30',
         'USER_PRIORITY': 'Low'},
        {'USER_NAME': 'JOHN', 'PASSWORD': None, 'DISTINGUISHED_NAME': 'john',
         'KERBEROS_PRINCIPAL': None, 'USER_COMMENT': None, 'PASSWORD_STATE': None,
         'PASSWORD_EXPIRY_POLICY': None, 'USER_PRIORITY': None},
    ],
    'EXA_DBA_ROLES': [
        {'ROLE_NAME': 'DBA', 'ROLE_COMMENT': 'DBA stands for database administrator.',
         'ROLE_PRIORITY': None},
        {'ROLE_NAME': 'LUMBERJACKS', 'ROLE_COMMENT': 'tough guys', 'ROLE_PRIORITY': None},
        {'ROLE_NAME': 'PUBLIC', 'ROLE_COMMENT': "The PUBLIC role stands apart.",
         'ROLE_PRIORITY': None},
    ],
    'EXA_DBA_CONNECTIONS': [
        {'CONNECTION_NAME': 'CONN', 'CONNECTION_STRING': 'someplace', 'USER_NAME': 'joe',
         'CONNECTION_COMMENT': 'teleporter'},
    ],
    'EXA_PRIORITY_GROUPS': [
        {'PRIORITY_GROUP_NAME': 'Low', 'PRIORITY_GROUP_WEIGHT': 234,
         'PRIORITY_GROUP_COMMENT': None},
        {'PRIORITY_GROUP_NAME': 'MEDIUM', 'PRIORITY_GROUP_WEIGHT': 345,
         'PRIORITY_GROUP_COMMENT': None},
        {'PRIORITY_GROUP_NAME': 'custom', 'PRIORITY_GROUP_WEIGHT': 456,
         'PRIORITY_GROUP_COMMENT': 'the big cheeses'},
    ],
    'EXA_DBA_CONNECTION_PRIVS': [
        {'GRANTEE': 'JOE', 'GRANTED_CONNECTION': 'CONN', 'ADMIN_OPTION': True},
    ],
    'EXA_DBA_OBJ_PRIVS': [
        {'GRANTEE': 'JOE', 'PRIVILEGE': 'SELECT', 'OBJECT_SCHEMA': None,
         'OBJECT_NAME': 'test', 'OBJECT_TYPE': 'SCHEMA'},
        {'GRANTEE': 'LUMBERJACKS', 'PRIVILEGE': 'SELECT', 'OBJECT_SCHEMA': 'test',
         'OBJECT_NAME': 'T1', 'OBJECT_TYPE': 'TABLE'},
    ],
    'EXA_DBA_RESTRICTED_OBJ_PRIVS': [
        {'GRANTEE': 'JOE', 'PRIVILEGE': 'ACCESS', 'OBJECT_NAME': 'CONN',
         'OBJECT_TYPE': 'CONNECTION', 'FOR_OBJECT_SCHEMA': None,
         'FOR_OBJECT_NAME': 'test', 'FOR_OBJECT_TYPE': 'SCHEMA'},
    ],
    'EXA_DBA_ROLE_PRIVS': [
        {'GRANTEE': 'JOE', 'GRANTED_ROLE': 'PUBLIC', 'ADMIN_OPTION': False},
        {'GRANTEE': 'JOE', 'GRANTED_ROLE': 'DBA', 'ADMIN_OPTION': True},
        {'GRANTEE': 'SYS', 'GRANTED_ROLE': 'DBA', 'ADMIN_OPTION': True},
    ],
    'EXA_DBA_SYS_PRIVS': [
        {'GRANTEE': 'DBA', 'PRIVILEGE': 'CREATE SESSION', 'ADMIN_OPTION': True},
        {'GRANTEE': 'JOE', 'PRIVILEGE': 'SELECT ANY TABLE', 'ADMIN_OPTION': True},
    ],
    'EXA_DBA_IMPERSONATION_PRIVS': [
        {'GRANTEE': 'JOE', 'IMPERSONATION_ON': 'DBA'},
    ],
}
BASE_DATA = {
    ('test', 'T1'): [(2, 3), (3, 4)],
    ('test', 'T2'): [(1, 2, 3), (2, 3, 4)],
    ('test', 'V1'): [('Hi Mom!!',)],
    ('test', 'V2'): [(1,)],
}


@pytest.fixture
def catalog():
    """A fresh copy of the sample catalog."""
    return copy.deepcopy(BASE_CATALOG)


@pytest.fixture
def source(catalog):
    """A fake catalog source over the sample catalog and row data."""
    return FakeCatalogSource(catalog, copy.deepcopy(BASE_DATA))
