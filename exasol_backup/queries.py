"""Exasol system view queries used to rebuild the object inventory.

Placeholders in ``{braces}`` are filled by pyexasol as quoted string literals.
"""


class CatalogQueries:
    """Collection of Exasol catalog queries."""

    PARAMETERS = """
        SELECT parameter_name, system_value
        FROM EXA_PARAMETERS
        ORDER BY parameter_name
    """

    # Regular and virtual schemas with their size limit
    SCHEMAS = """
        SELECT s.schema_name, s.schema_comment, s.schema_is_virtual,
               o.raw_object_size_limit
        FROM EXA_SCHEMAS s
        LEFT JOIN EXA_ALL_OBJECT_SIZES o
          ON o.object_name = s.schema_name
         AND o.object_type = 'SCHEMA'
        ORDER BY s.schema_name
    """

    # Schemas holding tables, views, functions and scripts
    LOCAL_SCHEMAS = """
        SELECT schema_name
        FROM EXA_SCHEMAS
        WHERE schema_is_virtual = FALSE
        ORDER BY schema_name
    """

    VIRTUAL_SCHEMAS = """
        SELECT schema_name, adapter_script_schema, adapter_script_name
        FROM EXA_ALL_VIRTUAL_SCHEMAS
        ORDER BY schema_name
    """

    VIRTUAL_SCHEMA_PROPERTIES = """
        SELECT schema_name, property_name, property_value
        FROM EXA_ALL_VIRTUAL_SCHEMA_PROPERTIES
        ORDER BY schema_name, property_name
    """

    TABLES = """
        SELECT table_name, table_comment
        FROM EXA_ALL_TABLES
        WHERE table_schema = {schema}
        ORDER BY table_name
    """

    COLUMNS = """
        SELECT column_table, column_name, column_type, column_default,
               column_identity, column_is_distribution_key,
               column_partition_key_ordinal_position, column_comment
        FROM EXA_ALL_COLUMNS
        WHERE column_schema = {schema}
        AND column_object_type = 'TABLE'
        ORDER BY column_table, column_ordinal_position
    """

    CONSTRAINTS = """
        SELECT c.constraint_table, c.constraint_type, c.constraint_name,
               c.constraint_enabled, cc.column_name, cc.referenced_schema,
               cc.referenced_table, cc.referenced_column
        FROM EXA_ALL_CONSTRAINTS c
        JOIN EXA_ALL_CONSTRAINT_COLUMNS cc
          ON cc.constraint_schema = c.constraint_schema
         AND cc.constraint_table = c.constraint_table
         AND cc.constraint_name = c.constraint_name
        WHERE c.constraint_schema = {schema}
        ORDER BY c.constraint_table, c.constraint_type, c.constraint_name,
                 cc.ordinal_position
    """

    VIEWS = """
        SELECT view_name, scope_schema, view_text
        FROM EXA_ALL_VIEWS
        WHERE view_schema = {schema}
        ORDER BY view_name
    """

    FUNCTIONS = """
        SELECT function_name, function_text, function_comment
        FROM EXA_ALL_FUNCTIONS
        WHERE function_schema = {schema}
        ORDER BY function_name
    """

    SCRIPTS = """
        SELECT script_name, script_text, script_comment
        FROM EXA_ALL_SCRIPTS
        WHERE script_schema = {schema}
        ORDER BY script_name
    """

    USERS = """
        SELECT user_name, password, distinguished_name, kerberos_principal,
               user_comment, password_state, password_expiry_policy,
               user_priority
        FROM EXA_DBA_USERS
        WHERE user_name <> 'SYS'
        ORDER BY user_name
    """

    ROLES = """
        SELECT role_name, role_comment, role_priority
        FROM EXA_DBA_ROLES
        ORDER BY role_name
    """

    CONNECTIONS = """
        SELECT connection_name, connection_string, user_name,
               connection_comment
        FROM EXA_DBA_CONNECTIONS
        ORDER BY connection_name
    """

    PRIORITY_GROUPS = """
        SELECT priority_group_name, priority_group_weight,
               priority_group_comment
        FROM EXA_PRIORITY_GROUPS
        ORDER BY priority_group_name
    """

    # Grant views are read in catalog order, without ORDER BY
    CONNECTION_PRIVS = """
        SELECT grantee, granted_connection, admin_option
        FROM EXA_DBA_CONNECTION_PRIVS
    """

    OBJECT_PRIVS = """
        SELECT grantee, privilege, object_schema, object_name, object_type
        FROM EXA_DBA_OBJ_PRIVS
    """

    RESTRICTED_PRIVS = """
        SELECT grantee, privilege, object_name, object_type,
               for_object_schema, for_object_name, for_object_type
        FROM EXA_DBA_RESTRICTED_OBJ_PRIVS
    """

    ROLE_PRIVS = """
        SELECT grantee, granted_role, admin_option
        FROM EXA_DBA_ROLE_PRIVS
    """

    SYSTEM_PRIVS = """
        SELECT grantee, privilege, admin_option
        FROM EXA_DBA_SYS_PRIVS
    """

    IMPERSONATION_PRIVS = """
        SELECT grantee, impersonation_on
        FROM EXA_DBA_IMPERSONATION_PRIVS
    """

    SCHEMA_OWNERS = """
        SELECT schema_owner, schema_name
        FROM EXA_SCHEMAS
    """
