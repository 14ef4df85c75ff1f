#!/usr/bin/env python3
"""
Exasol Backup - CLI Entry Point
===============================
Back up the object inventory of an Exasol database into a diffable tree of
SQL scripts:
- System parameters, schemas, tables, views, functions and scripts
- Users, roles, connections, priority groups and privileges
- Optional CSV snapshots of table and view rows
- Removal of entries for objects that no longer exist (--drop-extras)
"""

import argparse
import logging
import os
import sys

import yaml

from .backup_runner import BackupRunner
from .config import ConfigLoader, build_backup_config, parse_bool, parse_int
from .connection import ExasolConnection
from .models import ObjectKind
from .utils import print_dry_run_info, setup_logging

PASSWORD_ENV_VAR = 'EXASOL_PASSWORD'


def parse_args(argv=None) -> argparse.Namespace:
    kind_names = ', '.join(['all'] + [kind.value for kind in ObjectKind])
    parser = argparse.ArgumentParser(
        description='Exasol Backup - Dump database objects to versionable SQL files'
    )
    parser.add_argument(
        '-c', '--config',
        help='Path to configuration file'
    )
    parser.add_argument('--host', help='Exasol hostname')
    parser.add_argument('--port', type=int, help='Exasol port')
    parser.add_argument('--user', help='Exasol user')
    parser.add_argument(
        '--dest',
        help='Destination directory of the backup'
    )
    parser.add_argument(
        '--objects',
        help=f'Comma separated object kinds to back up ({kind_names})'
    )
    parser.add_argument(
        '--max-table-rows',
        type=int,
        help='Export up to this many rows per table as CSV (0 = no data)'
    )
    parser.add_argument(
        '--max-view-rows',
        type=int,
        help='Export up to this many rows per view as CSV (0 = no data)'
    )
    parser.add_argument(
        '--drop-extras',
        action='store_true',
        default=None,
        help='Delete backed up entries of objects that no longer exist'
    )
    parser.add_argument(
        '--workers',
        type=int,
        help='Number of object kinds backed up in parallel'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be backed up without connecting'
    )
    return parser.parse_args(argv)


def build_connection(source_settings: dict, args: argparse.Namespace) -> ExasolConnection:
    """
    Create the catalog source from file settings and command line options.

    Raises:
        ValueError: A port, timeout or encryption setting cannot be converted.
    """
    return ExasolConnection(
        host=args.host or source_settings.get('host', 'localhost'),
        port=args.port or parse_int(
            source_settings.get('port'), 'port', ExasolConnection.DEFAULT_PORT
        ),
        user=args.user or source_settings.get('user', 'sys'),
        password=source_settings.get('password') or os.environ.get(PASSWORD_ENV_VAR, ''),
        encryption=parse_bool(source_settings.get('encryption'), 'encryption', default=True),
        timeout=parse_int(source_settings.get('timeout'), 'timeout', ExasolConnection.DEFAULT_TIMEOUT)
    )


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Load configuration
    try:
        config = ConfigLoader(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file '{args.config}' not found")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}")
        sys.exit(1)

    # Setup logging
    log_settings = dict(config.get_logging_settings())
    if args.verbose:
        log_settings['level'] = 'DEBUG'
    setup_logging(log_settings)

    try:
        connection = build_connection(config.get_source_settings(), args)
        backup_config = build_backup_config(config, connection, {
            'destination': args.dest,
            'objects': args.objects,
            'max_table_rows': args.max_table_rows,
            'max_view_rows': args.max_view_rows,
            'drop_extras': args.drop_extras,
            'workers': args.workers,
        })
    except ValueError as e:
        logging.error(f"Invalid configuration: {e}")
        sys.exit(1)

    # Dry run mode
    if args.dry_run:
        logging.info("DRY RUN MODE - Nothing will be written")
        print_dry_run_info(backup_config)
        sys.exit(0)

    # Run backup
    try:
        with connection:
            stats = BackupRunner(backup_config).run()
    except KeyboardInterrupt:
        logging.error("Backup cancelled, extras were not dropped")
        sys.exit(130)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)

    # Print summary
    logging.info("=" * 50)
    logging.info("BACKUP COMPLETE")
    logging.info(f"Objects: {stats.total_objects}")
    logging.info(f"Files: {stats.total_files}")
    logging.info(f"Rows: {stats.total_rows}")
    if stats.deleted:
        logging.info(f"Dropped extras: {len(stats.deleted)}")

    if stats.errors:
        logging.warning(f"Errors: {len(stats.errors)}")
        for err in stats.errors:
            logging.warning(f"  - {type(err).__name__}: {err}")
        sys.exit(1)


if __name__ == '__main__':
    main()
