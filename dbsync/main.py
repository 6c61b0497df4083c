#!/usr/bin/env python3
"""
dbsync - CLI Entry Point
========================
Copy a Rails-style application database between the deployed release and
the local checkout:
- pull: remote -> local
- push: local -> remote
- pull-schemas: selected PostgreSQL schemas, remote -> local
"""

import argparse
import logging
import sys

import yaml
from invoke.exceptions import UnexpectedExit

from .config import ConfigLoader
from .context import FabricContext
from .models import ConfigurationError
from .orchestrator import DatabaseSync
from .utils import print_dry_run_info, setup_logging


def parse_schemas(value: str) -> list[str]:
    return [s.strip() for s in value.replace(':', ',').split(',') if s.strip()]


def confirm(message: str) -> bool:
    answer = input(f"{message} [y/N] ")
    return answer.strip().lower() in ('y', 'yes')


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='dbsync - copy databases between a deployed app and a local checkout'
    )
    parser.add_argument(
        'command',
        choices=['pull', 'push', 'pull-schemas'],
        help='Direction of the sync'
    )
    parser.add_argument(
        '-c', '--config',
        default='deploy.yaml',
        help='Path to deploy settings file (default: deploy.yaml)'
    )
    parser.add_argument(
        '-s', '--schemas',
        type=parse_schemas,
        default=[],
        help='Comma separated PostgreSQL schemas (pull-schemas, --remove-sensitive-data)'
    )
    parser.add_argument(
        '--remove-sensitive-data',
        action='store_true',
        help='Run the sensitive data task for each --schemas entry after pulling'
    )
    parser.add_argument(
        '-y', '--yes',
        action='store_true',
        help='Do not ask for confirmation before replacing a database'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be synced without running anything'
    )

    args = parser.parse_args()

    # Load configuration
    try:
        config = ConfigLoader(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file '{args.config}' not found")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}")
        sys.exit(1)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    # Setup logging
    log_settings = config.get_logging_settings()
    if args.verbose:
        log_settings['level'] = 'DEBUG'
    setup_logging(log_settings)

    if args.command == 'pull-schemas' and not args.schemas:
        parser.error('pull-schemas requires --schemas')
    if args.remove_sensitive_data and args.command != 'push' and not args.schemas:
        parser.error('--remove-sensitive-data requires --schemas')

    # Dry run mode
    if args.dry_run:
        logging.info("DRY RUN MODE - No database will be touched")
        try:
            print_dry_run_info(args.command, config, args.schemas)
        except ConfigurationError as e:
            logging.error(f"Fatal error: {e}")
            sys.exit(1)
        sys.exit(0)

    if not (args.yes or config.fetch('skip_data_sync_confirm')):
        target = 'REMOTE' if args.command == 'push' else 'LOCAL'
        if not confirm(f"Are you sure you want to REPLACE THE {target} DATABASE?"):
            logging.info("Aborted")
            sys.exit(1)

    # Run sync
    try:
        with FabricContext(config) as context:
            sync = DatabaseSync(context)
            if args.command == 'push':
                result = sync.local_to_remote()
            elif args.command == 'pull-schemas':
                result = sync.selective_schemas_to_local(args.schemas)
            else:
                result = sync.remote_to_local()

            if not result.success:
                sys.exit(1)

            if args.remove_sensitive_data and args.command != 'push':
                sync.local_endpoint_class(context).remove_sensitive_data(args.schemas)

        logging.info("SYNC COMPLETE")

    except ConfigurationError as e:
        logging.error(f"Configuration error: {e}")
        sys.exit(1)
    except UnexpectedExit as e:
        logging.error(f"Remote command failed: {e.result.command}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
