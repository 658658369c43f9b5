"""Command line entry point for the migration tool."""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict

from .config import Settings
from .exceptions import DBMTError
from .services.complexity import analyze

logger = logging.getLogger(__name__)


def _load_json_arg(value: str) -> Dict[str, Any]:
    """Parse inline JSON, or ``@path`` to read JSON from a file."""
    if value.startswith("@"):
        with open(value[1:]) as f:
            return json.load(f)
    return json.loads(value)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _make_client(args):
    from .client import OrchestratorClient

    token = args.token or os.environ.get("DBMT_TOKEN")
    if not token:
        raise DBMTError("No token given. Use --token or set DBMT_TOKEN.")
    return OrchestratorClient(args.url, token)


def run_server(args):
    """Serve the API with uvicorn."""
    import uvicorn

    settings = Settings.from_env()
    host = args.host or settings.host
    port = args.port or settings.port

    logger.info(f"Serving DBMT API on {host}:{port}")
    uvicorn.run(
        "dbmt.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


def run_dry_run(args):
    """Score a source/target pair locally."""
    source = _load_json_arg(args.source)
    target = _load_json_arg(args.target)
    _print_json(analyze(source, target).to_dict())


def run_submit(args):
    """Submit a migration to a running service."""
    client = _make_client(args)
    request = {
        "name": args.name,
        "sourceConfig": _load_json_arg(args.source),
        "targetConfig": _load_json_arg(args.target),
        "migrationType": args.migration_type,
        "options": {"dryRun": args.dry_run, "batchSize": args.batch_size},
    }
    if args.description:
        request["description"] = args.description

    result = client.start_migration(request)
    _print_json(result)

    if args.wait and not args.dry_run:
        _print_json(client.wait_for_completion(result["migrationId"]))


def run_status(args):
    """Show one migration, or all of them."""
    client = _make_client(args)
    if args.logs:
        _print_json(client.get_migration_logs(args.id))
    else:
        _print_json(client.get_migration_status(args.id))


def run_validate(args):
    """Run a validation check for a migration."""
    client = _make_client(args)
    _print_json(client.validate_migration(args.id, args.type))


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Database Migration Tool - orchestration service and client"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve API
    serve_parser = subparsers.add_parser("serve", help="Run the orchestration API")
    serve_parser.add_argument("--host", help="Bind address (default DBMT_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default DBMT_PORT)")

    # Local dry run
    dry_parser = subparsers.add_parser("dry-run", help="Score a migration locally")
    dry_parser.add_argument("--source", required=True, help="Source config JSON or @file")
    dry_parser.add_argument("--target", required=True, help="Target config JSON or @file")

    # Client commands
    client_parent = argparse.ArgumentParser(add_help=False)
    client_parent.add_argument(
        "--url", default=os.environ.get("DBMT_URL", "http://127.0.0.1:8000"), help="Service URL"
    )
    client_parent.add_argument("--token", help="Bearer token (default DBMT_TOKEN)")

    submit_parser = subparsers.add_parser(
        "submit", parents=[client_parent], help="Submit a migration"
    )
    submit_parser.add_argument("--name", required=True, help="Migration name")
    submit_parser.add_argument("--description", help="Migration description")
    submit_parser.add_argument("--source", required=True, help="Source config JSON or @file")
    submit_parser.add_argument("--target", required=True, help="Target config JSON or @file")
    submit_parser.add_argument(
        "--migration-type",
        default="full",
        choices=["full", "incremental", "schema_only", "data_only"],
    )
    submit_parser.add_argument("--batch-size", type=int, default=1000)
    submit_parser.add_argument("--dry-run", action="store_true", help="Analyze only")
    submit_parser.add_argument("--wait", action="store_true", help="Poll until the run ends")

    status_parser = subparsers.add_parser(
        "status", parents=[client_parent], help="Show migration status"
    )
    status_parser.add_argument("--id", help="Migration ID (omit to list all)")
    status_parser.add_argument("--logs", action="store_true", help="Show log entries instead")

    validate_parser = subparsers.add_parser(
        "validate", parents=[client_parent], help="Validate a migration"
    )
    validate_parser.add_argument("--id", required=True, help="Migration ID")
    validate_parser.add_argument(
        "--type", default="row_count", help="row_count, checksum or data_integrity"
    )

    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    commands = {
        "serve": run_server,
        "dry-run": run_dry_run,
        "submit": run_submit,
        "status": run_status,
        "validate": run_validate,
    }

    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    if args.command == "status" and args.logs and not args.id:
        parser.error("--logs requires --id")

    try:
        command(args)
    except (DBMTError, json.JSONDecodeError, OSError) as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
