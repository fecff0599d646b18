"""
DLP CLI - Command-line interface for stored infoTypes.

This layer provides the user-facing commands, using the SDK layer for all
operations. It handles:
- Argument parsing and environment defaults
- Console formatting for human output
- JSON output for piping/automation (--json)
"""

import argparse
import json
import os
import sys
from datetime import datetime
from typing import Any

from dlp_cli.core.client import ServiceError
from dlp_cli.core.types import StoredInfoType, StoredInfoTypeVersion
from dlp_cli.logging_config import setup_logging
from dlp_cli.sdk import StoredInfoTypeClient

# =============================================================================
# Output Helpers
# =============================================================================


def format_date(epoch_seconds: int) -> str:
    """Format seconds since the epoch like en-US toLocaleString, e.g. 1/2/2019, 3:04:05 PM."""
    dt = datetime.fromtimestamp(epoch_seconds)
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{dt.month}/{dt.day}/{dt.year}, {hour}:{dt.minute:02d}:{dt.second:02d} {meridiem}"


def json_output(data: Any) -> None:
    """Print JSON output."""
    print(json.dumps(data, indent=2, default=str))


def error_output(operation: str, error: ServiceError, as_json: bool = False) -> None:
    """Print error and exit."""
    if as_json:
        json_output({"operation": operation, **error.to_dict()})
    else:
        print(f"Error in {operation}: {error.message}")
    sys.exit(1)


def version_to_dict(version: StoredInfoTypeVersion) -> dict[str, Any]:
    """Convert a version to a dict for JSON output."""
    return {
        "create_time": version.create_time,
        "state": version.state.value,
        "error_count": version.error_count,
    }


def stored_info_type_to_dict(stored_info_type: StoredInfoType) -> dict[str, Any]:
    """Convert a stored infoType to a dict for JSON output."""
    current = stored_info_type.current_version
    return {
        "name": stored_info_type.name,
        "current_version": version_to_dict(current) if current else None,
        "pending_versions": [version_to_dict(v) for v in stored_info_type.pending_versions],
    }


def print_version(version: StoredInfoTypeVersion) -> None:
    """Print the Created / State / Error count lines of a version."""
    created = format_date(version.create_time) if version.create_time is not None else "unknown"
    print(f"  Created: {created}")
    print(f"  State: {version.state.value}")
    print(f"  Error count: {version.error_count}")


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_create(client: StoredInfoTypeClient, args: argparse.Namespace) -> None:
    """Create a stored infoType from Cloud Storage files or a BigQuery column."""
    if args.input_path:
        result = client.create_from_file_set(
            args.input_path,
            args.output_path,
            stored_info_type_id=args.stored_info_type_id,
            display_name=args.display_name,
            description=args.description,
        )
    else:
        result = client.create_from_table(
            args.table_project_id,
            args.dataset_id,
            args.table_id,
            args.field_name,
            args.output_path,
            stored_info_type_id=args.stored_info_type_id,
            display_name=args.display_name,
            description=args.description,
        )

    if not result.ok:
        error_output("createStoredInfoType", result.error, args.json)
        return

    if args.json:
        json_output(stored_info_type_to_dict(result.value))
    else:
        print(f"Successfully created stored infoType {result.value.name}.")


def cmd_list(client: StoredInfoTypeClient, args: argparse.Namespace) -> None:
    """List stored infoTypes in the project."""
    result = client.list()
    if not result.ok:
        error_output("listStoredInfoTypes", result.error, args.json)
        return

    if args.json:
        json_output({"data": [stored_info_type_to_dict(s) for s in result.value]})
        return

    for stored_info_type in result.value:
        print(f"Stored infoType: {stored_info_type.name}:")
        if stored_info_type.current_version:
            print("Current version:")
            print_version(stored_info_type.current_version)
        if stored_info_type.pending_versions:
            print("Pending versions:")
            for version in stored_info_type.pending_versions:
                print_version(version)


def cmd_delete(client: StoredInfoTypeClient, args: argparse.Namespace) -> None:
    """Delete a stored infoType by its full resource name."""
    result = client.delete(args.stored_info_type_name)
    if not result.ok:
        error_output("deleteStoredInfoType", result.error, args.json)
        return

    if args.json:
        json_output({"success": True, "name": args.stored_info_type_name})
    else:
        print(f"Successfully deleted stored infoType {args.stored_info_type_name}.")


# =============================================================================
# Main CLI
# =============================================================================


def default_project() -> str:
    """Project from GCLOUD_PROJECT or GOOGLE_CLOUD_PROJECT."""
    return os.environ.get("GCLOUD_PROJECT") or os.environ.get("GOOGLE_CLOUD_PROJECT") or ""


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dlp-stored-info-types",
        description="Manage Data Loss Prevention API stored infoTypes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dlp-stored-info-types create -i gs://my-bucket/words.txt -o gs://my-bucket/
  dlp-stored-info-types list
  dlp-stored-info-types delete projects/my-project/storedInfoTypes/my-stored-info-type

For more information, see https://cloud.google.com/dlp/docs.
""",
    )
    parser.add_argument(
        "--calling-project-id",
        "-c",
        default=default_project(),
        help="Project to run the API calls under (defaults to GCLOUD_PROJECT)",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--log-level", help="Log level for stderr logging (defaults to DLP_LOG_LEVEL or WARNING)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Create ==========
    create = subparsers.add_parser("create", help="Create a Data Loss Prevention API stored infoType")
    create.add_argument("--input-path", "-i", default="", help="Cloud Storage path of the dictionary files")
    create.add_argument(
        "--table-project-id",
        "-p",
        default=default_project(),
        help="Project of the BigQuery table holding the dictionary",
    )
    create.add_argument("--dataset-id", "-d", default="", help="BigQuery dataset ID")
    create.add_argument("--table-id", "-t", default="", help="BigQuery table ID")
    create.add_argument("--field-name", "-f", default="", help="BigQuery column holding the words")
    create.add_argument("--output-path", "-o", default="", help="Cloud Storage path for the generated dictionary")
    create.add_argument("--stored-info-type-id", "-n", default="", help="ID of the stored infoType (optional)")
    create.add_argument("--display-name", "-s", default="", help="Display name (optional)")
    create.add_argument("--description", default="", help="Description (optional)")
    create.set_defaults(func=cmd_create)

    # ========== List ==========
    list_cmd = subparsers.add_parser("list", help="List Data Loss Prevention API stored infoTypes")
    list_cmd.set_defaults(func=cmd_list)

    # ========== Delete ==========
    delete = subparsers.add_parser("delete", help="Delete a Data Loss Prevention API stored infoType")
    delete.add_argument(
        "stored_info_type_name",
        help="Full resource name, e.g. projects/my-project/storedInfoTypes/my-stored-info-type",
    )
    delete.set_defaults(func=cmd_delete)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    setup_logging(args.log_level)

    client = StoredInfoTypeClient(project_id=args.calling_project_id)
    args.func(client, args)


if __name__ == "__main__":
    main()
