"""
Command line entry point: ``iam-policy-export`` / ``python -m policy_export``.

Every flag is optional. Without flags the tool lists all managed policies,
writes policies/<name>.json for each one and bundles them in policies.zip.
"""

import argparse
import datetime
import sys
from pathlib import Path
from typing import List, Optional

from policy_export import __version__, utils
from policy_export.config import (
    DEFAULT_ARCHIVE_FILE,
    DEFAULT_POLICIES_DIR,
    VALID_SCOPES,
    config_value,
    get_max_workers,
    get_scope,
    set_config_path,
)
from policy_export.errors import PolicyListingError
from policy_export.pipeline import ExportOptions, run_export
from policy_export.report import build_summary, save_summary

SCRIPT_NAME = "iam-policy-export"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SCRIPT_NAME,
        description="Export the default version of every IAM managed policy as JSON and zip the result.",
    )
    parser.add_argument("--policies-dir", type=Path, default=None,
                        help=f"Directory receiving <policy-name>.json files (default: {DEFAULT_POLICIES_DIR})")
    parser.add_argument("--archive", type=Path, default=None,
                        help=f"Zip archive to create (default: {DEFAULT_ARCHIVE_FILE})")
    parser.add_argument("--no-archive", action="store_true",
                        help="Skip zip archive creation")
    parser.add_argument("--manifest", type=Path, default=None,
                        help="Also write the listed ARNs to this file for the duration of the run")
    parser.add_argument("--scope", choices=VALID_SCOPES, default=None,
                        help="Which managed policies to list (default: All)")
    parser.add_argument("--only-attached", action="store_true",
                        help="Only export policies attached to a user, group or role")
    parser.add_argument("--workers", type=int, default=None,
                        help="Fetch policies on a pool of N threads (default: 1, sequential)")
    parser.add_argument("--region", type=str, default=None,
                        help="AWS region for the IAM endpoint (default: from environment)")
    parser.add_argument("--profile", type=str, default=None,
                        help="Named AWS profile (default: standard credential chain)")
    parser.add_argument("--summary", type=Path, default=None,
                        help="Write a CSV summary of every policy's outcome to this path")
    parser.add_argument("--config", type=Path, default=None,
                        help="Path to config.json (default: $POLICY_EXPORT_CONFIG or ./config.json)")
    parser.add_argument("--log-file", type=Path, default=None,
                        help="Also log everything at DEBUG level to this file")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show debug messages on the console")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def options_from_args(args: argparse.Namespace) -> ExportOptions:
    """Merge CLI flags over config.json over built-in defaults."""
    policies_dir = args.policies_dir or Path(config_value("policies_dir", default=DEFAULT_POLICIES_DIR))

    if args.no_archive:
        archive_file = None
    else:
        archive_file = args.archive or Path(config_value("archive_file", default=DEFAULT_ARCHIVE_FILE))

    manifest_file = args.manifest
    if manifest_file is None and config_value("manifest_file"):
        manifest_file = Path(config_value("manifest_file"))

    if args.workers is not None:
        max_workers = max(1, args.workers)
    else:
        max_workers = get_max_workers()

    return ExportOptions(
        policies_dir=policies_dir,
        archive_file=archive_file,
        manifest_file=manifest_file,
        scope=args.scope or get_scope(),
        only_attached=args.only_attached,
        max_workers=max_workers,
        region_name=args.region,
        profile_name=args.profile,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run the export; returns the process exit code."""
    args = build_parser().parse_args(argv)

    utils.setup_logging(verbose=args.verbose, log_file=args.log_file)
    if args.config is not None:
        set_config_path(args.config)

    start_time = datetime.datetime.now()

    try:
        utils.log_script_start(SCRIPT_NAME, "IAM managed policy document export")
        options = options_from_args(args)

        result = run_export(options)

        if args.summary:
            save_summary(build_summary(result.outcomes), args.summary)

        utils.log_info("Script execution completed successfully.")
        utils.log_script_end(SCRIPT_NAME, start_time)
        return EXIT_OK

    except PolicyListingError as e:
        utils.log_error("Failed to list IAM policies", e)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        utils.log_warning("Script interrupted by user. Exiting...")
        return EXIT_INTERRUPTED
    except Exception as e:
        utils.log_error("Unexpected error occurred", e)
        return EXIT_FAILURE


def run() -> None:
    """Console-script wrapper around main()."""
    sys.exit(main())


if __name__ == "__main__":
    run()
