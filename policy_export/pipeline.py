"""
Export pipeline: list managed policies, fetch each default version document,
write one JSON file per policy, then zip the output directory.

Only the initial listing is fatal (PolicyListingError). Every per-policy
failure becomes a PolicyOutcome with status 'failed' or 'skipped' and the run
carries on.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from policy_export import utils
from policy_export.archive import create_archive, directory_has_entries
from policy_export.aws_client import get_iam_client
from policy_export.concurrency import run_items
from policy_export.config import (
    DEFAULT_ARCHIVE_FILE,
    DEFAULT_MAX_WORKERS,
    DEFAULT_POLICIES_DIR,
    DEFAULT_SCOPE,
)
from policy_export.errors import EmptyVersionIdError, PolicyFetchError
from policy_export.manifest import remove_manifest, write_manifest
from policy_export.policies import (
    get_default_version_id,
    get_policy_document,
    list_policy_arns,
    policy_name_from_arn,
)

STATUS_EXPORTED = "exported"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"


@dataclass
class ExportOptions:
    """Settings for one export run. Defaults reproduce the classic script."""

    policies_dir: Path = Path(DEFAULT_POLICIES_DIR)
    archive_file: Optional[Path] = Path(DEFAULT_ARCHIVE_FILE)
    manifest_file: Optional[Path] = None
    scope: str = DEFAULT_SCOPE
    only_attached: bool = False
    max_workers: int = DEFAULT_MAX_WORKERS
    region_name: Optional[str] = None
    profile_name: Optional[str] = None
    iam_client: Any = None


@dataclass
class PolicyOutcome:
    """Result of exporting a single policy ARN."""

    arn: str
    name: str
    status: str
    version_id: Optional[str] = None
    output_file: Optional[Path] = None
    error: Optional[str] = None

    @property
    def exported(self) -> bool:
        return self.status == STATUS_EXPORTED


@dataclass
class ExportResult:
    """Aggregate of a whole run."""

    outcomes: List[PolicyOutcome] = field(default_factory=list)
    archive_file: Optional[Path] = None

    @property
    def exported_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == STATUS_EXPORTED)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status != STATUS_EXPORTED)


def serialize_document(document) -> str:
    """Render a policy document as the AWS CLI's --output json would."""
    if isinstance(document, str):
        text = document
    else:
        text = json.dumps(document, indent=4, ensure_ascii=False)
    return text if text.endswith("\n") else text + "\n"


def export_policy(iam_client, arn: str, policies_dir: Path) -> PolicyOutcome:
    """
    Fetch one policy's default version document and write it to disk.

    Never raises for AWS failures: the returned outcome records what happened.

    Args:
        iam_client: The boto3 IAM client
        arn: Policy ARN
        policies_dir: Directory receiving <policy-name>.json

    Returns:
        PolicyOutcome
    """
    if not arn or not arn.strip():
        utils.log_error("Empty ARN encountered, skipping...")
        return PolicyOutcome(arn=arn or "", name="", status=STATUS_SKIPPED, error="Empty ARN")

    arn = arn.strip()
    name = policy_name_from_arn(arn)
    utils.log_info(f"Processing policy ARN: {arn}")

    try:
        utils.log_debug(f"Fetching default version for policy: {name}")
        version_id = get_default_version_id(iam_client, arn)
    except EmptyVersionIdError as e:
        utils.log_error(f"Policy {arn} reported no default version, skipping")
        return PolicyOutcome(arn=arn, name=name, status=STATUS_FAILED, error=str(e))
    except PolicyFetchError as e:
        utils.log_error(f"Failed to retrieve default version for policy: {arn}")
        utils.log_debug(str(e))
        return PolicyOutcome(arn=arn, name=name, status=STATUS_FAILED, error=str(e))

    utils.log_debug(f"Default version for {name} is {version_id}")

    try:
        document = get_policy_document(iam_client, arn, version_id)
    except PolicyFetchError as e:
        utils.log_error(f"Failed to retrieve policy document for {arn} (version: {version_id})")
        utils.log_debug(str(e))
        return PolicyOutcome(
            arn=arn, name=name, status=STATUS_FAILED, version_id=version_id, error=str(e)
        )

    output_file = Path(policies_dir) / f"{name}.json"
    try:
        utils.atomic_write_text(output_file, serialize_document(document))
    except (OSError, TypeError, ValueError) as e:
        utils.log_error(f"Failed to save policy document for {arn}", e)
        return PolicyOutcome(
            arn=arn, name=name, status=STATUS_FAILED, version_id=version_id, error=str(e)
        )

    utils.log_info(f"Saved policy document to {output_file}")
    return PolicyOutcome(
        arn=arn, name=name, status=STATUS_EXPORTED, version_id=version_id, output_file=output_file
    )


def run_export(options: Optional[ExportOptions] = None) -> ExportResult:
    """
    Run the whole export.

    Args:
        options: ExportOptions (None = defaults)

    Returns:
        ExportResult with one outcome per listed ARN

    Raises:
        PolicyListingError: if the policy listing fails; nothing has been written yet
    """
    options = options or ExportOptions()
    iam_client = options.iam_client or get_iam_client(options.region_name, options.profile_name)
    policies_dir = Path(options.policies_dir)
    result = ExportResult()

    try:
        utils.log_section("Listing policies")
        utils.log_info(f"Listing all IAM policy ARNs (scope: {options.scope})...")
        arns = list_policy_arns(iam_client, scope=options.scope, only_attached=options.only_attached)
        utils.log_info(f"Found {len(arns)} managed policies")

        if options.manifest_file:
            write_manifest(options.manifest_file, arns)

        utils.log_info(f"Creating directory '{policies_dir}' if it doesn't exist...")
        policies_dir.mkdir(parents=True, exist_ok=True)

        utils.log_section("Retrieving policy documents")
        outcomes = run_items(
            arns,
            lambda arn: export_policy(iam_client, arn, policies_dir),
            max_workers=options.max_workers,
            show_progress=options.max_workers > 1,
            label="policy",
        )
        for arn, outcome in zip(arns, outcomes):
            if outcome is None:
                outcome = PolicyOutcome(
                    arn=arn,
                    name=policy_name_from_arn(arn) if arn else "",
                    status=STATUS_FAILED,
                    error="Unexpected error",
                )
            result.outcomes.append(outcome)

        utils.log_info(
            f"Exported {result.exported_count} of {len(result.outcomes)} policies "
            f"({result.failed_count} skipped or failed)"
        )

        if options.archive_file:
            utils.log_section("Archiving")
            utils.log_info("Creating zip archive of policy documents...")
            if directory_has_entries(policies_dir):
                result.archive_file = create_archive(policies_dir, options.archive_file)
            else:
                utils.log_error(f"No policy documents found in {policies_dir}, skipping zip creation")

    finally:
        utils.log_info("Cleaning up temporary files...")
        remove_manifest(options.manifest_file)
        utils.log_info("Cleanup completed.")

    return result
