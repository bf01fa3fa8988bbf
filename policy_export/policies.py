"""
policy_export.policies — IAM managed policy lookups.

Thin wrappers around list_policies, get_policy and get_policy_version that
translate boto3/botocore failures into the package's exception hierarchy.
Each call is made once; nothing here retries.
"""

import logging
from typing import Any, Dict, List, Union

from policy_export.errors import EmptyVersionIdError, PolicyFetchError, PolicyListingError
from policy_export.utils import handle_aws_operation

logger = logging.getLogger(__name__)

PolicyDocument = Union[Dict[str, Any], str]


def policy_name_from_arn(arn: str) -> str:
    """
    Derive the display name of a policy from its ARN (trailing path segment).

    Args:
        arn: Policy ARN, e.g. arn:aws:iam::aws:policy/job-function/ViewOnlyAccess

    Returns:
        str: 'ViewOnlyAccess'
    """
    return arn.rstrip("/").rsplit("/", 1)[-1]


def list_policy_arns(iam_client, scope: str = "All", only_attached: bool = False) -> List[str]:
    """
    List the ARNs of every managed policy visible to the caller.

    Drains the list_policies paginator and keeps the order IAM returns.

    Args:
        iam_client: The boto3 IAM client
        scope: 'All', 'AWS' or 'Local'
        only_attached: Only list policies attached to a user, group or role

    Returns:
        list: Policy ARNs

    Raises:
        PolicyListingError: if any page of the listing fails
    """
    arns: List[str] = []

    with handle_aws_operation("Listing IAM policies", PolicyListingError):
        paginator = iam_client.get_paginator("list_policies")
        page_num = 0
        for page in paginator.paginate(Scope=scope, OnlyAttached=only_attached):
            page_num += 1
            for policy in page.get("Policies", []):
                arns.append(policy.get("Arn", ""))
        logger.debug("Processed %d page(s) of list_policies", page_num)

    return arns


def get_default_version_id(iam_client, arn: str) -> str:
    """
    Resolve the default version id of a managed policy.

    Raises:
        PolicyFetchError: if get_policy fails
        EmptyVersionIdError: if the call succeeds without a version id
    """
    with handle_aws_operation(f"Fetching default version for {arn}", PolicyFetchError, arn=arn):
        response = iam_client.get_policy(PolicyArn=arn)

    version_id = (response.get("Policy") or {}).get("DefaultVersionId")
    if not version_id:
        raise EmptyVersionIdError(f"No default version id returned for {arn}", arn=arn)
    return version_id


def get_policy_document(iam_client, arn: str, version_id: str) -> PolicyDocument:
    """
    Retrieve the document of one policy version, exactly as boto3 returns it.

    Raises:
        PolicyFetchError: if get_policy_version fails or carries no document
    """
    with handle_aws_operation(
        f"Fetching policy document for {arn} (version: {version_id})", PolicyFetchError, arn=arn
    ):
        response = iam_client.get_policy_version(PolicyArn=arn, VersionId=version_id)

    document = (response.get("PolicyVersion") or {}).get("Document")
    if document is None:
        raise PolicyFetchError(f"No document returned for {arn} (version: {version_id})", arn=arn)
    return document
