"""
policy_export.aws_client — boto3 client factory.

Provides configured IAM clients (FIPS endpoints in GovCloud, single-attempt
retry policy unless config.json says otherwise).
"""

from typing import Optional

import boto3
from botocore.config import Config

from policy_export.config import config_value

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# One attempt per call; override with aws_sdk_config.retries in config.json.
_DEFAULT_RETRIES = {"total_max_attempts": 1, "mode": "standard"}
_DEFAULT_CONNECT_TIMEOUT = 10
_DEFAULT_READ_TIMEOUT = 60


# ---------------------------------------------------------------------------
# Session and client factory
# ---------------------------------------------------------------------------


def get_aws_session(region_name: Optional[str] = None, profile_name: Optional[str] = None):
    """
    Create a boto3 session for the specified region and profile.

    Credentials and region fall back to the standard boto3 resolution chain.

    Args:
        region_name: AWS region (None = default from environment/profile)
        profile_name: Named profile from the shared config (None = default chain)

    Returns:
        boto3.Session: Configured session
    """
    return boto3.Session(region_name=region_name, profile_name=profile_name)


def get_boto3_client(
    service: str,
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
    **kwargs,
):
    """
    Create boto3 client with the standard timeout and retry configuration.

    Automatically injects ``use_fips_endpoint=True`` for GovCloud regions.

    Args:
        service: AWS service name (e.g., 'iam')
        region_name: AWS region name (optional)
        profile_name: Named profile (optional)
        **kwargs: Additional arguments to pass to client creation

    Returns:
        boto3.client: Configured boto3 client
    """
    sdk_config = config_value("aws_sdk_config", default={}) or {}

    config = Config(
        retries=sdk_config.get("retries", dict(_DEFAULT_RETRIES)),
        connect_timeout=sdk_config.get("connect_timeout", _DEFAULT_CONNECT_TIMEOUT),
        read_timeout=sdk_config.get("read_timeout", _DEFAULT_READ_TIMEOUT),
    )

    # FIPS injection — GovCloud requires FIPS endpoints
    if region_name and region_name.startswith("us-gov-") and "use_fips_endpoint" not in kwargs:
        kwargs["use_fips_endpoint"] = True

    session = get_aws_session(region_name, profile_name)
    return session.client(service, config=config, **kwargs)


def get_iam_client(region_name: Optional[str] = None, profile_name: Optional[str] = None):
    """Shortcut for get_boto3_client('iam', ...)."""
    return get_boto3_client("iam", region_name=region_name, profile_name=profile_name)
