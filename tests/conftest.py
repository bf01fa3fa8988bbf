"""
Shared fixtures: fake AWS credentials, a scriptable IAM client double, and
reset of the package's module-level logging/config state between tests.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest
from botocore.exceptions import ClientError

sys.path.insert(0, str(Path(__file__).parent.parent))
import policy_export.config as cfg_mod
import policy_export.utils as utils_mod


def client_error(code: str = "NoSuchEntity", operation: str = "GetPolicy", message: str = "not found"):
    """Build a botocore ClientError like the IAM API returns."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakePaginator:
    def __init__(self, client):
        self.client = client

    def paginate(self, **kwargs):
        self.client.list_calls.append(kwargs)
        if self.client.list_error is not None:
            raise self.client.list_error
        for page in self.client.pages:
            yield {"Policies": [{"Arn": arn} for arn in page]}


class FakeIamClient:
    """
    Minimal stand-in for a boto3 IAM client.

    versions maps ARN -> version id (or an exception to raise);
    documents maps ARN -> document (or an exception to raise).
    """

    def __init__(
        self,
        arns: Optional[List[str]] = None,
        versions: Optional[Dict[str, Union[str, Exception]]] = None,
        documents: Optional[Dict[str, object]] = None,
        pages: Optional[List[List[str]]] = None,
        list_error: Optional[Exception] = None,
    ):
        self.pages = pages if pages is not None else [list(arns or [])]
        self.versions = versions or {}
        self.documents = documents or {}
        self.list_error = list_error
        self.list_calls: List[dict] = []
        self.get_policy_calls: List[str] = []
        self.get_policy_version_calls: List[tuple] = []

    def get_paginator(self, operation):
        assert operation == "list_policies"
        return FakePaginator(self)

    def get_policy(self, PolicyArn):
        self.get_policy_calls.append(PolicyArn)
        value = self.versions.get(PolicyArn, client_error())
        if isinstance(value, Exception):
            raise value
        return {"Policy": {"Arn": PolicyArn, "DefaultVersionId": value}}

    def get_policy_version(self, PolicyArn, VersionId):
        self.get_policy_version_calls.append((PolicyArn, VersionId))
        value = self.documents.get(PolicyArn, client_error(operation="GetPolicyVersion"))
        if isinstance(value, Exception):
            raise value
        return {"PolicyVersion": {"Document": value, "VersionId": VersionId, "IsDefaultVersion": True}}


@pytest.fixture
def fake_iam():
    """Factory fixture returning FakeIamClient instances."""
    return FakeIamClient


@pytest.fixture
def fake_aws_credentials(monkeypatch):
    """Prevent any accidental real AWS calls."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture(autouse=True)
def reset_module_state(monkeypatch):
    """Each test starts with unconfigured logging and an unloaded config."""
    monkeypatch.delenv(cfg_mod.CONFIG_ENV_VAR, raising=False)
    cfg_mod.set_config_path(None)
    yield
    cfg_mod.set_config_path(None)
    pkg_logger = logging.getLogger(utils_mod.LOGGER_NAME)
    pkg_logger.handlers = []
    pkg_logger.propagate = True
    utils_mod.logger = None
