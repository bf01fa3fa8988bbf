"""
Tests for policy_export.utils — logging streams, error handling helpers, atomic writes.
"""

import logging
import os
import stat

import pytest
from botocore.exceptions import NoCredentialsError

from conftest import client_error
from policy_export import utils
from policy_export.errors import PolicyFetchError


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class TestSetupLogging:
    def test_info_to_stdout_errors_to_stderr(self, capsys):
        utils.setup_logging()

        utils.log_info("listing policies")
        utils.log_error("listing failed")
        captured = capsys.readouterr()

        assert "INFO - listing policies" in captured.out
        assert "listing failed" not in captured.out
        assert "ERROR - listing failed" in captured.err
        assert "listing policies" not in captured.err

    def test_debug_hidden_unless_verbose(self, capsys):
        utils.setup_logging()
        utils.log_debug("hidden detail")
        assert "hidden detail" not in capsys.readouterr().out

        utils.setup_logging(verbose=True)
        utils.log_debug("shown detail")
        assert "shown detail" in capsys.readouterr().out

    def test_log_file_receives_debug(self, tmp_path):
        log_path = tmp_path / "logs" / "export.log"
        utils.setup_logging(log_file=log_path)

        utils.log_debug("debug for file")
        for handler in logging.getLogger(utils.LOGGER_NAME).handlers:
            handler.flush()

        assert "debug for file" in log_path.read_text(encoding="utf-8")

    def test_repeated_setup_does_not_duplicate_handlers(self):
        utils.setup_logging()
        utils.setup_logging()
        assert len(logging.getLogger(utils.LOGGER_NAME).handlers) == 2

    def test_configured_logger_is_module_state(self):
        assert utils.logger is None

        configured = utils.setup_logging()

        assert utils.logger is configured
        assert utils.get_logger() is configured

    def test_unconfigured_logger_is_silent(self, capsys):
        utils.log_info("nobody sees this")
        captured = capsys.readouterr()
        assert "nobody sees this" not in captured.out


# ---------------------------------------------------------------------------
# describe_aws_error
# ---------------------------------------------------------------------------


class TestDescribeAwsError:
    def test_client_error_includes_code(self):
        message = utils.describe_aws_error("Fetching policy", client_error("AccessDenied", message="denied"))
        assert message == "Fetching policy: AWS error [AccessDenied]: denied"

    def test_no_credentials_hint(self):
        message = utils.describe_aws_error("Listing", NoCredentialsError())
        assert "No AWS credentials found" in message

    def test_other_exception(self):
        message = utils.describe_aws_error("Listing", ValueError("bad"))
        assert message == "Listing: Unexpected error: bad"


# ---------------------------------------------------------------------------
# handle_aws_operation
# ---------------------------------------------------------------------------


class TestHandleAwsOperation:
    def test_translates_client_error(self):
        with pytest.raises(PolicyFetchError) as exc_info:
            with utils.handle_aws_operation("Fetching", PolicyFetchError, arn="arn:x"):
                raise client_error("Throttling")

        assert exc_info.value.arn == "arn:x"
        assert "Throttling" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None

    def test_reraises_original_without_error_class(self):
        with pytest.raises(NoCredentialsError):
            with utils.handle_aws_operation("Fetching"):
                raise NoCredentialsError()

    def test_non_aws_errors_pass_through(self):
        with pytest.raises(KeyError):
            with utils.handle_aws_operation("Fetching", PolicyFetchError):
                raise KeyError("Policy")


# ---------------------------------------------------------------------------
# atomic_write_text
# ---------------------------------------------------------------------------


class TestAtomicWriteText:
    def test_writes_and_overwrites(self, tmp_path):
        target = tmp_path / "A.json"
        utils.atomic_write_text(target, "first")
        utils.atomic_write_text(target, "second")

        assert target.read_text(encoding="utf-8") == "second"
        assert [p.name for p in tmp_path.iterdir()] == ["A.json"]

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(OSError):
            utils.atomic_write_text(tmp_path / "missing" / "A.json", "x")

    def test_mode_follows_umask(self, tmp_path):
        target = tmp_path / "A.json"
        previous = os.umask(0o022)
        try:
            utils.atomic_write_text(target, "{}")
        finally:
            os.umask(previous)

        assert stat.S_IMODE(target.stat().st_mode) == 0o644
