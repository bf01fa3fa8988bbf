"""
Shared utility functions for the policy export tool.

Logging setup and helpers, translation of boto3/botocore failures into
package errors, and small filesystem helpers used across the pipeline.
"""

import datetime
import logging
import os
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Optional, Union

from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

LOGGER_NAME = "policy_export"

# Global logger instance
logger = None


class _MaxLevelFilter(logging.Filter):
    """Pass only records strictly below a level (keeps errors off stdout)."""

    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.max_level


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Setup logging with informational output on stdout and errors on stderr.

    Args:
        verbose: Show DEBUG messages on the console
        log_file: Optional path of a log file that receives every record at DEBUG

    Returns:
        logging.Logger: Configured logger instance
    """
    global logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Clear any existing handlers
    logger.handlers = []

    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    stdout_handler.addFilter(_MaxLevelFilter(logging.ERROR))
    stdout_handler.setFormatter(console_formatter)
    logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(console_formatter)
    logger.addHandler(stderr_handler)

    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_path, mode='w', encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

            logger.debug(f"Logging initialized - Log file: {log_path}")
        except OSError as e:
            # If file logging fails, continue with console only
            logger.error(f"Failed to setup file logging: {e}")
            logger.warning("Continuing with console logging only")

    return logger


def get_logger() -> logging.Logger:
    """
    Get the current logger instance.
    If setup_logging() has not yet been called, returns a logger with a
    NullHandler so that library usage does not emit spurious output.

    Returns:
        logging.Logger: Logger instance
    """
    if logger is None:
        _null_logger = logging.getLogger(LOGGER_NAME)
        if not _null_logger.handlers:
            _null_logger.addHandler(logging.NullHandler())
        return _null_logger
    return logger

# Do NOT call setup_logging() at module import time.
# The CLI calls setup_logging() explicitly to activate console output.


def log_error(error_message: str, error_obj: Optional[Exception] = None) -> None:
    """
    Log an error message (stderr).

    Args:
        error_message: The error message to display
        error_obj: Optional exception object
    """
    current_logger = get_logger()
    if error_obj:
        current_logger.error(f"{error_message}: {str(error_obj)}")
        current_logger.debug(f"Exception details: {error_obj!r}")
    else:
        current_logger.error(error_message)


def log_warning(warning_message: str) -> None:
    """Log a warning message."""
    get_logger().warning(warning_message)


def log_info(info_message: str) -> None:
    """Log an informational message (stdout)."""
    get_logger().info(info_message)


def log_debug(debug_message: str) -> None:
    """Log a debug message (file, or console with --verbose)."""
    get_logger().debug(debug_message)


def log_success(success_message: str) -> None:
    """Log a success message."""
    get_logger().info(f"SUCCESS: {success_message}")


def log_section(section_name: str) -> None:
    """
    Log a section header for better log organization.

    Args:
        section_name: Name of the section
    """
    current_logger = get_logger()
    current_logger.info("-" * 50)
    current_logger.info(f"SECTION: {section_name}")
    current_logger.info("-" * 50)


def log_script_start(script_name: str, description: str = "") -> None:
    """Log the start of a run with standardized format."""
    current_logger = get_logger()
    current_logger.info("=" * 80)
    current_logger.info(f"SCRIPT START: {script_name}")
    if description:
        current_logger.info(f"DESCRIPTION: {description}")
    current_logger.info(f"START TIME: {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    current_logger.info("=" * 80)


def log_script_end(script_name: str, start_time: Optional[datetime.datetime] = None) -> None:
    """
    Log the end of a run with standardized format.

    Args:
        script_name: Name of the script that was executed
        start_time: Optional start time to calculate duration
    """
    current_logger = get_logger()
    end_time = datetime.datetime.now()

    current_logger.info("=" * 80)
    current_logger.info(f"SCRIPT END: {script_name}")
    current_logger.info(f"END TIME: {end_time.strftime('%Y-%m-%d %H:%M:%S')}")

    if start_time:
        duration = end_time - start_time
        current_logger.info(f"DURATION: {duration}")

    current_logger.info("=" * 80)


# =============================================================================
# STANDARDIZED ERROR HANDLING
# =============================================================================


def describe_aws_error(operation_name: str, error: Exception) -> str:
    """
    Build a one-line description of an AWS failure.

    Args:
        operation_name: Human-readable operation description
        error: The exception raised by boto3/botocore

    Returns:
        str: Message including the AWS error code where one is available
    """
    if isinstance(error, NoCredentialsError):
        return (
            f"{operation_name}: No AWS credentials found. "
            "Please configure credentials using 'aws configure' or environment variables."
        )
    if isinstance(error, ClientError):
        error_code = error.response.get('Error', {}).get('Code', 'Unknown')
        error_msg = error.response.get('Error', {}).get('Message', str(error))
        return f"{operation_name}: AWS error [{error_code}]: {error_msg}"
    if isinstance(error, BotoCoreError):
        return f"{operation_name}: AWS SDK error: {error}"
    return f"{operation_name}: Unexpected error: {error}"


@contextmanager
def handle_aws_operation(
    operation_name: str,
    error_class: Optional[Callable[..., Exception]] = None,
    **error_kwargs: Any
):
    """
    Context manager that translates boto3/botocore failures into package errors.

    Any exception raised inside the block is described with describe_aws_error()
    and re-raised as error_class(message, **error_kwargs), chained to the
    original. When error_class is None the original exception propagates after
    being logged at DEBUG.

    Args:
        operation_name: Human-readable operation description
        error_class: Exception type to raise in place of the original
        **error_kwargs: Extra keyword arguments for error_class

    Example:
        with handle_aws_operation("Fetching policy", PolicyFetchError, arn=arn):
            response = iam.get_policy(PolicyArn=arn)
    """
    try:
        yield
    except (ClientError, BotoCoreError) as e:
        message = describe_aws_error(operation_name, e)
        log_debug(message)
        if error_class is None:
            raise
        raise error_class(message, **error_kwargs) from e


# =============================================================================
# FILESYSTEM HELPERS
# =============================================================================


def atomic_write_text(path: Path, content: str) -> None:
    """
    Write text to path via a temporary sibling file and os.replace.

    A reader never observes a partially written file, and an existing file of
    the same name is overwritten in one step. The file is created with a plain
    open(), so its mode follows the process umask.

    Args:
        path: Destination file
        content: Text to write (UTF-8)
    """
    path = Path(path)
    tmp_name = path.with_name(f".{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")
    try:
        with open(tmp_name, "x", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
