"""
Run summary report.

One row per listed ARN with its export status, written as CSV next to (never
inside) the policies directory.
"""

from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd

from policy_export import utils

SUMMARY_COLUMNS = [
    "Policy Name",
    "Policy ARN",
    "Status",
    "Default Version ID",
    "Output File",
    "Error",
]


def build_summary(outcomes: Iterable) -> pd.DataFrame:
    """
    Convert PolicyOutcome records to a DataFrame.

    Args:
        outcomes: PolicyOutcome instances, in listing order

    Returns:
        DataFrame with SUMMARY_COLUMNS (empty frame with those columns if no outcomes)
    """
    rows = [
        {
            "Policy Name": outcome.name,
            "Policy ARN": outcome.arn,
            "Status": outcome.status,
            "Default Version ID": outcome.version_id or "",
            "Output File": str(outcome.output_file) if outcome.output_file else "",
            "Error": outcome.error or "",
        }
        for outcome in outcomes
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def save_summary(df: pd.DataFrame, path: Union[str, Path]) -> Optional[Path]:
    """
    Write the summary DataFrame as CSV.

    Returns:
        Path of the written file, or None if it could not be written.
    """
    summary_path = Path(path)
    try:
        summary_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(summary_path, index=False)
    except OSError as e:
        utils.log_error(f"Failed to write summary report {summary_path}", e)
        return None

    utils.log_success(f"Summary report written to {summary_path} ({len(df)} row(s))")
    return summary_path
