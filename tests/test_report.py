"""
Tests for policy_export.report — summary DataFrame and CSV output.
"""

from pathlib import Path

import pandas as pd

from policy_export.pipeline import STATUS_EXPORTED, STATUS_FAILED, PolicyOutcome
from policy_export.report import SUMMARY_COLUMNS, build_summary, save_summary


def _outcomes():
    return [
        PolicyOutcome(
            arn="arn:aws:iam::aws:policy/ReadOnlyAccess",
            name="ReadOnlyAccess",
            status=STATUS_EXPORTED,
            version_id="v3",
            output_file=Path("policies/ReadOnlyAccess.json"),
        ),
        PolicyOutcome(
            arn="arn:aws:iam::aws:policy/Broken",
            name="Broken",
            status=STATUS_FAILED,
            error="Fetching default version: AWS error [NoSuchEntity]: not found",
        ),
    ]


class TestBuildSummary:
    def test_one_row_per_outcome(self):
        df = build_summary(_outcomes())

        assert list(df.columns) == SUMMARY_COLUMNS
        assert len(df) == 2
        assert df.loc[0, "Status"] == "exported"
        assert df.loc[0, "Output File"] == str(Path("policies/ReadOnlyAccess.json"))
        assert df.loc[1, "Default Version ID"] == ""
        assert "NoSuchEntity" in df.loc[1, "Error"]

    def test_empty_outcomes_keep_columns(self):
        df = build_summary([])
        assert df.empty
        assert list(df.columns) == SUMMARY_COLUMNS


class TestSaveSummary:
    def test_writes_csv(self, tmp_path):
        path = save_summary(build_summary(_outcomes()), tmp_path / "reports" / "summary.csv")

        assert path == tmp_path / "reports" / "summary.csv"
        loaded = pd.read_csv(path, keep_default_na=False)
        assert loaded["Policy Name"].tolist() == ["ReadOnlyAccess", "Broken"]
        assert loaded["Status"].tolist() == ["exported", "failed"]

    def test_unwritable_path_returns_none(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        assert save_summary(build_summary(_outcomes()), blocker / "summary.csv") is None
