# mypy: ignore-errors
# tests/test_recompute_cli.py
"""Tests for the firehose-recompute command."""

import pytest

from firehose.scripts import recompute
from firehose.services.errors import PersistenceError


@pytest.fixture()
def jobs(mocker):
    return (
        mocker.patch.object(recompute, "run_hotness", return_value=3),
        mocker.patch.object(recompute, "run_leaderboard", return_value={"total": 1, "weekly": 0}),
    )


def test_hotness_only(jobs) -> None:
    hotness, leaderboard = jobs
    assert recompute.main(["hotness"]) == 0
    hotness.assert_called_once_with()
    leaderboard.assert_not_called()


def test_all_jobs(jobs) -> None:
    hotness, leaderboard = jobs
    assert recompute.main(["all", "--verbose"]) == 0
    hotness.assert_called_once_with()
    leaderboard.assert_called_once_with()


def test_failure_exit_code(jobs) -> None:
    hotness, _ = jobs
    hotness.side_effect = PersistenceError("Failed to update hotness")
    assert recompute.main(["hotness"]) == 1


def test_unknown_job_exits(jobs) -> None:
    with pytest.raises(SystemExit):
        recompute.main(["everything"])
