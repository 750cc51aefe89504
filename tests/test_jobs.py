"""
Tests for job path parsing, listing extraction and filtering.
"""

import pytest

from auroractl.jobs import (
    JobFilter,
    JobIdentifier,
    MalformedJobPath,
    extract_job_list,
    filter_jobs,
    parse_job_identifier,
    select_jobs,
)


class TestParseJobIdentifier:
    """Test cluster/role/env/job parsing."""

    def test_parses_segments(self):
        job = parse_job_identifier("west/www-data/prod/hello")
        assert job == JobIdentifier(
            cluster="west", role="www-data", env="prod", job="hello",
            path="west/www-data/prod/hello",
        )

    @pytest.mark.parametrize("path", [
        "west/www-data/prod/hello",
        "a/b/c/d",
        "smf1/mesos/devel/hello_world.v2",
    ])
    def test_round_trip(self, path):
        """Joining the parsed fields gives back the input."""
        job = parse_job_identifier(path)
        assert "/".join([job.cluster, job.role, job.env, job.job]) == path
        assert job.path == path

    @pytest.mark.parametrize("path", ["", "west", "west/www-data/prod", "a/b/c/d/e"])
    def test_wrong_segment_count_raises(self, path):
        with pytest.raises(MalformedJobPath, match="malformed job path"):
            parse_job_identifier(path)

    def test_empty_segments_are_not_rejected(self):
        """Only the segment count is checked."""
        job = parse_job_identifier("west//prod/")
        assert job.role == ""
        assert job.job == ""

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            parse_job_identifier("x/y")


class TestExtractJobList:
    """Test parsing of `config list` output."""

    def test_simple_list(self):
        assert extract_job_list("[a, b, c]") == ["a", "b", "c"]

    def test_no_brackets(self):
        assert extract_job_list("no brackets here") == []

    def test_empty_brackets(self):
        assert extract_job_list("jobs=[]") == []

    def test_empty_output(self):
        assert extract_job_list("") == []

    def test_surrounding_text(self, sample_list_output):
        assert extract_job_list(sample_list_output) == [
            "west/www-data/prod/hello",
            "west/batch/devel/cron",
            "east/www-data/staging/hello",
        ]

    def test_only_first_group_used(self):
        assert extract_job_list("[a/b/c/d] and [e/f/g/h]") == ["a/b/c/d"]

    def test_nested_brackets_pick_innermost(self):
        assert extract_job_list("[[x, y]]") == ["x", "y"]

    def test_runs_of_separators(self):
        assert extract_job_list("[a,,  b ,c]") == ["a", "b", "c"]


def _jobs(*paths):
    return [parse_job_identifier(p) for p in paths]


class TestFilterJobs:
    """Test role/env/job allow-list filtering."""

    def test_empty_filter_passes_everything(self):
        jobs = _jobs("w/r1/e1/j1", "w/r2/e2/j2", "w/r3/e3/j3")
        selected = filter_jobs(jobs, JobFilter())
        assert [job for _, job in selected] == jobs
        assert [i for i, _ in selected] == [0, 1, 2]

    def test_role_filter(self):
        jobs = _jobs("w/webserver/prod/a", "w/batch/prod/b")
        selected = filter_jobs(jobs, JobFilter.from_lists(roles=["webserver"]))
        assert [job.role for _, job in selected] == ["webserver"]

    def test_role_filter_ignores_env_and_job(self):
        jobs = _jobs("w/batch/prod/webserver", "w/webserver/devel/x")
        selected = filter_jobs(jobs, JobFilter.from_lists(roles=["webserver"]))
        assert [job.path for _, job in selected] == ["w/webserver/devel/x"]

    def test_criteria_are_or_combined(self):
        jobs = _jobs("w/r1/prod/a", "w/r2/devel/b", "w/r3/test/c", "w/r4/test/d")
        job_filter = JobFilter.from_lists(roles=["r1"], envs=["devel"], jobs=["c"])
        selected = filter_jobs(jobs, job_filter)
        assert [job.job for _, job in selected] == ["a", "b", "c"]

    def test_index_is_position_in_unfiltered_list(self):
        jobs = _jobs("w/a/e/j0", "w/b/e/j1", "w/a/e/j2")
        selected = filter_jobs(jobs, JobFilter.from_lists(roles=["a"]))
        assert [i for i, _ in selected] == [0, 2]

    def test_no_match(self):
        jobs = _jobs("w/a/e/j")
        assert filter_jobs(jobs, JobFilter.from_lists(envs=["prod"])) == []

    def test_cluster_filter_does_not_select(self):
        """The cluster allow-list is carried but not applied."""
        jobs = _jobs("west/a/e/j", "east/a/e/j")
        job_filter = JobFilter.from_lists(clusters=["west"])
        assert job_filter.is_empty()
        assert len(filter_jobs(jobs, job_filter)) == 2

    def test_select_keeps_given_indices(self):
        indexed = [(3, parse_job_identifier("w/a/e/j")), (7, parse_job_identifier("w/b/e/j"))]
        assert select_jobs(indexed, JobFilter.from_lists(roles=["b"]))[0][0] == 7
