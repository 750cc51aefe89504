"""
Job identifiers, job listing extraction and job filtering.

A job path has the shape ``cluster/role/env/job``. The external
``config list`` command prints the jobs declared in a config file as a
bracketed, comma separated list which is turned into job paths here.
"""

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Sequence, Tuple

JOB_LIST_RE = re.compile(r"\[([^\[\]]*)\]")
JOB_SEPARATORS_RE = re.compile(r"[\[\], ]+")


class MalformedJobPath(ValueError):
    """Raised when a job path does not have exactly 4 segments."""
    pass


@dataclass(frozen=True)
class JobIdentifier:
    cluster: str
    role: str
    env: str
    job: str
    path: str


def parse_job_identifier(path: str) -> JobIdentifier:
    """Parse a ``cluster/role/env/job`` string into a JobIdentifier."""
    parts = path.split("/")
    if len(parts) != 4:
        raise MalformedJobPath(f"malformed job path: {path}")
    cluster, role, env, job = parts
    return JobIdentifier(cluster=cluster, role=role, env=env, job=job, path=path)


def extract_job_list(raw_output: str) -> List[str]:
    """
    Extract job paths from the output of ``config list``.

    Only the first bracketed group is considered. Returns an empty list
    when there is no bracketed group or it is empty.
    """
    match = JOB_LIST_RE.search(raw_output or "")
    if not match:
        return []
    return [p for p in JOB_SEPARATORS_RE.split(match.group(0)) if p]


@dataclass(frozen=True)
class JobFilter:
    """Allow-lists applied to a job listing. Empty sets mean no restriction."""

    roles: FrozenSet[str] = field(default_factory=frozenset)
    envs: FrozenSet[str] = field(default_factory=frozenset)
    jobs: FrozenSet[str] = field(default_factory=frozenset)
    # Accepted on the command line, not used for selection.
    clusters: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_lists(
        cls,
        roles: Iterable[str] = (),
        envs: Iterable[str] = (),
        jobs: Iterable[str] = (),
        clusters: Iterable[str] = (),
    ) -> "JobFilter":
        return cls(
            roles=frozenset(roles),
            envs=frozenset(envs),
            jobs=frozenset(jobs),
            clusters=frozenset(clusters),
        )

    def is_empty(self) -> bool:
        return not (self.roles or self.envs or self.jobs)

    def matches(self, job: JobIdentifier) -> bool:
        """A job matches when any non-empty allow-list contains it."""
        if self.is_empty():
            return True
        if self.roles and job.role in self.roles:
            return True
        if self.envs and job.env in self.envs:
            return True
        if self.jobs and job.job in self.jobs:
            return True
        return False


def select_jobs(
    indexed_jobs: Iterable[Tuple[int, JobIdentifier]],
    job_filter: JobFilter,
) -> List[Tuple[int, JobIdentifier]]:
    """Keep the (index, job) pairs accepted by the filter, in input order."""
    return [(i, job) for i, job in indexed_jobs if job_filter.matches(job)]


def filter_jobs(
    jobs: Sequence[JobIdentifier],
    job_filter: JobFilter,
) -> List[Tuple[int, JobIdentifier]]:
    """Filter a job listing; each result carries its position in ``jobs``."""
    return select_jobs(enumerate(jobs), job_filter)
