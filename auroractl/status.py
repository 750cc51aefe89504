"""
The ``status`` workflow: list jobs, filter them, diff and classify each.

Errors are isolated per config file and per job. A failed listing still
uses whatever stdout it produced; a failed diff excludes that job from
the report.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

import click

from .aurora import AuroraClient, DiffCommandFailed, ListCommandFailed
from .diff import DiffClassification, classify_output
from .format import render_report
from .jobs import (
    JobFilter,
    JobIdentifier,
    MalformedJobPath,
    extract_job_list,
    parse_job_identifier,
    select_jobs,
)
from .logger import StructuredLogger, get_logger


@dataclass
class StatusSummary:
    files: int = 0
    jobs_listed: int = 0
    jobs_selected: int = 0
    malformed: int = 0
    dirty: int = 0
    clean: int = 0
    failed: int = 0
    classifications: List[DiffClassification] = field(default_factory=list)


def parse_listing(
    paths: Sequence[str],
    config_file: str,
    logger: StructuredLogger,
) -> Tuple[List[Tuple[int, JobIdentifier]], int]:
    """Parse job paths, skipping malformed ones. Indices follow ``paths``."""
    indexed = []
    malformed = 0
    for i, path in enumerate(paths):
        try:
            indexed.append((i, parse_job_identifier(path)))
        except MalformedJobPath as e:
            malformed += 1
            logger.record_error("MalformedJobPath")
            logger.error(f"{config_file}: {e}", index=i)
    return indexed, malformed


def _diff_and_classify(
    client: AuroraClient,
    config_file: str,
    job_index: int,
    job: JobIdentifier,
    logger: StructuredLogger,
) -> Optional[DiffClassification]:
    try:
        output = client.diff_job(job.path, config_file)
    except DiffCommandFailed as e:
        logger.error(str(e), file=config_file)
        return None
    return classify_output(job_index, job, output)


def process_file(
    client: AuroraClient,
    config_file: str,
    job_filter: JobFilter,
    summary: StatusSummary,
    verbose: bool = False,
    concurrency: int = 1,
    logger: Optional[StructuredLogger] = None,
    echo: Callable[[str], None] = click.echo,
) -> None:
    """Report on every selected job in one config file."""
    logger = logger or get_logger()

    try:
        raw = client.list_jobs(config_file)
    except ListCommandFailed as e:
        logger.record_error("ListCommandFailed")
        logger.error(str(e))
        raw = e.output

    paths = extract_job_list(raw)
    logger.info(f"Aurora file: {config_file} contains {len(paths)} jobs.")

    indexed, malformed = parse_listing(paths, config_file, logger)
    selected = select_jobs(indexed, job_filter)
    logger.info(f"Aurora file: {config_file} contains {len(selected)} jobs after filtering.")
    logger.record_file(config_file, len(paths), len(selected))

    summary.files += 1
    summary.jobs_listed += len(paths)
    summary.jobs_selected += len(selected)
    summary.malformed += malformed

    def work(item: Tuple[int, JobIdentifier]) -> Optional[DiffClassification]:
        return _diff_and_classify(client, config_file, item[0], item[1], logger)

    if concurrency > 1 and len(selected) > 1:
        with ThreadPoolExecutor(max_workers=concurrency) as executor:
            results = list(executor.map(work, selected))
    else:
        results = map(work, selected)

    for (job_index, job), c in zip(selected, results):
        if c is None:
            summary.failed += 1
            logger.record_diff_failure(config_file, "DiffCommandFailed")
            continue

        summary.classifications.append(c)
        logger.record_diff(config_file, c.dirty)
        if c.dirty:
            summary.dirty += 1
        else:
            summary.clean += 1

        hint = client.update_command(job.path, config_file)
        for line in render_report(c, verbose=verbose, update_hint=hint):
            echo(line)


def run_status(
    client: AuroraClient,
    config_files: Sequence[str],
    job_filter: JobFilter,
    verbose: bool = False,
    concurrency: int = 1,
    logger: Optional[StructuredLogger] = None,
    echo: Callable[[str], None] = click.echo,
) -> StatusSummary:
    """
    Summarize pending diffs for every job in every config file.

    Args:
        client: Aurora CLI wrapper
        config_files: Config files, processed in order
        job_filter: Role/env/job allow-lists
        verbose: Also print the free-form diff of each job
        concurrency: Max number of diff commands running at once
        logger: Logger (default: global logger)
        echo: Output function for report lines

    Returns:
        StatusSummary with counts and all classifications
    """
    logger = logger or get_logger()
    summary = StatusSummary()

    if job_filter.clusters:
        logger.debug("Cluster filter is not applied", clusters=sorted(job_filter.clusters))

    for config_file in config_files:
        process_file(
            client,
            config_file,
            job_filter,
            summary,
            verbose=verbose,
            concurrency=concurrency,
            logger=logger,
            echo=echo,
        )

    return summary
