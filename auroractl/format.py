"""Colorized rendering of job diff classifications."""

from typing import List, Optional

import click

from .diff import DiffClassification


def add(text: str) -> str:
    return click.style(text, fg="bright_green")


def update(text: str) -> str:
    return click.style(text, fg="bright_yellow")


def remove(text: str) -> str:
    return click.style(text, fg="red", bold=True)


def clean(text: str) -> str:
    return click.style(text, fg="bright_green")


def warn(text: str) -> str:
    return click.style(text, fg="yellow", bold=True)


def format_status_line(c: DiffClassification) -> str:
    """
    Render the one-line summary for a job.

    Field order is fixed: index, path, dirty, remove, add, update and the
    number of free-form diff lines.
    """
    label = f"# Job [{c.job_index}: {c.job.path}]: "
    label = update(label) if c.dirty else clean(label)
    return (
        f"{label}Dirty: {str(c.dirty).lower()}. "
        f"Remove: {remove(c.remove_range or '')}, "
        f"Add: {add(c.add_range or '')}, "
        f"Update: {update(c.update_range or '')}. "
        f"(Diff: {c.diff_line_count} lines)"
    )


def render_report(
    c: DiffClassification,
    verbose: bool = False,
    update_hint: Optional[str] = None,
) -> List[str]:
    """Status line, update hint for dirty jobs and, when verbose, the raw diff."""
    lines = [format_status_line(c)]
    if c.dirty and update_hint:
        lines.append(warn(update_hint))
    if verbose:
        lines.extend(c.freeform_lines)
    return lines
