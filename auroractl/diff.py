"""
Classification of ``aurora job diff`` output.

Sample output of a job with pending instance updates::

    This job update will:
    update instances: [0-2]
    with diff:

    59c59,60
    <   -com.twitter.finagle.netty3.numWorkers=3
    ---
    >   -com.twitter.finagle.netty3.numWorkers=6

Everything printed before the header line is a free-form diff and marks
the job dirty. Instance range lines are recognized anywhere in the output.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from .jobs import JobIdentifier

HEADER_MARKER = "This job update will:"
INSTANCE_RANGE_RE = re.compile(r"\[([^\[\]]*)\]")


class LineKind(Enum):
    HEADER = "header"
    REMOVE = "remove"
    ADD = "add"
    UPDATE = "update"
    OTHER = "other"


# Checked in order, first matching prefix wins.
LINE_RULES = (
    (HEADER_MARKER, LineKind.HEADER),
    ("remove instances:", LineKind.REMOVE),
    ("add instances:", LineKind.ADD),
    ("update instances:", LineKind.UPDATE),
)


def line_kind(line: str) -> LineKind:
    for prefix, kind in LINE_RULES:
        if line.startswith(prefix):
            return kind
    return LineKind.OTHER


def extract_instance_range(line: str) -> str:
    """Return the first ``[...]`` group of a line, brackets included, or ''."""
    match = INSTANCE_RANGE_RE.search(line)
    return match.group(0) if match else ""


@dataclass
class DiffClassification:
    job_index: int
    job: JobIdentifier
    dirty: bool = False
    found_header: bool = False
    add_range: Optional[str] = None
    remove_range: Optional[str] = None
    update_range: Optional[str] = None
    freeform_lines: List[str] = field(default_factory=list)

    @property
    def diff_line_count(self) -> int:
        return len(self.freeform_lines)


def classify(job_index: int, job: JobIdentifier, lines: Iterable[str]) -> DiffClassification:
    """
    Classify diff output lines for a single job in one forward pass.

    Args:
        job_index: Position of the job in the unfiltered listing
        job: The job the diff belongs to
        lines: Diff output, one line per item, without line endings

    Returns:
        Populated DiffClassification
    """
    result = DiffClassification(job_index=job_index, job=job)

    for line in lines:
        kind = line_kind(line)

        if kind is LineKind.HEADER:
            result.found_header = True
        elif kind is LineKind.REMOVE:
            result.remove_range = extract_instance_range(line)
            result.dirty = True
        elif kind is LineKind.ADD:
            result.add_range = extract_instance_range(line)
            result.dirty = True
        elif kind is LineKind.UPDATE:
            # An update on its own does not mark the job dirty.
            result.update_range = extract_instance_range(line)
        elif not result.found_header:
            result.freeform_lines.append(line)
            result.dirty = True

    return result


def split_output_lines(output: str) -> List[str]:
    """
    Split command output on "\\n" only, dropping one trailing "\\r" per line.

    Other line-break characters (form feed, vertical tab, U+2028) stay part
    of the line. A trailing newline does not produce an empty last line.
    """
    lines = output.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def classify_output(job_index: int, job: JobIdentifier, output: str) -> DiffClassification:
    """Classify raw stdout of the diff command."""
    return classify(job_index, job, split_output_lines(output))
