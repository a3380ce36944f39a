"""
Aggregates the outcome of an import run.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List

from ..domain.entries import FileEntry
from ..utils.format_utils import formatted_size


@dataclass(frozen=True)
class ImportSummary:
    """Counts and sizes over all processed entries."""

    total_count: int = 0
    success_count: int = 0
    copy_success_count: int = 0
    copy_fail_count: int = 0
    reencode_success_count: int = 0
    reencode_fail_count: int = 0
    size_before: int = 0
    size_after: int = 0

    @property
    def fail_count(self) -> int:
        return self.copy_fail_count + self.reencode_fail_count

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["fail_count"] = self.fail_count
        return data


def summarize(entries: Iterable[FileEntry]) -> ImportSummary:
    """
    Builds the summary of a finished run.

    `size_before` counts every entry; `size_after` only counts successful ones,
    as failed entries always carry a size of 0.
    """
    entries = list(entries)
    return ImportSummary(
        total_count=len(entries),
        success_count=sum(1 for e in entries if e.success),
        copy_success_count=sum(1 for e in entries if not e.reencode and e.success),
        copy_fail_count=sum(1 for e in entries if not e.reencode and not e.success),
        reencode_success_count=sum(1 for e in entries if e.reencode and e.success),
        reencode_fail_count=sum(1 for e in entries if e.reencode and not e.success),
        size_before=sum(e.size for e in entries),
        size_after=sum(e.size_after_action for e in entries if e.success),
    )


def render_summary(summary: ImportSummary) -> List[str]:
    """The summary as console lines."""
    return [
        "__Summary__",
        f"Total number of files: {summary.total_count}, of these successfully processed: {summary.success_count}",
        f"Copy:     success count: {summary.copy_success_count}, fail count: {summary.copy_fail_count}",
        f"Reencode: success count: {summary.reencode_success_count}, fail count: {summary.reencode_fail_count}",
        f"Filesize: before: {formatted_size(summary.size_before)}, after: {formatted_size(summary.size_after)}",
    ]
