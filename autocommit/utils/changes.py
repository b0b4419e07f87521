"""
Change classification and bounded diff summaries.

Both functions here shape what the text backend gets to see: the classifier
groups staged paths by kind, the summarizer cuts every diff down to a line
budget that depends on the file type and on how big the diff is.
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from loguru import logger

from ..git_ops.repository import FileChange, Operation
from .security import is_sensitive, matching_pattern, sensitive_marker


DiffProvider = Callable[[str], str]


class ChangeGroup(Enum):
    """Buckets of the rendered classification, in render order."""

    REDACTED = "Sensitive Files (Excluded from Analysis):"
    TESTS = "Tests:"
    SOURCE = "Source Files:"
    DOCS = "Documentation:"
    OTHER = "Other Changes:"


class FileCategory(Enum):
    """File categories that drive the diff line budget."""

    TESTS = "tests"
    SOURCE = "source"
    DOCS = "docs"
    CONFIG = "config"
    MARKUP = "markup"
    OTHER = "other"


_TEST_FILE = re.compile(r'\.(test|spec)\.(js|ts|jsx|tsx)$')
_SOURCE_FILE = re.compile(r'\.(js|ts|jsx|tsx|py|go|java|cpp|c)$')
_DOCS_FILE = re.compile(r'\.(md|rst)$')

# The budget categories are slightly wider than the classifier groups.
_CATEGORY_PATTERNS: Tuple[Tuple[FileCategory, re.Pattern], ...] = (
    (FileCategory.TESTS, _TEST_FILE),
    (FileCategory.SOURCE, _SOURCE_FILE),
    (FileCategory.DOCS, re.compile(r'\.(md|rst|txt|doc)$')),
    (FileCategory.CONFIG, re.compile(r'\.(json|yaml|yml|toml)$')),
    (FileCategory.MARKUP, re.compile(r'\.(css|scss|less|html)$')),
)

BASE_BUDGETS: Dict[FileCategory, int] = {
    FileCategory.TESTS: 5,
    FileCategory.SOURCE: 30,
    FileCategory.DOCS: 15,
    FileCategory.CONFIG: 20,
    FileCategory.MARKUP: 25,
    FileCategory.OTHER: 20,
}

LARGE_DIFF_LINES = 100
HUGE_DIFF_LINES = 300


@dataclass
class Classification:
    """Staged paths grouped for the evidence block."""

    groups: Dict[ChangeGroup, List[str]] = field(
        default_factory=lambda: {group: [] for group in ChangeGroup}
    )
    operations: Dict[Operation, int] = field(default_factory=dict)

    def __getitem__(self, group: ChangeGroup) -> List[str]:
        return self.groups[group]

    @property
    def total(self) -> int:
        return sum(len(entries) for entries in self.groups.values())

    def render(self) -> str:
        sections = [
            f"{group.value}\n" + "\n".join(entries)
            for group, entries in self.groups.items()
            if entries
        ]
        if self.operations:
            counts = ", ".join(
                f"{self.operations[op]} {op.value}" for op in Operation if op in self.operations
            )
            sections.append(f"Operations: {counts}")
        return "\n\n".join(sections)


def group_for(path: str) -> ChangeGroup:
    if is_sensitive(path):
        return ChangeGroup.REDACTED
    if _TEST_FILE.search(path):
        return ChangeGroup.TESTS
    if _SOURCE_FILE.search(path):
        return ChangeGroup.SOURCE
    if _DOCS_FILE.search(path):
        return ChangeGroup.DOCS
    return ChangeGroup.OTHER


def category_for(path: str) -> FileCategory:
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(path):
            return category
    return FileCategory.OTHER


def classify_changes(paths: Iterable[str]) -> Classification:
    """Group paths by kind; sensitive paths only contribute a marker."""
    classification = Classification()
    for path in paths:
        group = group_for(path)
        entry = sensitive_marker(path) if group is ChangeGroup.REDACTED else path
        classification.groups[group].append(entry)
    return classification


def classify_change_set(changes: Sequence[FileChange]) -> Classification:
    classification = classify_changes(change.path for change in changes)
    classification.operations = dict(Counter(change.operation for change in changes))
    return classification


def build_change_set(staged: Iterable[Tuple[str, Operation]]) -> Tuple[FileChange, ...]:
    """Turn the inspector's staged listing into immutable file changes."""
    return tuple(
        FileChange(path=path, operation=operation, sensitive=is_sensitive(path))
        for path, operation in staged
    )


def budget_for(category: FileCategory, raw_line_count: int) -> int:
    """Lines of diff to keep for a file.

    Never increases with ``raw_line_count``: big diffs get half the base
    budget, very big ones a third.
    """
    base = BASE_BUDGETS[category]
    if raw_line_count > HUGE_DIFF_LINES:
        return base // 3
    if raw_line_count > LARGE_DIFF_LINES:
        return base // 2
    return base


def summarize_diff(path: str, diff: str) -> str:
    """Header plus the budgeted head of one file's diff."""
    lines = diff.splitlines()
    budget = budget_for(category_for(path), len(lines))
    logger.debug(f"{path}: {len(lines)} diff lines, keeping {min(budget, len(lines))}")

    header = f"File: {path}"
    if not lines:
        return f"{header}\n(no textual diff)"
    return "\n".join([header] + lines[:budget])


def summarize_diffs(paths: Iterable[str], diff_provider: DiffProvider) -> str:
    """Concatenate per-file summaries in input order, separated by blank lines.

    The diff provider is never called for sensitive paths.
    """
    blocks = []
    for path in paths:
        if is_sensitive(path):
            logger.debug(f"Excluding sensitive file from diff summary: {path} (matched {matching_pattern(path)})")
            blocks.append(sensitive_marker(path))
            continue
        blocks.append(summarize_diff(path, diff_provider(path)))
    return "\n\n".join(blocks)
