"""
Heuristic category tagging for sheet rows.

Rules are evaluated top to bottom and the first predicate that matches
decides the label. Each predicate receives two uppercase strings:

  * ``priority``: the name, category and URL cells joined with spaces
  * ``full``: every cell of the row joined with spaces

Matching is loose: word-boundary regex mixed with prefix and substring
checks. "HRTX Labs" lands in HRT through the prefix check.
"""
import re
from typing import Callable, List, Tuple

from .types import (
    CATEGORY_COLUMNS,
    IDENTITY_COLUMNS,
    URL_COLUMNS,
    CategoryType,
    RawRecord,
    find_column_value,
)

Predicate = Callable[[str, str], bool]


def token_rule(token: str) -> Predicate:
    """Whole word anywhere, or the priority text starts with / contains 'TOKEN '."""
    word = re.compile(rf"\b{re.escape(token)}\b")

    def _match(priority: str, full: str) -> bool:
        return (
            bool(word.search(priority))
            or bool(word.search(full))
            or priority.startswith(token)
            or f"{token} " in priority
        )

    return _match


def marker_rule(marker: str) -> Predicate:
    """Plain substring anywhere in the row."""
    def _match(priority: str, full: str) -> bool:
        return marker in priority or marker in full

    return _match


CATEGORY_RULES: List[Tuple[Predicate, CategoryType]] = [
    (token_rule("HRT"), CategoryType.HRT),
    (token_rule("TRT"), CategoryType.TRT),
    (marker_rule("PROVIDER"), CategoryType.PROVIDER),
]


def priority_text(row: RawRecord) -> str:
    fields = (
        find_column_value(row, IDENTITY_COLUMNS),
        find_column_value(row, CATEGORY_COLUMNS),
        find_column_value(row, URL_COLUMNS),
    )
    return " ".join(f for f in fields if f).upper()


def full_text(row: RawRecord) -> str:
    return " ".join(v for v in row.values() if v).upper()


def classify_record(
    row: RawRecord,
    rules: List[Tuple[Predicate, CategoryType]] = CATEGORY_RULES,
) -> CategoryType:
    priority, full = priority_text(row), full_text(row)
    for predicate, label in rules:
        if predicate(priority, full):
            return label
    return CategoryType.NONE
