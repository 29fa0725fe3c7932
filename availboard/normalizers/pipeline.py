import logging
from collections import Counter
from typing import Iterable, List, Optional

from .base import Normalizer
from .types import NormalizedRecord, RawRecord
from .rules import RuleNormalizer

log = logging.getLogger(__name__)

class NormalizerPipeline:
    """
    Runs a record-level normalizer over a whole sheet.
    Rows are numbered in input order so every record keeps a stable index.
    """
    def __init__(self, normalizer: Normalizer):
        self.normalizer = normalizer

    def normalize_rows(self, rows: Iterable[RawRecord]) -> List[NormalizedRecord]:
        out = [self.normalizer.normalize_record(row, i) for i, row in enumerate(rows)]
        if out:
            cats = Counter(r.category.value for r in out)
            log.debug(
                "normalized %d rows (errors=%d, categories=%s)",
                len(out), sum(r.has_error for r in out), dict(cats),
            )
        return out

def get_default_normalizer() -> Normalizer:
    """Factory for the record-level normalizer used by the service."""
    return RuleNormalizer()

def normalize(rows: Iterable[RawRecord], normalizer: Optional[Normalizer] = None) -> List[NormalizedRecord]:
    """Turn raw sheet rows into typed, classified records."""
    return NormalizerPipeline(normalizer or get_default_normalizer()).normalize_rows(rows)
