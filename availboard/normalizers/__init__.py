from .pipeline import get_default_normalizer, normalize, NormalizerPipeline
from .rules import RuleNormalizer, parse_number, parse_dt, has_error
from .classify import classify_record, CATEGORY_RULES
from .types import CategoryType, NormalizedRecord, RawRecord, find_column_value
from .base import Normalizer

__all__ = [
    "get_default_normalizer",
    "normalize",
    "NormalizerPipeline",
    "RuleNormalizer",
    "parse_number",
    "parse_dt",
    "has_error",
    "classify_record",
    "CATEGORY_RULES",
    "CategoryType",
    "NormalizedRecord",
    "RawRecord",
    "find_column_value",
    "Normalizer",
]
