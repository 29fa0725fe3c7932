# availboard/normalizers/base.py
from typing import Protocol
from .types import NormalizedRecord, RawRecord

class Normalizer(Protocol):
    def normalize_record(self, rec: RawRecord, index: int) -> NormalizedRecord:
        """Return a NEW normalized record. Do not mutate `rec`."""
        ...
