"""Spreadsheet availability ingestion: fetch, normalize, classify, compare."""

__version__ = "0.1.0"
