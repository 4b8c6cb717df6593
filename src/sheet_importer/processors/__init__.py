"""Worksheet processing."""

from sheet_importer.processors.table_extractor import TableExtractor

__all__ = ["TableExtractor"]
