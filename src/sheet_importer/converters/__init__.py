"""Column label and date conversion helpers."""

from sheet_importer.converters.column_codec import to_label, to_number
from sheet_importer.converters.date_normalizer import normalize

__all__ = ["to_label", "to_number", "normalize"]
