"""Import orchestration."""

from sheet_importer.pipeline.import_pipeline import ImportPipeline, process

__all__ = ["ImportPipeline", "process"]
