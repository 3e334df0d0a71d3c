"""
Export module - Saving and loading generated tracks.
"""

from trackgen.export.exporter import ExporterConfig, TrackExporter, to_editor_data

__all__ = ["ExporterConfig", "TrackExporter", "to_editor_data"]
