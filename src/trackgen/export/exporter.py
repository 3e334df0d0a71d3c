"""
Track exporter - Save and load generated tracks.

Provides:
- JSON export of the full track record
- Reduced editor format (point list + width)
- CSV segment table for spreadsheets and plotting
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List
import csv
import json
import logging
import numpy as np

from trackgen.track.stats import analyze
from trackgen.track.track import Track

logger = logging.getLogger(__name__)


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


@dataclass
class ExporterConfig:
    """Exporter configuration."""
    output_dir: str = "./tracks"
    include_stats: bool = True
    indent: int | None = 2


def to_editor_data(track: Track) -> Dict[str, Any]:
    """Down-convert a track to the editor's point list format.

    The point list is the start of the first segment followed by the end
    of every segment; width is the mean segment width.

    Args:
        track: Generated track

    Returns:
        Dictionary with ``points``, ``width`` and ``length``
    """
    points: List[Dict[str, float]] = []
    if track.segments:
        points.append(track.segments[0].start_pos.get_state())
        points.extend(s.end_pos.get_state() for s in track.segments)
        width = float(np.mean([s.width for s in track.segments]))
    else:
        width = 0.0
    return {"points": points, "width": width, "length": track.length}


class TrackExporter:
    """Export tracks to files.

    Usage:
        exporter = TrackExporter(ExporterConfig(output_dir="out"))
        path = exporter.export_json(track)
        same_track = exporter.load_json(path)
    """

    def __init__(self, config: ExporterConfig | None = None):
        """Initialize exporter.

        Args:
            config: Exporter configuration
        """
        self.config = config or ExporterConfig()

        # Ensure output directory exists
        self._output_path = Path(self.config.output_dir)
        self._output_path.mkdir(parents=True, exist_ok=True)

    @property
    def output_path(self) -> Path:
        return self._output_path

    def _write_json(self, data: dict, filename: str) -> Path:
        output_file = self._output_path / filename
        with open(output_file, 'w') as f:
            json.dump(data, f, indent=self.config.indent, cls=NumpyEncoder)
        logger.info(f"Wrote {output_file}")
        return output_file

    def export_json(self, track: Track, filename: str = "track.json") -> Path:
        """Export the full track record to JSON.

        Args:
            track: Track to export
            filename: Output filename

        Returns:
            Path to exported file
        """
        data = track.get_state()
        if self.config.include_stats:
            data["stats"] = analyze(track).get_state()
        return self._write_json(data, filename)

    def export_editor(self, track: Track, filename: str = "custom_track.json") -> Path:
        """Export the reduced editor format.

        Args:
            track: Track to export
            filename: Output filename

        Returns:
            Path to exported file
        """
        return self._write_json(to_editor_data(track), filename)

    def export_csv(self, track: Track, filename: str = "segments.csv") -> Path:
        """Export one row per segment.

        Args:
            track: Track to export
            filename: Output filename

        Returns:
            Path to exported file
        """
        output_file = self._output_path / filename

        with open(output_file, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow([
                "index", "type", "length", "width",
                "start_x", "start_y", "start_z",
                "end_x", "end_y", "end_z",
                "heading_change_deg", "features",
            ])
            for segment in track.segments:
                writer.writerow([
                    segment.index,
                    segment.kind.value,
                    f"{segment.length:.3f}",
                    f"{segment.width:.3f}",
                    *(f"{v:.3f}" for v in segment.start_pos.as_tuple()),
                    *(f"{v:.3f}" for v in segment.end_pos.as_tuple()),
                    f"{np.degrees(segment.heading_change):.2f}",
                    len(segment.features),
                ])

        logger.info(f"Wrote {output_file}")
        return output_file

    @staticmethod
    def load_json(path: str | Path) -> Track:
        """Load a track written by ``export_json``.

        Args:
            path: JSON file path

        Returns:
            Rebuilt track
        """
        with open(path, 'r') as f:
            data = json.load(f)
        return Track.from_state(data)

    @staticmethod
    def load_editor(path: str | Path) -> Dict[str, Any]:
        """Load an editor-format file.

        Returns:
            Dictionary with ``points`` as an (N, 3) array, ``width`` and ``length``
        """
        with open(path, 'r') as f:
            data = json.load(f)
        points = np.array(
            [[p["x"], p["y"], p["z"]] for p in data.get("points", [])],
            dtype=np.float64,
        ).reshape(-1, 3)
        return {
            "points": points,
            "width": data.get("width", 8.0),
            "length": data.get("length", 0.0),
        }
