"""
Track statistics - Aggregates over a finished track.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from trackgen.track.segment import HillDetails, SegmentKind
from trackgen.track.track import Track


@dataclass(frozen=True)
class TrackStats:
    """Summary of a generated track.

    The four named counters only tally their own kind; ``segment_counts``
    covers every kind.
    """
    straight_segments: int = 0
    corner_segments: int = 0
    hill_segments: int = 0
    chicane_segments: int = 0
    total_length: float = 0.0
    average_corner_radius: float = 0.0
    max_elevation: float = 0.0        # From hill heights
    min_elevation: float = 0.0
    highest_point: float = 0.0        # Over segment end points
    lowest_point: float = 0.0
    segment_counts: Mapping[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "segment_counts", MappingProxyType(dict(self.segment_counts)))

    def get_state(self) -> dict:
        return {
            "straight_segments": self.straight_segments,
            "corner_segments": self.corner_segments,
            "hill_segments": self.hill_segments,
            "chicane_segments": self.chicane_segments,
            "total_length": self.total_length,
            "average_corner_radius": self.average_corner_radius,
            "max_elevation": self.max_elevation,
            "min_elevation": self.min_elevation,
            "highest_point": self.highest_point,
            "lowest_point": self.lowest_point,
            "segment_counts": dict(self.segment_counts),
        }


def analyze(track: Track) -> TrackStats:
    """Compute statistics for a track.

    Args:
        track: Finished track

    Returns:
        Track statistics
    """
    counts = {kind.value: 0 for kind in SegmentKind}
    corner_radius_total = 0.0
    max_elevation = 0.0
    min_elevation = 0.0

    for segment in track.segments:
        counts[segment.kind.value] += 1
        if segment.kind is SegmentKind.CORNER:
            corner_radius_total += segment.radius
        elif isinstance(segment.details, HillDetails):
            max_elevation = max(max_elevation, segment.details.height)
            min_elevation = min(min_elevation, -segment.details.height)

    corner_count = counts[SegmentKind.CORNER.value]
    heights = [track.start_position.y] + [s.end_pos.y for s in track.segments]

    return TrackStats(
        straight_segments=counts[SegmentKind.STRAIGHT.value],
        corner_segments=corner_count,
        hill_segments=counts[SegmentKind.HILL.value],
        chicane_segments=counts[SegmentKind.CHICANE.value],
        total_length=track.length,
        average_corner_radius=corner_radius_total / corner_count if corner_count else 0.0,
        max_elevation=max_elevation,
        min_elevation=min_elevation,
        highest_point=max(heights),
        lowest_point=min(heights),
        segment_counts=counts,
    )
