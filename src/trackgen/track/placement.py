"""
Placement - Checkpoints and track-wide features along the segment chain.

Both placers resolve an arc-length distance to a world position by
walking the segments, accumulating their nominal lengths, and
interpolating linearly inside the segment that contains the distance.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from trackgen.track.features import Feature, FeatureAnchor, FeatureType
from trackgen.track.geometry import Vec3
from trackgen.track.random_stream import RandomStream
from trackgen.track.segment import TrackSegment


DEFAULT_CHECKPOINT_COUNT = 8

PIT_ENTRANCE_THRESHOLD = 0.3          # Draw must exceed this (70% chance)
PIT_ENTRANCE_FRACTION = 0.7           # Share of the lap before the pit entry
PIT_ENTRANCE_LENGTH = 20.0
GRANDSTAND_ROLLS = 3
GRANDSTAND_THRESHOLD = 0.6


@dataclass(frozen=True)
class Checkpoint:
    """Progress marker used for lap counting and position scoring."""
    id: int
    position: Vec3
    segment_index: int
    distance: float
    is_finish: bool = False

    def get_state(self) -> dict:
        return {
            "id": self.id,
            "position": self.position.get_state(),
            "segment_index": self.segment_index,
            "distance": self.distance,
            "is_finish": self.is_finish,
        }

    @classmethod
    def from_state(cls, state: dict) -> "Checkpoint":
        return cls(
            id=state["id"],
            position=Vec3.from_state(state["position"]),
            segment_index=state["segment_index"],
            distance=state["distance"],
            is_finish=state.get("is_finish", False),
        )


def locate_distance(
    segments: Sequence[TrackSegment],
    distance: float,
) -> Tuple[int, float]:
    """Find the segment containing an arc-length distance.

    Args:
        segments: Ordered segment chain
        distance: Distance from the track start

    Returns:
        Tuple of (segment_index, progress within that segment). Distances
        beyond the end resolve to the end of the last segment.
    """
    if not segments:
        raise ValueError("Cannot locate a distance on a track without segments")

    cumulative = 0.0
    for index, segment in enumerate(segments):
        if cumulative + segment.length >= distance:
            if segment.length <= 0:
                return (index, 0.0)
            progress = (distance - cumulative) / segment.length
            return (index, max(progress, 0.0))
        cumulative += segment.length

    return (len(segments) - 1, 1.0)


def position_at_distance(segments: Sequence[TrackSegment], distance: float) -> Vec3:
    """Get world position at an arc-length distance from the start."""
    index, progress = locate_distance(segments, distance)
    return segments[index].get_position_at(progress)


def place_checkpoints(
    segments: Sequence[TrackSegment],
    length: float,
    count: int = DEFAULT_CHECKPOINT_COUNT,
) -> List[Checkpoint]:
    """Place regular checkpoints plus the finish line.

    Regular checkpoints sit at every ``length / count`` boundary starting
    at 0; the finish checkpoint is the end of the last segment.

    Args:
        segments: Ordered segment chain
        length: Total requested track length
        count: Number of regular checkpoints

    Returns:
        Checkpoints ordered by distance

    Raises:
        ValueError: If count is less than 1
    """
    if count < 1:
        raise ValueError(f"checkpoint count must be at least 1, got {count}")
    if not segments:
        return []

    checkpoints: List[Checkpoint] = []
    interval = length / count
    boundary_index = 0
    segment_start = 0.0

    for index, segment in enumerate(segments):
        segment_end = segment_start + segment.length
        is_last = index == len(segments) - 1
        while boundary_index < count:
            boundary = interval * boundary_index
            if boundary >= segment_end and not is_last:
                break
            progress = (boundary - segment_start) / segment.length if segment.length > 0 else 0.0
            checkpoints.append(Checkpoint(
                id=len(checkpoints),
                position=segment.get_position_at(progress),
                segment_index=index,
                distance=boundary,
            ))
            boundary_index += 1
        segment_start = segment_end

    last = segments[-1]
    checkpoints.append(Checkpoint(
        id=len(checkpoints),
        position=last.end_pos,
        segment_index=len(segments) - 1,
        distance=length,
        is_finish=True,
    ))
    return checkpoints


def place_track_features(
    segments: Sequence[TrackSegment],
    length: float,
    rand: RandomStream,
) -> List[Feature]:
    """Scatter track-wide features (pit entrance, grandstands).

    Args:
        segments: Ordered segment chain
        length: Total requested track length
        rand: Random stream

    Returns:
        Features anchored in world coordinates
    """
    if not segments:
        return []

    features: List[Feature] = []

    if rand.chance(PIT_ENTRANCE_THRESHOLD):
        distance = length * PIT_ENTRANCE_FRACTION
        features.append(Feature(
            FeatureType.PIT_ENTRANCE,
            position_at_distance(segments, distance),
            FeatureAnchor.TRACK,
            {"length": PIT_ENTRANCE_LENGTH, "distance": distance},
        ))

    for _ in range(GRANDSTAND_ROLLS):
        if rand.chance(GRANDSTAND_THRESHOLD):
            distance = length * rand.next()
            capacity = int(rand.next() * 1000) + 500
            features.append(Feature(
                FeatureType.GRANDSTAND,
                position_at_distance(segments, distance),
                FeatureAnchor.TRACK,
                {"capacity": capacity, "distance": distance},
            ))

    return features
