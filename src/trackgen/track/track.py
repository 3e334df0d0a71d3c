"""
Track - Complete generated track record.

Contains:
- Ordered segment chain
- Checkpoints ordered by distance
- Track-wide features
- Generation metadata
"""

from dataclasses import dataclass, field
from typing import Tuple
import numpy as np

from trackgen.track.features import Feature
from trackgen.track.geometry import Vec3
from trackgen.track.placement import Checkpoint, locate_distance, position_at_distance
from trackgen.track.segment import TrackSegment


@dataclass(frozen=True)
class TrackMetadata:
    """Generation parameters and record counts."""
    length: float = 0.0
    seed: int = 0
    difficulty: float = 0.0
    segment_count: int = 0
    checkpoint_count: int = 0
    feature_count: int = 0

    def get_state(self) -> dict:
        return {
            "length": self.length,
            "seed": self.seed,
            "difficulty": self.difficulty,
            "segment_count": self.segment_count,
            "checkpoint_count": self.checkpoint_count,
            "feature_count": self.feature_count,
        }

    @classmethod
    def from_state(cls, state: dict) -> "TrackMetadata":
        return cls(**{key: state[key] for key in cls.__dataclass_fields__})


@dataclass(frozen=True)
class Track:
    """Generated race track.

    A track is built once by the generator and never modified; generating
    again produces a new Track.

    Usage:
        track = generate(GeneratorConfig(seed=42))[0]
        pos = track.get_position_at_distance(500.0)
    """
    segments: Tuple[TrackSegment, ...] = field(default_factory=tuple)
    checkpoints: Tuple[Checkpoint, ...] = field(default_factory=tuple)
    features: Tuple[Feature, ...] = field(default_factory=tuple)
    metadata: TrackMetadata = field(default_factory=TrackMetadata)

    @classmethod
    def build(
        cls,
        segments,
        checkpoints,
        features,
        length: float,
        seed: int,
        difficulty: float,
    ) -> "Track":
        """Assemble a track and derive its metadata counts."""
        segments = tuple(segments)
        checkpoints = tuple(checkpoints)
        features = tuple(features)
        metadata = TrackMetadata(
            length=length,
            seed=seed,
            difficulty=difficulty,
            segment_count=len(segments),
            checkpoint_count=len(checkpoints),
            feature_count=len(features),
        )
        return cls(segments, checkpoints, features, metadata)

    @property
    def length(self) -> float:
        """Requested track length."""
        return self.metadata.length

    @property
    def num_segments(self) -> int:
        return len(self.segments)

    @property
    def is_empty(self) -> bool:
        return not self.segments

    @property
    def start_position(self) -> Vec3:
        if not self.segments:
            return Vec3()
        return self.segments[0].start_pos

    @property
    def finish_checkpoint(self) -> Checkpoint | None:
        if not self.checkpoints:
            return None
        return self.checkpoints[-1]

    def is_continuous(self, tolerance: float = 1e-9) -> bool:
        """Check that every segment starts where the previous one ends.

        Args:
            tolerance: Allowed per-component difference

        Returns:
            True if all adjacent poses match
        """
        for prev, segment in zip(self.segments, self.segments[1:]):
            if not np.allclose(prev.end_pos.as_array(), segment.start_pos.as_array(), rtol=0.0, atol=tolerance):
                return False
            if not np.allclose(prev.end_direction.as_array(), segment.start_direction.as_array(), rtol=0.0, atol=tolerance):
                return False
        return True

    def get_segment_at_distance(self, distance: float) -> Tuple[int, float]:
        """Get segment index and progress (0-1) for a track distance."""
        return locate_distance(self.segments, distance)

    def get_position_at_distance(self, distance: float) -> Vec3:
        """Get world position at given distance from start.

        Args:
            distance: Distance from start line

        Returns:
            World position (origin for an empty track)
        """
        if not self.segments:
            return Vec3()
        return position_at_distance(self.segments, distance)

    def get_state(self) -> dict:
        """Get complete track state for serialization.

        Returns:
            JSON-compatible dictionary containing all track data
        """
        return {
            "seed": self.metadata.seed,
            "difficulty": self.metadata.difficulty,
            "segments": [s.get_state() for s in self.segments],
            "checkpoints": [c.get_state() for c in self.checkpoints],
            "features": [f.get_state() for f in self.features],
            "metadata": self.metadata.get_state(),
        }

    @classmethod
    def from_state(cls, state: dict) -> "Track":
        """Rebuild a track from ``get_state`` output."""
        return cls(
            segments=tuple(TrackSegment.from_state(s) for s in state["segments"]),
            checkpoints=tuple(Checkpoint.from_state(c) for c in state["checkpoints"]),
            features=tuple(Feature.from_state(f) for f in state["features"]),
            metadata=TrackMetadata.from_state(state["metadata"]),
        )
