"""
Track generator - Deterministic procedural track generation.

Generates:
- A chain of segments picked by difficulty-weighted selection
- Checkpoints sampled along the chain
- Track-wide features and statistics

The same seed, difficulty, length and segment count always produce
the same track.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Tuple
import logging
import time

import numpy as np

from trackgen.track.builders import build_segment, choose_split_branch
from trackgen.track.geometry import FORWARD, ORIGIN
from trackgen.track.placement import (
    DEFAULT_CHECKPOINT_COUNT,
    place_checkpoints,
    place_track_features,
)
from trackgen.track.random_stream import RandomStream
from trackgen.track.segment import SegmentKind, SplitBranch, TrackSegment
from trackgen.track.selector import choose_segment_kind
from trackgen.track.stats import TrackStats, analyze
from trackgen.track.track import Track

logger = logging.getLogger(__name__)

DEFAULT_LENGTH = 1000.0
DEFAULT_SEGMENT_COUNT = 20


class SplitPolicy(Enum):
    """Which branch of a split segment the track continues along."""
    LEFT = "left"
    RIGHT = "right"
    ALTERNATE = "alternate"           # Left, right, left, ... per split

    def branch_for(self, split_number: int) -> SplitBranch:
        if self is SplitPolicy.RIGHT:
            return SplitBranch.RIGHT
        if self is SplitPolicy.ALTERNATE and split_number % 2 == 1:
            return SplitBranch.RIGHT
        return SplitBranch.LEFT


@dataclass(frozen=True)
class GeneratorConfig:
    """Configuration for procedural track generation."""
    seed: int = 0
    difficulty: float = 0.5           # 0.0 = easy, 1.0 = hard (clamped)

    # Split segments
    split_policy: SplitPolicy = SplitPolicy.LEFT

    # Regular checkpoints, not counting the finish line
    checkpoint_count: int = DEFAULT_CHECKPOINT_COUNT

    def __post_init__(self):
        if np.isnan(self.difficulty):
            raise ValueError("difficulty must be a number")
        if self.checkpoint_count < 1:
            raise ValueError("checkpoint_count must be at least 1")
        object.__setattr__(self, "seed", int(self.seed))
        object.__setattr__(self, "difficulty", float(np.clip(self.difficulty, 0.0, 1.0)))
        object.__setattr__(self, "split_policy", SplitPolicy(self.split_policy))

    def with_seed(self, seed: int) -> "GeneratorConfig":
        return replace(self, seed=seed)

    def with_difficulty(self, difficulty: float) -> "GeneratorConfig":
        return replace(self, difficulty=difficulty)


def _build_segments(
    config: GeneratorConfig,
    rand: RandomStream,
    segment_length: float,
    segment_count: int,
) -> List[TrackSegment]:
    segments: List[TrackSegment] = []
    position = ORIGIN
    direction = FORWARD
    splits = 0

    for index in range(segment_count):
        kind = choose_segment_kind(index, config.difficulty, rand)
        segment = build_segment(kind, rand, position, direction, segment_length)

        if kind is SegmentKind.SPLIT:
            segment = choose_split_branch(segment, config.split_policy.branch_for(splits))
            splits += 1

        segment = replace(segment, index=index)
        segments.append(segment)
        logger.debug(
            f"Segment {index}: {kind.value} ends at "
            f"({segment.end_pos.x:.2f}, {segment.end_pos.y:.2f}, {segment.end_pos.z:.2f})"
        )

        position = segment.end_pos
        direction = segment.end_direction

    return segments


def generate(
    config: GeneratorConfig,
    length: float = DEFAULT_LENGTH,
    segment_count: int = DEFAULT_SEGMENT_COUNT,
    stream_state: int | None = None,
) -> Tuple[Track, int]:
    """Generate a track.

    Args:
        config: Seed, difficulty and generation options
        length: Total track length
        segment_count: Number of segments; each gets ``length / segment_count``
        stream_state: Random stream state to continue from. Starts from
            ``config.seed`` if None.

    Returns:
        Tuple of (track, stream state after generation)
    """
    if not np.isfinite(length):
        raise ValueError(f"length must be finite, got {length}")

    rand = RandomStream(config.seed if stream_state is None else stream_state)

    if segment_count <= 0 or length <= 0:
        logger.warning(
            f"Degenerate track request (length={length}, segments={segment_count}); "
            "returning an empty track"
        )
        track = Track.build([], [], [], length, config.seed, config.difficulty)
        return track, rand.state

    segments = _build_segments(config, rand, length / segment_count, segment_count)
    checkpoints = place_checkpoints(segments, length, config.checkpoint_count)
    features = place_track_features(segments, length, rand)

    track = Track.build(segments, checkpoints, features, length, config.seed, config.difficulty)
    logger.info(
        f"Generated track: seed={config.seed} difficulty={config.difficulty:.2f} "
        f"length={length:.0f} segments={len(segments)} checkpoints={len(checkpoints)} "
        f"features={len(features)}"
    )
    return track, rand.state


class TrackGenerator:
    """Procedural race track generator.

    Holds a seed, a difficulty and the random stream position between
    calls. Use one instance per caller: sharing an instance interleaves
    stream consumption and breaks reproducibility.

    Usage:
        generator = TrackGenerator()
        track = generator.generate_track_with_seed(42, difficulty=0.7)
        stats = generator.get_track_stats()
    """

    def __init__(self, config: GeneratorConfig | None = None):
        """Initialize generator with optional configuration.

        Args:
            config: Generator configuration. Seeds from the clock if None.
        """
        if config is None:
            config = GeneratorConfig(seed=int(time.time() * 1000))
            logger.debug(f"No seed given, using {config.seed}")
        self.config = config
        self._stream_state: int = config.seed
        self._track: Track | None = None

    @property
    def seed(self) -> int:
        return self.config.seed

    @property
    def difficulty(self) -> float:
        return self.config.difficulty

    @property
    def stream_state(self) -> int:
        """Current random stream position."""
        return self._stream_state

    def set_seed(self, seed: int) -> None:
        """Set the seed and restart the random stream."""
        self.config = self.config.with_seed(seed)
        self._stream_state = self.config.seed

    def set_difficulty(self, difficulty: float) -> None:
        """Set difficulty, clamped to [0, 1]."""
        self.config = self.config.with_difficulty(difficulty)

    def generate_track(
        self,
        length: float = DEFAULT_LENGTH,
        segment_count: int = DEFAULT_SEGMENT_COUNT,
    ) -> Track:
        """Generate a track, continuing the current random stream.

        Args:
            length: Total track length
            segment_count: Number of segments

        Returns:
            Generated track
        """
        track, self._stream_state = generate(
            self.config, length, segment_count, self._stream_state
        )
        self._track = track
        return track

    def generate_track_with_seed(self, seed: int, difficulty: float = 0.5) -> Track:
        """Reseed, set difficulty and generate a default-sized track."""
        self.set_seed(seed)
        self.set_difficulty(difficulty)
        return self.generate_track()

    def export_track_data(self) -> Track:
        """Get the last generated track."""
        if self._track is None:
            raise RuntimeError("No track generated. Call generate_track() first.")
        return self._track

    def get_track_stats(self) -> TrackStats:
        """Get statistics of the last generated track."""
        return analyze(self.export_track_data())
