"""
Track module - Procedural track generation and track data structures.

This module contains:
- Track: Frozen track record with segments, checkpoints and features
- TrackGenerator / generate: Deterministic track generation
- TrackSegment: Individual segment with start/end pose and kind details
- Feature: Decorative and functional markers
- Checkpoint: Arc-length progress markers
"""

from trackgen.track.track import Track, TrackMetadata
from trackgen.track.generator import GeneratorConfig, SplitPolicy, TrackGenerator, generate
from trackgen.track.segment import SegmentKind, TrackSegment
from trackgen.track.features import Feature, FeatureAnchor, FeatureType
from trackgen.track.placement import Checkpoint
from trackgen.track.random_stream import RandomStream
from trackgen.track.stats import TrackStats, analyze

__all__ = [
    "Track",
    "TrackMetadata",
    "GeneratorConfig",
    "SplitPolicy",
    "TrackGenerator",
    "generate",
    "SegmentKind",
    "TrackSegment",
    "Feature",
    "FeatureAnchor",
    "FeatureType",
    "Checkpoint",
    "RandomStream",
    "TrackStats",
    "analyze",
]
