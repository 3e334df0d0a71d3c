"""
trackgen - Deterministic procedural race track generation.

This package provides:
- Seeded, reproducible generation of segment chains (14 segment kinds)
- Difficulty-weighted segment selection
- Checkpoints sampled by arc length for lap tracking
- Segment and track-wide features
- Track statistics and JSON export
"""

__version__ = "0.1.0"

from trackgen.track.generator import GeneratorConfig, TrackGenerator, generate
from trackgen.track.track import Track

__all__ = ["GeneratorConfig", "TrackGenerator", "Track", "generate", "__version__"]
