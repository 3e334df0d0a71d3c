#!/usr/bin/env python3
"""
Track Generation Example

This example demonstrates how to:
1. Generate tracks from a seed and difficulty
2. Reproduce a track from its seed
3. Compare easy and hard tracks
4. Follow the other branch at split segments
5. Save a track and load it back

Run with: python generate_tracks.py
"""

import tempfile

import numpy as np

from trackgen.export import ExporterConfig, TrackExporter
from trackgen.track import (
    GeneratorConfig,
    SegmentKind,
    SplitPolicy,
    Track,
    TrackGenerator,
    analyze,
    generate,
)


def generate_default_track() -> Track:
    """Generate a track with default settings."""
    print("=" * 60)
    print("1. Default Track Generation")
    print("=" * 60)

    generator = TrackGenerator(GeneratorConfig(seed=2024))
    track = generator.generate_track()

    print(f"\nSeed: {track.metadata.seed}")
    print(f"Length: {track.length:.0f}")
    print(f"Segments: {track.num_segments}")
    print(f"Checkpoints: {len(track.checkpoints)}")
    print(f"Continuous: {track.is_continuous()}")

    return track


def generate_seeded_tracks():
    """Generate reproducible tracks using seeds."""
    print("\n" + "=" * 60)
    print("2. Seeded Track Generation (Reproducible)")
    print("=" * 60)

    track1 = TrackGenerator().generate_track_with_seed(12345, 0.5)
    track2 = TrackGenerator().generate_track_with_seed(12345, 0.5)
    track3 = TrackGenerator().generate_track_with_seed(99999, 0.5)

    print(f"\nSame seed, same track: {track1 == track2}")
    print(f"Different seed, same track: {track1 == track3}")


def compare_difficulty():
    """Compare segment mixes at the ends of the difficulty range."""
    print("\n" + "=" * 60)
    print("3. Easy vs Hard")
    print("=" * 60)

    for difficulty in (0.0, 1.0):
        track, _ = generate(GeneratorConfig(seed=7, difficulty=difficulty), 5000.0, 100)
        stats = analyze(track)
        technical = sum(
            stats.segment_counts[kind.value]
            for kind in (SegmentKind.HAIRPIN, SegmentKind.CHICANE, SegmentKind.JUMP)
        )
        print(f"\nDifficulty {difficulty:.1f}")
        print(f"  Straights: {stats.straight_segments}")
        print(f"  Hairpins, chicanes and jumps: {technical}")
        print(f"  Elevation range: {stats.lowest_point:.1f} .. {stats.highest_point:.1f}")


def follow_right_branch():
    """Continue along the right branch at every split."""
    print("\n" + "=" * 60)
    print("4. Split Branches")
    print("=" * 60)

    for policy in SplitPolicy:
        config = GeneratorConfig(seed=21, difficulty=1.0, split_policy=policy)
        track, _ = generate(config, 20000.0, 400)
        splits = [s for s in track.segments if s.kind is SegmentKind.SPLIT]
        end = track.segments[-1].end_pos
        print(f"\n{policy.value:<10} splits={len(splits)} ends at ({end.x:.1f}, {end.z:.1f})")


def inspect_track_segments(track: Track):
    """Inspect individual track segments."""
    print("\n" + "=" * 60)
    print("5. Track Segment Inspection")
    print("=" * 60)

    corners = [s for s in track.segments if np.isfinite(s.radius)]
    total_turn = sum(abs(s.heading_change) for s in track.segments)

    print(f"\nCorners (any kind): {len(corners)}")
    print(f"Total heading change: {np.degrees(total_turn):.0f} deg")
    if corners:
        tightest = min(corners, key=lambda s: s.radius)
        print(f"Tightest radius: {tightest.radius:.1f} ({tightest.kind.value})")

    feature_count = sum(len(s.features) for s in track.segments) + len(track.features)
    print(f"Features: {feature_count}")


def save_and_load(track: Track):
    """Save a track to JSON and load it back."""
    print("\n" + "=" * 60)
    print("6. Save and Load")
    print("=" * 60)

    with tempfile.TemporaryDirectory() as tmp:
        exporter = TrackExporter(ExporterConfig(output_dir=tmp))
        path = exporter.export_json(track)
        loaded = exporter.load_json(path)
        print(f"\nSaved to {path.name}, identical after load: {loaded == track}")


def main():
    default_track = generate_default_track()
    generate_seeded_tracks()
    compare_difficulty()
    follow_right_branch()
    inspect_track_segments(default_track)
    save_and_load(default_track)

    print("\n" + "=" * 60)
    print("Track generation examples complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
