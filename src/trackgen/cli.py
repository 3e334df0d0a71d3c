"""
trackgen command line

Generate a track from a seed and print its summary, optionally saving
the full record, the editor point list and a segment table.

Usage:
    trackgen --seed 42                          # Print summary
    trackgen --seed 42 --difficulty 0.8 --stats # Include statistics
    trackgen --seed 7 --output track.json       # Save full record
    trackgen --seed 7 --editor custom.json      # Save editor points
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from trackgen.export.exporter import ExporterConfig, TrackExporter
from trackgen.track.generator import (
    DEFAULT_LENGTH,
    DEFAULT_SEGMENT_COUNT,
    GeneratorConfig,
    SplitPolicy,
    generate,
)
from trackgen.track.stats import analyze
from trackgen.track.track import Track

logger = logging.getLogger(__name__)


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="trackgen",
        description="Deterministic procedural race track generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Same seed, same track
    trackgen --seed 42 --difficulty 0.5

    # Long technical track saved as JSON
    trackgen --seed 9 --difficulty 1 --length 4000 --segments 60 --output hard.json

    # Continue along the right branch at every split
    trackgen --seed 3 --split-branch right
        """
    )

    gen_group = parser.add_argument_group("Generation")
    gen_group.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)"
    )
    gen_group.add_argument(
        "--difficulty",
        type=float,
        default=0.5,
        help="Difficulty from 0 to 1, clamped (default: 0.5)"
    )
    gen_group.add_argument(
        "--length",
        type=float,
        default=DEFAULT_LENGTH,
        help=f"Total track length (default: {DEFAULT_LENGTH:.0f})"
    )
    gen_group.add_argument(
        "--segments",
        type=int,
        default=DEFAULT_SEGMENT_COUNT,
        help=f"Number of segments (default: {DEFAULT_SEGMENT_COUNT})"
    )
    gen_group.add_argument(
        "--split-branch",
        choices=[p.value for p in SplitPolicy],
        default=SplitPolicy.LEFT.value,
        help="Branch followed after split segments (default: left)"
    )

    out_group = parser.add_argument_group("Output")
    out_group.add_argument(
        "--output",
        type=Path,
        help="Write the full track record as JSON"
    )
    out_group.add_argument(
        "--editor",
        type=Path,
        help="Write the editor point list as JSON"
    )
    out_group.add_argument(
        "--csv",
        type=Path,
        help="Write a per-segment CSV table"
    )
    out_group.add_argument(
        "--stats",
        action="store_true",
        help="Print track statistics"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def print_summary(track: Track, show_stats: bool) -> None:
    meta = track.metadata
    print("=" * 60)
    print(f"Track seed {meta.seed} (difficulty {meta.difficulty:.2f})")
    print("=" * 60)
    print(f"Length:      {meta.length:.0f}")
    print(f"Segments:    {meta.segment_count}")
    print(f"Checkpoints: {meta.checkpoint_count}")
    print(f"Features:    {meta.feature_count}")

    if track.segments:
        print("\nLayout:")
        for segment in track.segments:
            end = segment.end_pos
            print(
                f"  {segment.index:3d}  {segment.kind.value:<14} "
                f"-> ({end.x:8.2f}, {end.y:7.2f}, {end.z:8.2f})"
            )

    if show_stats:
        stats = analyze(track)
        print("\nStatistics:")
        print(f"  Average corner radius: {stats.average_corner_radius:.2f}")
        print(f"  Hill elevation range:  {stats.min_elevation:.2f} .. {stats.max_elevation:.2f}")
        print(f"  Path elevation range:  {stats.lowest_point:.2f} .. {stats.highest_point:.2f}")
        for kind, count in stats.segment_counts.items():
            if count:
                print(f"  {kind:<14} {count}")


def _exporter_for(path: Path) -> TrackExporter:
    return TrackExporter(ExporterConfig(output_dir=str(path.parent)))


def main(argv: List[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = GeneratorConfig(
            seed=args.seed,
            difficulty=args.difficulty,
            split_policy=SplitPolicy(args.split_branch),
        )
        track, _ = generate(config, args.length, args.segments)
    except ValueError as e:
        logger.error(str(e))
        return 2

    print_summary(track, args.stats)

    if args.output:
        _exporter_for(args.output).export_json(track, args.output.name)
    if args.editor:
        _exporter_for(args.editor).export_editor(track, args.editor.name)
    if args.csv:
        _exporter_for(args.csv).export_csv(track, args.csv.name)

    return 0


if __name__ == "__main__":
    sys.exit(main())
