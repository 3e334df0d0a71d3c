"""Tests for track generation."""

import pytest
import numpy as np

from trackgen.track.generator import (
    DEFAULT_SEGMENT_COUNT,
    GeneratorConfig,
    SplitPolicy,
    TrackGenerator,
    generate,
)
from trackgen.track.segment import SegmentKind, SplitBranch
from trackgen.track.stats import analyze


@pytest.fixture
def generator():
    return TrackGenerator(GeneratorConfig(seed=42, difficulty=0.5))


class TestGeneratorConfig:
    """Test generator configuration."""

    def test_defaults(self):
        """Test default configuration."""
        config = GeneratorConfig()

        assert config.seed == 0
        assert config.difficulty == 0.5
        assert config.split_policy == SplitPolicy.LEFT
        assert config.checkpoint_count == 8

    def test_difficulty_clamped(self):
        """Test difficulty is clamped to [0, 1]."""
        assert GeneratorConfig(difficulty=-5).difficulty == 0.0
        assert GeneratorConfig(difficulty=5).difficulty == 1.0

    def test_invalid_values(self):
        """Test invalid configuration is rejected."""
        with pytest.raises(ValueError):
            GeneratorConfig(difficulty=float("nan"))
        with pytest.raises(ValueError):
            GeneratorConfig(checkpoint_count=0)

    def test_split_policy_from_string(self):
        """Test split policy accepts its value."""
        assert GeneratorConfig(split_policy="right").split_policy == SplitPolicy.RIGHT

    def test_with_helpers(self):
        """Test copies with a changed field."""
        config = GeneratorConfig(seed=1, difficulty=0.2)

        assert config.with_seed(9).seed == 9
        assert config.with_seed(9).difficulty == 0.2
        assert config.with_difficulty(3).difficulty == 1.0


class TestGenerate:
    """Test the pure generation function."""

    def test_segment_count(self):
        """Test the requested number of segments is produced."""
        for count in (1, 5, 20, 50):
            track, _ = generate(GeneratorConfig(seed=3), 1000.0, count)

            assert track.num_segments == count
            assert [s.index for s in track.segments] == list(range(count))
            assert all(s.length == pytest.approx(1000.0 / count) for s in track.segments)

    def test_starts_at_origin(self):
        """Test the first segment starts at the origin facing +z."""
        track, _ = generate(GeneratorConfig(seed=8), 500.0, 10)

        assert track.segments[0].start_pos.as_tuple() == (0.0, 0.0, 0.0)
        assert track.segments[0].start_direction.as_tuple() == (0.0, 0.0, 1.0)

    @pytest.mark.parametrize("seed", range(10))
    @pytest.mark.parametrize("difficulty", [0.0, 0.5, 1.0])
    def test_continuity(self, seed, difficulty):
        """Test each segment starts where the previous one ends."""
        track, _ = generate(GeneratorConfig(seed=seed, difficulty=difficulty), 2000.0, 40)

        assert track.is_continuous()
        for prev, segment in zip(track.segments, track.segments[1:]):
            assert np.allclose(prev.end_pos.as_array(), segment.start_pos.as_array(), atol=1e-9)
            assert np.allclose(prev.end_direction.as_array(), segment.start_direction.as_array(), atol=1e-9)

    @pytest.mark.parametrize("seed", range(10))
    def test_checkpoints(self, seed):
        """Test checkpoints are ordered and end with the finish line."""
        track, _ = generate(GeneratorConfig(seed=seed, difficulty=0.7), 1000.0, 20)
        distances = [c.distance for c in track.checkpoints]

        assert all(b > a for a, b in zip(distances, distances[1:]))
        assert len(track.checkpoints) == 9
        assert [c.is_finish for c in track.checkpoints] == [False] * 8 + [True]
        assert track.finish_checkpoint.distance == 1000.0
        assert track.finish_checkpoint.position == track.segments[-1].end_pos
        assert [c.id for c in track.checkpoints] == list(range(9))

    def test_checkpoint_count_option(self):
        """Test the number of regular checkpoints is configurable."""
        track, _ = generate(GeneratorConfig(seed=1, checkpoint_count=4), 400.0, 10)

        assert [c.distance for c in track.checkpoints] == [0.0, 100.0, 200.0, 300.0, 400.0]

    def test_metadata(self):
        """Test metadata mirrors the request."""
        track, _ = generate(GeneratorConfig(seed=17, difficulty=0.3), 800.0, 16)

        assert track.metadata.seed == 17
        assert track.metadata.difficulty == 0.3
        assert track.metadata.length == 800.0
        assert track.metadata.segment_count == 16
        assert track.metadata.checkpoint_count == len(track.checkpoints)
        assert track.metadata.feature_count == len(track.features)

    def test_returns_stream_state(self):
        """Test continuing from the returned state matches a fresh stream."""
        config = GeneratorConfig(seed=5)
        first, state = generate(config, 1000.0, 10)
        second, _ = generate(config, 1000.0, 10, stream_state=state)
        again, _ = generate(config, 1000.0, 10)

        assert state != config.seed
        assert again == first
        assert second != first

    def test_degenerate_request(self):
        """Test zero length or zero segments give an empty track."""
        for length, count in ((0.0, 0), (100.0, 0), (0.0, 10), (-5.0, 10), (100.0, -1)):
            track, state = generate(GeneratorConfig(seed=2), length, count)

            assert track.is_empty
            assert track.checkpoints == ()
            assert track.features == ()
            assert state == 2

    def test_infinite_length_rejected(self):
        """Test non-finite length is an error."""
        with pytest.raises(ValueError):
            generate(GeneratorConfig(), float("inf"), 10)
        with pytest.raises(ValueError):
            generate(GeneratorConfig(), float("nan"), 10)


class TestSplitPolicy:
    """Test which branch split segments continue along."""

    def test_branch_for(self):
        """Test policy to branch mapping."""
        assert SplitPolicy.LEFT.branch_for(0) == SplitBranch.LEFT
        assert SplitPolicy.LEFT.branch_for(1) == SplitBranch.LEFT
        assert SplitPolicy.RIGHT.branch_for(0) == SplitBranch.RIGHT
        assert [SplitPolicy.ALTERNATE.branch_for(i) for i in range(4)] == [
            SplitBranch.LEFT, SplitBranch.RIGHT, SplitBranch.LEFT, SplitBranch.RIGHT,
        ]

    @pytest.mark.parametrize("policy", list(SplitPolicy))
    def test_policy_applied(self, policy):
        """Test split segments end on the branch the policy picks."""
        track, _ = generate(
            GeneratorConfig(seed=21, difficulty=1.0, split_policy=policy), 20000.0, 400
        )
        splits = [s for s in track.segments if s.kind is SegmentKind.SPLIT]

        assert splits
        assert track.is_continuous()
        for number, segment in enumerate(splits):
            chosen = policy.branch_for(number)
            assert segment.details.chosen == chosen
            assert segment.end_pos == segment.details.branch(chosen).end_pos

    def test_policy_keeps_kinds(self):
        """Test the policy does not change which kinds are drawn."""
        left, _ = generate(GeneratorConfig(seed=21, difficulty=1.0), 20000.0, 400)
        right, _ = generate(
            GeneratorConfig(seed=21, difficulty=1.0, split_policy=SplitPolicy.RIGHT), 20000.0, 400
        )

        assert [s.kind for s in left.segments] == [s.kind for s in right.segments]


class TestTrackGenerator:
    """Test the stateful generator."""

    def test_determinism(self):
        """Test same seed and difficulty give identical tracks."""
        a = TrackGenerator()
        b = TrackGenerator()
        a.generate_track_with_seed(12345, 0.5)
        b.generate_track_with_seed(12345, 0.5)

        track_a = a.generate_track(1000.0, 20)
        track_b = b.generate_track(1000.0, 20)

        assert track_a == track_b
        assert track_a.get_state() == track_b.get_state()
        assert a.get_track_stats() == b.get_track_stats()

    def test_different_seeds_differ(self):
        """Test different seeds give different tracks."""
        a = TrackGenerator().generate_track_with_seed(1, 0.5)
        b = TrackGenerator().generate_track_with_seed(2, 0.5)

        assert a != b

    def test_generate_with_seed_defaults(self, generator):
        """Test seeded generation uses the default size."""
        track = generator.generate_track_with_seed(7)

        assert generator.seed == 7
        assert generator.difficulty == 0.5
        assert track.num_segments == DEFAULT_SEGMENT_COUNT
        assert track.length == 1000.0

    def test_stream_continues(self, generator):
        """Test consecutive calls continue the stream."""
        first = generator.generate_track(1000.0, 10)
        second = generator.generate_track(1000.0, 10)

        expected, _ = generate(generator.config, 1000.0, 10)
        assert first == expected
        assert second != first

    def test_set_seed_restarts(self, generator):
        """Test reseeding restarts the stream."""
        first = generator.generate_track(500.0, 5)
        generator.set_seed(42)
        assert generator.stream_state == 42
        assert generator.generate_track(500.0, 5) == first

    def test_difficulty_clamping(self):
        """Test out-of-range difficulty matches the clamped value."""
        low = TrackGenerator()
        zero = TrackGenerator()
        low.generate_track_with_seed(9, -5)
        zero.generate_track_with_seed(9, 0)
        assert low.difficulty == 0.0
        assert low.export_track_data() == zero.export_track_data()

        high = TrackGenerator()
        one = TrackGenerator()
        high.generate_track_with_seed(9, 5)
        one.generate_track_with_seed(9, 1)
        assert high.difficulty == 1.0
        assert high.export_track_data() == one.export_track_data()

    def test_minimal_track(self):
        """Test a single-segment track."""
        generator = TrackGenerator()
        generator.generate_track_with_seed(1, 0)
        track = generator.generate_track(100.0, 1)

        assert track.num_segments == 1
        assert len(track.checkpoints) >= 2
        assert track.finish_checkpoint.distance == 100.0
        assert track.finish_checkpoint.is_finish

    def test_degenerate_track(self, generator):
        """Test empty request does not fail or advance the stream."""
        state = generator.stream_state
        track = generator.generate_track(0, 0)

        assert track.is_empty
        assert track.checkpoints == ()
        assert generator.stream_state == state
        assert generator.export_track_data() is track

    def test_no_track_yet(self, generator):
        """Test export and stats need a generated track."""
        with pytest.raises(RuntimeError):
            generator.export_track_data()
        with pytest.raises(RuntimeError):
            generator.get_track_stats()

    def test_clock_seed(self):
        """Test a generator without config picks its own seed."""
        generator = TrackGenerator()
        track = generator.generate_track(300.0, 3)

        assert track.metadata.seed == generator.seed
        assert track.num_segments == 3


class TestTrackStats:
    """Test statistics over generated tracks."""

    def test_counts_bounded(self):
        """Test named counters never exceed the segment count."""
        generator = TrackGenerator()
        generator.generate_track_with_seed(4, 1.0)
        generator.generate_track(3000.0, 50)
        stats = generator.get_track_stats()

        named = (
            stats.straight_segments + stats.corner_segments
            + stats.hill_segments + stats.chicane_segments
        )
        assert named <= 50
        assert sum(stats.segment_counts.values()) == 50
        assert stats.total_length == 3000.0

    def test_stats_match_segments(self):
        """Test stats agree with the segment list."""
        track, _ = generate(GeneratorConfig(seed=13, difficulty=0.6), 2000.0, 40)
        stats = analyze(track)

        corners = [s for s in track.segments if s.kind is SegmentKind.CORNER]
        hills = [s for s in track.segments if s.kind is SegmentKind.HILL]

        assert stats.corner_segments == len(corners)
        assert stats.hill_segments == len(hills)
        if corners:
            assert stats.average_corner_radius == pytest.approx(np.mean([s.radius for s in corners]))
        else:
            assert stats.average_corner_radius == 0.0
        assert stats.max_elevation >= 0.0
        assert stats.min_elevation <= 0.0
        assert stats.highest_point == max([0.0] + [s.end_pos.y for s in track.segments])
        assert stats.lowest_point == min([0.0] + [s.end_pos.y for s in track.segments])

    def test_empty_track_stats(self):
        """Test stats of an empty track."""
        track, _ = generate(GeneratorConfig(), 0.0, 0)
        stats = analyze(track)

        assert stats.corner_segments == 0
        assert stats.average_corner_radius == 0.0
        assert stats.highest_point == 0.0
        assert stats.lowest_point == 0.0
