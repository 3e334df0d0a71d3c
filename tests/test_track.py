"""Basic tests for the trackgen track data structures."""

import pytest
import numpy as np

from trackgen.track.features import Feature, FeatureAnchor, FeatureType
from trackgen.track.generator import GeneratorConfig, generate
from trackgen.track.geometry import FORWARD, ORIGIN, Vec3, interpolate, rotate_heading
from trackgen.track.placement import (
    Checkpoint,
    locate_distance,
    place_checkpoints,
    place_track_features,
    position_at_distance,
)
from trackgen.track.random_stream import RandomStream
from trackgen.track.segment import (
    CornerDetails,
    HillDetails,
    HillShape,
    SegmentKind,
    TrackSegment,
)
from trackgen.track.stats import analyze
from trackgen.track.track import Track


def _straight(start_z: float, length: float, index: int = 0) -> TrackSegment:
    return TrackSegment(
        kind=SegmentKind.STRAIGHT,
        start_pos=Vec3(0.0, 0.0, start_z),
        end_pos=Vec3(0.0, 0.0, start_z + length),
        length=length,
        index=index,
    )


class TestGeometry:
    """Test vector helpers."""

    def test_rotate_left(self):
        """Test positive rotation turns left (towards +x when facing +z)."""
        rotated = rotate_heading(FORWARD, np.pi / 2)
        assert np.allclose(rotated.as_array(), [1.0, 0.0, 0.0])

    def test_rotate_preserves_length(self):
        """Test rotation keeps unit vectors unit length."""
        rotated = rotate_heading(Vec3(0.6, 0.0, 0.8), 1.234)
        assert np.linalg.norm(rotated.as_array()) == pytest.approx(1.0)

    def test_advance_keeps_elevation(self):
        """Test advancing along a direction does not change height."""
        pos = Vec3(1.0, 5.0, 2.0).advance(FORWARD, 10.0)
        assert pos == Vec3(1.0, 5.0, 12.0)

    def test_interpolate(self):
        """Test linear interpolation."""
        mid = interpolate(ORIGIN, Vec3(2.0, 4.0, 6.0), 0.5)
        assert mid == Vec3(1.0, 2.0, 3.0)


class TestTrackSegment:
    """Test track segment."""

    def test_straight_segment(self):
        """Test straight segment properties."""
        segment = _straight(0.0, 100.0)

        assert segment.radius == float('inf')
        assert segment.heading_change == 0.0
        assert segment.elevation_change == 0.0

    def test_corner_requires_details(self):
        """Test kinds with geometry reject missing details."""
        with pytest.raises(ValueError):
            TrackSegment(kind=SegmentKind.CORNER, length=10.0)

    def test_straight_rejects_details(self):
        """Test straights carry no details."""
        with pytest.raises(ValueError):
            TrackSegment(
                kind=SegmentKind.STRAIGHT,
                details=HillDetails(height=3.0, shape=HillShape.CREST),
            )

    def test_corner_radius(self):
        """Test radius comes from the corner details."""
        segment = TrackSegment(
            kind=SegmentKind.CORNER,
            length=30.0,
            details=CornerDetails(radius=20.0, angle=np.pi / 2, turn_direction=1, center=Vec3(20.0, 0.0, 0.0)),
        )
        assert segment.radius == 20.0
        assert segment.details.turn == "left"
        assert segment.details.arc_length == pytest.approx(10 * np.pi)

    def test_position_at_progress(self):
        """Test position interpolation along segment."""
        segment = _straight(0.0, 100.0)

        pos = segment.get_position_at(0.25)
        assert pos.z == pytest.approx(25.0)

        # Clamped beyond the ends
        assert segment.get_position_at(2.0) == segment.end_pos
        assert segment.get_position_at(-1.0) == segment.start_pos


class TestFeatures:
    """Test feature records."""

    def test_feature_params(self):
        """Test a feature exposes its params."""
        feature = Feature(FeatureType.BILLBOARD, Vec3(0.0, 2.0, 0.5), params={"content": "RaceTech Tires"})

        assert feature["content"] == "RaceTech Tires"
        assert feature.anchor == FeatureAnchor.SEGMENT

    def test_feature_schema_enforced(self):
        """Test wrong params are rejected."""
        with pytest.raises(ValueError):
            Feature(FeatureType.BILLBOARD, params={})
        with pytest.raises(ValueError):
            Feature(FeatureType.RECOVERY_POINT, params={"extra": 1})

    def test_feature_state_round_trip(self):
        """Test features rebuild from their state."""
        feature = Feature(
            FeatureType.SPLIT_SIGN,
            Vec3(0.0, 2.0, 0.0),
            FeatureAnchor.SEGMENT,
            {"options": ("left", "right")},
        )
        state = feature.get_state()

        assert state["params"]["options"] == ["left", "right"]
        assert Feature.from_state(state) == feature

    def test_params_read_only(self):
        """Test params cannot be changed after construction."""
        source = {"content": "RaceTech Tires"}
        feature = Feature(FeatureType.BILLBOARD, params=source)

        with pytest.raises(TypeError):
            feature.params["content"] = "Velocity Motors"
        with pytest.raises(TypeError):
            feature.params["injected"] = 1

        # Later changes to the source dict do not leak in
        source["content"] = "Velocity Motors"
        assert feature["content"] == "RaceTech Tires"

    def test_feature_hashable(self):
        """Test equal features hash equally."""
        a = Feature(FeatureType.TIRE_MARKS, params={"length": 15.0})
        b = Feature(FeatureType.TIRE_MARKS, params={"length": 15.0})

        assert a == b
        assert hash(a) == hash(b)


class TestCheckpoints:
    """Test checkpoint placement."""

    def test_regular_and_finish(self):
        """Test eight regular checkpoints plus the finish line."""
        segments = [_straight(0.0, 50.0, 0), _straight(50.0, 50.0, 1)]
        checkpoints = place_checkpoints(segments, 100.0)

        assert len(checkpoints) == 9
        assert [c.distance for c in checkpoints[:-1]] == [12.5 * k for k in range(8)]
        assert [c.id for c in checkpoints] == list(range(9))

        finish = checkpoints[-1]
        assert finish.is_finish
        assert finish.distance == 100.0
        assert finish.position == segments[-1].end_pos
        assert sum(c.is_finish for c in checkpoints) == 1

    def test_positions_interpolated(self):
        """Test checkpoint positions follow the segment chain."""
        segments = [_straight(0.0, 50.0, 0), _straight(50.0, 50.0, 1)]
        checkpoints = place_checkpoints(segments, 100.0)

        for checkpoint in checkpoints:
            assert checkpoint.position.z == pytest.approx(checkpoint.distance)

        # Boundary exactly on a segment end belongs to the next segment
        at_fifty = [c for c in checkpoints if c.distance == 50.0][0]
        assert at_fifty.segment_index == 1

    def test_single_segment(self):
        """Test all checkpoints fall in a single segment."""
        checkpoints = place_checkpoints([_straight(0.0, 100.0)], 100.0)

        assert len(checkpoints) == 9
        assert all(c.segment_index == 0 for c in checkpoints)

    def test_no_segments(self):
        """Test no checkpoints without segments."""
        assert place_checkpoints([], 100.0) == []

    def test_invalid_count(self):
        """Test a checkpoint count below one is rejected."""
        segments = [_straight(0.0, 100.0)]
        with pytest.raises(ValueError):
            place_checkpoints(segments, 100.0, 0)
        with pytest.raises(ValueError):
            place_checkpoints(segments, 100.0, -3)

    def test_zero_length_first_segment(self):
        """Test the start checkpoint moves past an empty leading segment."""
        segments = [_straight(0.0, 0.0, 0), _straight(0.0, 100.0, 1)]
        checkpoints = place_checkpoints(segments, 100.0)

        assert checkpoints[0].distance == 0.0
        assert checkpoints[0].segment_index == 1
        assert len(checkpoints) == 9

    def test_checkpoint_state_round_trip(self):
        """Test checkpoints rebuild from their state."""
        checkpoint = Checkpoint(id=3, position=Vec3(1.0, 2.0, 3.0), segment_index=1, distance=37.5)
        assert Checkpoint.from_state(checkpoint.get_state()) == checkpoint


class TestDistanceLookup:
    """Test arc-length lookup."""

    def test_locate_distance(self):
        """Test distance resolves to segment and progress."""
        segments = [_straight(0.0, 40.0, 0), _straight(40.0, 60.0, 1)]

        assert locate_distance(segments, 20.0) == (0, 0.5)
        index, progress = locate_distance(segments, 70.0)
        assert index == 1
        assert progress == pytest.approx(0.5)

    def test_beyond_end(self):
        """Test distances past the end resolve to the last segment end."""
        segments = [_straight(0.0, 40.0)]

        assert locate_distance(segments, 500.0) == (0, 1.0)
        assert position_at_distance(segments, 500.0) == segments[0].end_pos

    def test_empty_chain(self):
        """Test lookup on an empty chain is an error."""
        with pytest.raises(ValueError):
            locate_distance([], 10.0)


class TestTrackFeaturePlacement:
    """Test track-wide feature placement."""

    def test_features_on_track(self):
        """Test global features sit on the path at their distances."""
        segments = [_straight(0.0, 50.0, 0), _straight(50.0, 50.0, 1)]

        for seed in range(20):
            features = place_track_features(segments, 100.0, RandomStream(seed))
            for feature in features:
                assert feature.anchor == FeatureAnchor.TRACK
                assert feature.position.z == pytest.approx(feature["distance"])
                if feature.feature_type == FeatureType.PIT_ENTRANCE:
                    assert feature["distance"] == pytest.approx(70.0)
                else:
                    assert feature.feature_type == FeatureType.GRANDSTAND
                    assert 500 <= feature["capacity"] < 1500

    def test_at_most_one_pit_and_three_grandstands(self):
        """Test feature counts stay within their limits."""
        segments = [_straight(0.0, 100.0)]

        for seed in range(50):
            features = place_track_features(segments, 100.0, RandomStream(seed))
            types = [f.feature_type for f in features]
            assert types.count(FeatureType.PIT_ENTRANCE) <= 1
            assert types.count(FeatureType.GRANDSTAND) <= 3


class TestTrack:
    """Test track record."""

    def test_empty_track(self):
        """Test an empty track."""
        track = Track.build([], [], [], 0.0, 1, 0.5)

        assert track.is_empty
        assert track.num_segments == 0
        assert track.finish_checkpoint is None
        assert track.get_position_at_distance(10.0) == Vec3()
        assert track.is_continuous()

    def test_build_counts(self):
        """Test metadata counts follow the contents."""
        segments = [_straight(0.0, 50.0, 0), _straight(50.0, 50.0, 1)]
        checkpoints = place_checkpoints(segments, 100.0)
        track = Track.build(segments, checkpoints, [], 100.0, 7, 0.25)

        assert track.metadata.segment_count == 2
        assert track.metadata.checkpoint_count == len(checkpoints)
        assert track.metadata.feature_count == 0
        assert track.length == 100.0
        assert track.is_continuous()

    def test_discontinuity_detected(self):
        """Test a gap between segments is reported."""
        segments = [_straight(0.0, 50.0, 0), _straight(60.0, 50.0, 1)]
        track = Track.build(segments, [], [], 100.0, 7, 0.25)

        assert not track.is_continuous()

    def test_track_is_frozen(self):
        """Test tracks cannot be modified."""
        track = Track.build([], [], [], 0.0, 1, 0.5)
        with pytest.raises(AttributeError):
            track.segments = ()

    def test_generated_track_is_immutable(self):
        """Test a generated track can be hashed and its features not edited."""
        track, _ = generate(GeneratorConfig(seed=31, difficulty=0.8), 1500.0, 30)
        same, _ = generate(GeneratorConfig(seed=31, difficulty=0.8), 1500.0, 30)
        state = track.get_state()

        assert hash(track) == hash(same)

        featured = [s for s in track.segments if s.features]
        assert featured
        with pytest.raises(TypeError):
            featured[0].features[0].params["injected"] = 1
        assert track.get_state() == state

    def test_stats_read_only(self):
        """Test segment counts of the stats cannot be changed."""
        track, _ = generate(GeneratorConfig(seed=31, difficulty=0.8), 1500.0, 30)
        stats = analyze(track)

        with pytest.raises(TypeError):
            stats.segment_counts["straight"] = 99
        assert hash(stats) == hash(analyze(track))
        assert sum(stats.get_state()["segment_counts"].values()) == 30
