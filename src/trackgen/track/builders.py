"""
Segment builders - Geometry and local features for every segment kind.

Each builder takes the random stream, a start pose and a nominal length,
and returns a complete TrackSegment. Random values are always drawn in
the same order, so identical inputs and stream position give identical
segments.
"""

from dataclasses import replace
from typing import Callable, Dict, List, Tuple
import numpy as np

from trackgen.track.features import Feature, FeatureAnchor, FeatureType
from trackgen.track.geometry import Vec3, rotate_heading
from trackgen.track.random_stream import RandomStream
from trackgen.track.segment import (
    BranchPose,
    BridgeDetails,
    ChicaneDetails,
    CornerDetails,
    HillDetails,
    HillShape,
    JumpDetails,
    OffroadDetails,
    SegmentKind,
    SlopeDetails,
    SpeedBumpDetails,
    SplitBranch,
    SplitDetails,
    TrackSegment,
    TunnelDetails,
)


DEFAULT_WIDTH = 8.0
HAIRPIN_WIDTH = 6.0
OFFROAD_WIDTH = 10.0

BANK_ANGLE = np.pi / 6
CHICANE_DEFLECTION = np.pi / 6
JUMP_FRACTION = 0.8                   # Share of the segment spent airborne
SPLIT_FRACTION = 0.6                  # Where along the segment the fork is
TUNNEL_LIGHT_SPACING = 5.0

SPONSORS = (
    "SpeedRacer Pro",
    "TurboBoost Energy",
    "RaceTech Tires",
    "Velocity Motors",
    "Adrenaline Racing",
    "Thunder Racing League",
)

SegmentBuilder = Callable[[RandomStream, Vec3, Vec3, float], TrackSegment]


def _feature(feature_type: FeatureType, x: float, y: float, z: float, **params) -> Feature:
    return Feature(feature_type, Vec3(x, y, z), FeatureAnchor.SEGMENT, params)


def _fractions(step: float) -> List[float]:
    """Evenly spaced fractions in [0, 1) starting at 0."""
    count = int(np.ceil(1.0 / step - 1e-9))
    return [i * step for i in range(count)]


def _turn_direction(rand: RandomStream) -> int:
    return 1 if rand.next() > 0.5 else -1


def _arc(
    start_pos: Vec3,
    start_direction: Vec3,
    radius: float,
    angle: float,
    turn_direction: int,
) -> Tuple[Vec3, Vec3, Vec3]:
    """Follow a circular arc from a start pose.

    Args:
        start_pos: Arc start position
        start_direction: Tangent at the start
        radius: Arc radius
        angle: Swept angle in radians
        turn_direction: +1 for left, -1 for right

    Returns:
        Tuple of (center, end_pos, end_direction)
    """
    normal = rotate_heading(start_direction, turn_direction * np.pi / 2)
    center = start_pos.advance(normal, radius)
    swept = turn_direction * angle
    end_pos = center + rotate_heading(start_pos - center, swept)
    end_direction = rotate_heading(start_direction, swept)
    return center, end_pos, end_direction


# ----------------------------------------------------------------------
# Straight-line kinds


def build_straight(rand, start_pos, start_direction, length) -> TrackSegment:
    width = DEFAULT_WIDTH + (rand.next() - 0.5) * 2
    return TrackSegment(
        kind=SegmentKind.STRAIGHT,
        start_pos=start_pos,
        end_pos=start_pos.advance(start_direction, length),
        start_direction=start_direction,
        end_direction=start_direction,
        length=length,
        width=width,
        features=_straight_features(rand, length),
    )


def _straight_features(rand: RandomStream, length: float) -> Tuple[Feature, ...]:
    features = []
    if rand.chance(0.7):
        sponsor = SPONSORS[int(rand.next() * len(SPONSORS))]
        features.append(_feature(FeatureType.BILLBOARD, 0.0, 2.0, 0.5, content=sponsor))
    if rand.chance(0.8):
        features.append(_feature(FeatureType.TIRE_MARKS, 0.0, 0.0, 0.5, length=length * 0.3))
    return tuple(features)


def build_tunnel(rand, start_pos, start_direction, length) -> TrackSegment:
    height = 8 + rand.next() * 4
    width = 10 + rand.next() * 4

    features = [
        _feature(FeatureType.TUNNEL_LIGHT, 0.0, height * 0.8, float(offset / length), intensity=0.8)
        for offset in np.arange(0.0, length, TUNNEL_LIGHT_SPACING)
    ]
    features.append(_feature(FeatureType.TUNNEL_ENTRANCE, 0.0, height / 2, 0.0, effect="fade_in"))
    features.append(_feature(FeatureType.TUNNEL_EXIT, 0.0, height / 2, 1.0, effect="fade_out"))

    return TrackSegment(
        kind=SegmentKind.TUNNEL,
        start_pos=start_pos,
        end_pos=start_pos.advance(start_direction, length),
        start_direction=start_direction,
        end_direction=start_direction,
        length=length,
        width=width,
        details=TunnelDetails(height=height, width=width),
        features=tuple(features),
    )


def build_bridge(rand, start_pos, start_direction, length) -> TrackSegment:
    """Level deck raised above the surrounding ground."""
    deck_height = 3 + rand.next() * 4
    width = 6 + rand.next() * 2

    features = [
        _feature(FeatureType.BRIDGE_SIGN, 0.0, 2.0, 0.0, height=deck_height),
        _feature(FeatureType.BRIDGE_RAILING, width / 2, 1.0, 0.5, length=length * 0.8),
        _feature(FeatureType.BRIDGE_RAILING, -width / 2, 1.0, 0.5, length=length * 0.8),
    ]
    features.extend(
        _feature(FeatureType.BRIDGE_SUPPORT, 0.0, -deck_height / 2, z, height=deck_height)
        for z in _fractions(0.2)
    )
    if deck_height > 5:
        features.append(_feature(FeatureType.WIND_WARNING, 0.0, 2.0, 0.3, intensity="moderate"))

    return TrackSegment(
        kind=SegmentKind.BRIDGE,
        start_pos=start_pos,
        end_pos=start_pos.advance(start_direction, length),
        start_direction=start_direction,
        end_direction=start_direction,
        length=length,
        width=width,
        details=BridgeDetails(deck_height=deck_height, width=width),
        features=tuple(features),
    )


def build_offroad(rand, start_pos, start_direction, length) -> TrackSegment:
    roughness = 0.3 + rand.next() * 0.4
    mud_level = rand.next() * 0.8

    features = [
        _feature(
            FeatureType.SURFACE_SIGN, 0.0, 2.0, 0.0,
            condition="mud" if mud_level > 0.5 else "rough",
        ),
    ]
    for z in _fractions(0.1):
        if rand.chance(0.7):
            lateral = (rand.next() - 0.5) * 6
            features.append(_feature(FeatureType.TRACTION_MARKER, lateral, 0.0, z))
    if mud_level > 0.3:
        features.append(
            _feature(FeatureType.MUD_POOL, 0.0, -0.05, 0.6, depth=mud_level * 0.2, size=3.0)
        )
    features.append(_feature(FeatureType.RECOVERY_POINT, 0.0, 0.0, 0.9))

    return TrackSegment(
        kind=SegmentKind.OFFROAD,
        start_pos=start_pos,
        end_pos=start_pos.advance(start_direction, length),
        start_direction=start_direction,
        end_direction=start_direction,
        length=length,
        width=OFFROAD_WIDTH,
        details=OffroadDetails(roughness=roughness, mud_level=mud_level),
        features=tuple(features),
    )


def build_speed_bump(rand, start_pos, start_direction, length) -> TrackSegment:
    bump_height = 0.5 + rand.next() * 0.5
    bump_width = 2 + rand.next() * 2

    features = (
        _feature(FeatureType.SPEED_BUMP_SIGN, 0.0, 2.0, 0.0, height=bump_height),
        _feature(FeatureType.REFLECTIVE_MARKER, bump_width / 2, 0.0, 0.5, color="white"),
        _feature(FeatureType.REFLECTIVE_MARKER, -bump_width / 2, 0.0, 0.5, color="white"),
        _feature(FeatureType.SPEED_ZONE, 0.0, 0.0, 0.3, max_speed=30.0, zone_length=bump_width * 2),
    )

    return TrackSegment(
        kind=SegmentKind.SPEED_BUMP,
        start_pos=start_pos,
        end_pos=start_pos.advance(start_direction, length),
        start_direction=start_direction,
        end_direction=start_direction,
        length=length,
        width=DEFAULT_WIDTH,
        details=SpeedBumpDetails(bump_height=bump_height, bump_width=bump_width),
        features=features,
    )


# ----------------------------------------------------------------------
# Corners


def build_corner(rand, start_pos, start_direction, length) -> TrackSegment:
    radius = 15 + rand.next() * 20
    angle = np.pi / 4 + rand.next() * np.pi / 4
    turn_direction = _turn_direction(rand)
    center, end_pos, end_direction = _arc(start_pos, start_direction, radius, angle, turn_direction)

    features = []
    if rand.chance(0.6):
        count = int(rand.next() * 10) + 5
        features.append(_feature(FeatureType.SPECTATORS, 0.0, 0.0, 0.5, count=count))

    return TrackSegment(
        kind=SegmentKind.CORNER,
        start_pos=start_pos,
        end_pos=end_pos,
        start_direction=start_direction,
        end_direction=end_direction,
        length=length,
        width=DEFAULT_WIDTH,
        details=CornerDetails(radius, float(angle), turn_direction, center),
        features=tuple(features),
    )


def build_banked_corner(rand, start_pos, start_direction, length) -> TrackSegment:
    radius = 15 + rand.next() * 20
    angle = np.pi / 3 + rand.next() * np.pi / 6
    turn_direction = _turn_direction(rand)
    center, end_pos, end_direction = _arc(start_pos, start_direction, radius, angle, turn_direction)

    features = [_feature(FeatureType.BANKING_SIGN, 0.0, 2.0, 0.0, bank_angle=float(BANK_ANGLE))]
    if radius < 20:
        features.append(_feature(FeatureType.APEX_MARKER, 0.0, 0.0, 0.5, optimal_line="inside"))

    return TrackSegment(
        kind=SegmentKind.BANKED_CORNER,
        start_pos=start_pos,
        end_pos=end_pos,
        start_direction=start_direction,
        end_direction=end_direction,
        length=length,
        width=DEFAULT_WIDTH,
        details=CornerDetails(radius, float(angle), turn_direction, center, float(BANK_ANGLE)),
        features=tuple(features),
    )


def build_hairpin(rand, start_pos, start_direction, length) -> TrackSegment:
    """Tight 180 degree turn."""
    radius = 8 + rand.next() * 4
    angle = np.pi
    turn_direction = _turn_direction(rand)
    center, end_pos, end_direction = _arc(start_pos, start_direction, radius, angle, turn_direction)

    # Run-off sits on the outside of the turn
    features = (
        _feature(FeatureType.HAIRPIN_SIGN, 0.0, 2.0, 0.0, warning="Tight Turn Ahead"),
        _feature(FeatureType.RUNOFF_AREA, -turn_direction * radius * 1.5, 0.0, 0.5, size="large"),
        _feature(FeatureType.BRAKING_ZONE, 0.0, 0.0, 0.2, intensity="heavy"),
    )

    return TrackSegment(
        kind=SegmentKind.HAIRPIN,
        start_pos=start_pos,
        end_pos=end_pos,
        start_direction=start_direction,
        end_direction=end_direction,
        length=length,
        width=HAIRPIN_WIDTH,
        details=CornerDetails(radius, float(angle), turn_direction, center),
        features=features,
    )


def build_chicane(rand, start_pos, start_direction, length) -> TrackSegment:
    """Quick alternating direction changes.

    Headings step +30, 0, -30, 0, ... degrees relative to the entry, so
    the chicane exits parallel to where it started.
    """
    pairs = 2 + int(rand.next() * 3)
    steps = pairs * 2
    spacing = length / steps

    points = [start_pos]
    position = start_pos
    direction = start_direction
    for i in range(steps):
        deflection = CHICANE_DEFLECTION if i % 2 == 0 else -CHICANE_DEFLECTION
        if i % 4 >= 2:
            deflection = -deflection
        direction = rotate_heading(direction, deflection)
        position = position.advance(direction, spacing)
        points.append(position)

    features = []
    for point in points[1:]:
        if rand.chance(0.8):
            features.append(Feature(
                FeatureType.WARNING_SIGN,
                point.with_y(point.y + 1.0),
                FeatureAnchor.TRACK,
                {"sign_type": "chicane"},
            ))

    return TrackSegment(
        kind=SegmentKind.CHICANE,
        start_pos=start_pos,
        end_pos=points[-1],
        start_direction=start_direction,
        end_direction=direction,
        length=length,
        width=DEFAULT_WIDTH,
        details=ChicaneDetails(points=tuple(points)),
        features=tuple(features),
    )


# ----------------------------------------------------------------------
# Elevation


def build_hill(rand, start_pos, start_direction, length) -> TrackSegment:
    height = 3 + rand.next() * 5
    shape = HillShape.CREST if rand.next() > 0.5 else HillShape.VALLEY
    rise = height if shape is HillShape.CREST else -height
    end_pos = start_pos.advance(start_direction, length)

    features = []
    if shape is HillShape.CREST and rand.chance(0.7):
        features.append(_feature(FeatureType.JUMP_RAMP, 0.0, height / 2, 0.5, height=height * 0.8))

    return TrackSegment(
        kind=SegmentKind.HILL,
        start_pos=start_pos,
        end_pos=end_pos.with_y(start_pos.y + rise),
        start_direction=start_direction,
        end_direction=start_direction,
        length=length,
        width=DEFAULT_WIDTH,
        details=HillDetails(height=height, shape=shape),
        features=tuple(features),
    )


def build_downhill(rand, start_pos, start_direction, length) -> TrackSegment:
    slope = -0.15 - rand.next() * 0.1
    height_change = -length * float(np.sin(abs(slope)))
    end_pos = start_pos.advance(start_direction, length)

    recommended_speed = max(50.0, 100 - abs(slope) * 500)
    features = [_feature(FeatureType.SLOPE_SIGN, 0.0, 2.0, 0.0, angle=slope, direction="downhill")]
    features.extend(
        _feature(FeatureType.SPEED_MARKER, 0.0, 0.0, z, recommended_speed=recommended_speed)
        for z in _fractions(0.2)
    )
    if rand.chance(0.7):
        features.append(_feature(FeatureType.DRAINAGE, 0.0, -0.1, 0.5, width=2.0))

    return TrackSegment(
        kind=SegmentKind.DOWNHILL,
        start_pos=start_pos,
        end_pos=end_pos.with_y(start_pos.y + height_change),
        start_direction=start_direction,
        end_direction=start_direction,
        length=length,
        width=DEFAULT_WIDTH,
        details=SlopeDetails(slope_angle=slope, height_change=height_change),
        features=tuple(features),
    )


def build_uphill(rand, start_pos, start_direction, length) -> TrackSegment:
    slope = 0.15 + rand.next() * 0.1
    height_change = length * float(np.sin(slope))
    end_pos = start_pos.advance(start_direction, length)

    gear = min(3, max(1, int(np.floor(3 - slope * 10))))
    features = [_feature(FeatureType.SLOPE_SIGN, 0.0, 2.0, 0.0, angle=slope, direction="uphill")]
    features.extend(
        _feature(FeatureType.GEAR_MARKER, 0.0, 0.0, z, recommended_gear=gear)
        for z in _fractions(0.15)
    )
    if slope > 0.2:
        features.append(_feature(FeatureType.SWITCHBACK_MARKER, 0.0, 0.0, 0.8))

    return TrackSegment(
        kind=SegmentKind.UPHILL,
        start_pos=start_pos,
        end_pos=end_pos.with_y(start_pos.y + height_change),
        start_direction=start_direction,
        end_direction=start_direction,
        length=length,
        width=DEFAULT_WIDTH,
        details=SlopeDetails(slope_angle=slope, height_change=height_change),
        features=tuple(features),
    )


def build_jump(rand, start_pos, start_direction, length) -> TrackSegment:
    """Parabolic rise and fall, landing back at the take-off height."""
    jump_height = 3 + rand.next() * 4
    apex = start_pos.advance(start_direction, length * JUMP_FRACTION / 2)

    features = [
        _feature(
            FeatureType.LANDING_ZONE, 0.0, 0.0, 0.9,
            size="large" if jump_height > 5 else "small",
        ),
    ]
    if jump_height > 4 and rand.chance(0.6):
        features.append(_feature(FeatureType.SPEED_BOOST, 0.0, 0.0, 0.8, multiplier=1.2))

    return TrackSegment(
        kind=SegmentKind.JUMP,
        start_pos=start_pos,
        end_pos=start_pos.advance(start_direction, length),
        start_direction=start_direction,
        end_direction=start_direction,
        length=length,
        width=DEFAULT_WIDTH,
        details=JumpDetails(
            jump_height=jump_height,
            control_point=apex.with_y(start_pos.y + jump_height),
        ),
        features=tuple(features),
    )


# ----------------------------------------------------------------------
# Split


def build_split(rand, start_pos, start_direction, length) -> TrackSegment:
    """Fork into a left and a right branch.

    The returned segment continues along the left branch; see
    ``choose_split_branch`` to continue along the other one.
    """
    split_angle = np.pi / 6 + rand.next() * np.pi / 6
    split_distance = length * SPLIT_FRACTION
    branch_length = length - split_distance
    split_point = start_pos.advance(start_direction, split_distance)

    left_direction = rotate_heading(start_direction, split_angle)
    right_direction = rotate_heading(start_direction, -split_angle)
    left = BranchPose(split_point.advance(left_direction, branch_length), left_direction)
    right = BranchPose(split_point.advance(right_direction, branch_length), right_direction)

    left_length = split_point.planar_distance(left.end_pos)
    right_length = split_point.planar_distance(right.end_pos)
    shortcut = ("left", 2.0) if left_length < right_length else ("right", -2.0)

    features = (
        _feature(FeatureType.SPLIT_SIGN, 0.0, 2.0, 0.0, options=("left", "right")),
        _feature(FeatureType.PATH_MARKER, 2.0, 0.0, 0.1, path="left", color="blue"),
        _feature(FeatureType.PATH_MARKER, -2.0, 0.0, 0.1, path="right", color="red"),
        _feature(FeatureType.MERGE_WARNING, 0.0, 2.0, 0.9),
        _feature(FeatureType.SHORTCUT_HINT, shortcut[1], 1.0, 0.05, path=shortcut[0]),
    )

    return TrackSegment(
        kind=SegmentKind.SPLIT,
        start_pos=start_pos,
        end_pos=left.end_pos,
        start_direction=start_direction,
        end_direction=left.direction,
        length=length,
        width=DEFAULT_WIDTH,
        details=SplitDetails(split_point, float(split_angle), left, right),
        features=features,
    )


SEGMENT_BUILDERS: Dict[SegmentKind, SegmentBuilder] = {
    SegmentKind.STRAIGHT: build_straight,
    SegmentKind.CORNER: build_corner,
    SegmentKind.HILL: build_hill,
    SegmentKind.CHICANE: build_chicane,
    SegmentKind.JUMP: build_jump,
    SegmentKind.BANKED_CORNER: build_banked_corner,
    SegmentKind.TUNNEL: build_tunnel,
    SegmentKind.HAIRPIN: build_hairpin,
    SegmentKind.DOWNHILL: build_downhill,
    SegmentKind.UPHILL: build_uphill,
    SegmentKind.SPEED_BUMP: build_speed_bump,
    SegmentKind.OFFROAD: build_offroad,
    SegmentKind.BRIDGE: build_bridge,
    SegmentKind.SPLIT: build_split,
}

_missing = set(SegmentKind) - set(SEGMENT_BUILDERS)
if _missing:
    raise RuntimeError(f"No builder for segment kinds: {sorted(k.value for k in _missing)}")


def build_segment(
    kind: SegmentKind,
    rand: RandomStream,
    start_pos: Vec3,
    start_direction: Vec3,
    length: float,
) -> TrackSegment:
    """Build one segment of the given kind.

    Args:
        kind: Segment kind
        rand: Random stream
        start_pos: Start position
        start_direction: Start direction
        length: Nominal segment length

    Returns:
        Built segment
    """
    return SEGMENT_BUILDERS[kind](rand, start_pos, start_direction, length)


def choose_split_branch(segment: TrackSegment, branch: SplitBranch) -> TrackSegment:
    """Continue a split segment along the given branch.

    Args:
        segment: Segment built by ``build_split``
        branch: Branch whose end pose becomes the segment end

    Returns:
        Copy of the segment ending on the chosen branch
    """
    if not isinstance(segment.details, SplitDetails):
        raise ValueError(f"Cannot choose a branch on a {segment.kind.value} segment")
    pose = segment.details.branch(branch)
    return replace(
        segment,
        end_pos=pose.end_pos,
        end_direction=pose.direction,
        details=replace(segment.details, chosen=branch),
    )
