"""
Track segment - Individual track section with geometry and features.

Defines:
- The closed set of segment kinds
- Kind-specific geometry records
- Start/end poses used for chaining segments into a track
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Type, Union
import numpy as np

from trackgen.track.features import Feature
from trackgen.track.geometry import Vec3, interpolate


class SegmentKind(Enum):
    """Types of track segments."""
    STRAIGHT = "straight"
    CORNER = "corner"
    HILL = "hill"
    CHICANE = "chicane"
    JUMP = "jump"
    BANKED_CORNER = "banked_corner"
    TUNNEL = "tunnel"
    HAIRPIN = "hairpin"
    DOWNHILL = "downhill"
    UPHILL = "uphill"
    SPEED_BUMP = "speed_bump"
    OFFROAD = "offroad"
    BRIDGE = "bridge"
    SPLIT = "split"


class HillShape(Enum):
    """Vertical profile of a hill segment."""
    CREST = "crest"
    VALLEY = "valley"


class SplitBranch(Enum):
    """Branch of a split segment."""
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class CornerDetails:
    """Circular arc geometry for corners, banked corners and hairpins."""
    radius: float
    angle: float                      # Radians, always positive
    turn_direction: int               # +1 = left, -1 = right
    center: Vec3
    bank_angle: float = 0.0           # Radians, banked corners only

    @property
    def turn(self) -> str:
        return "left" if self.turn_direction > 0 else "right"

    @property
    def arc_length(self) -> float:
        """Length of the driven arc."""
        return self.radius * self.angle

    def get_state(self) -> dict:
        return {
            "radius": self.radius,
            "angle": self.angle,
            "turn_direction": self.turn_direction,
            "center": self.center.get_state(),
            "bank_angle": self.bank_angle,
        }

    @classmethod
    def from_state(cls, state: dict) -> "CornerDetails":
        return cls(
            radius=state["radius"],
            angle=state["angle"],
            turn_direction=int(state["turn_direction"]),
            center=Vec3.from_state(state["center"]),
            bank_angle=state.get("bank_angle", 0.0),
        )


@dataclass(frozen=True)
class HillDetails:
    """Crest or valley displacement."""
    height: float
    shape: HillShape

    def get_state(self) -> dict:
        return {"height": self.height, "shape": self.shape.value}

    @classmethod
    def from_state(cls, state: dict) -> "HillDetails":
        return cls(height=state["height"], shape=HillShape(state["shape"]))


@dataclass(frozen=True)
class SlopeDetails:
    """Constant slope for uphill and downhill segments."""
    slope_angle: float                # Radians, negative = downhill
    height_change: float              # Signed elevation change

    def get_state(self) -> dict:
        return {"slope_angle": self.slope_angle, "height_change": self.height_change}

    @classmethod
    def from_state(cls, state: dict) -> "SlopeDetails":
        return cls(slope_angle=state["slope_angle"], height_change=state["height_change"])


@dataclass(frozen=True)
class ChicaneDetails:
    """Polyline through the chicane, starting at the segment start."""
    points: Tuple[Vec3, ...]

    @property
    def turn_count(self) -> int:
        return len(self.points) - 1

    def get_state(self) -> dict:
        return {"points": [p.get_state() for p in self.points]}

    @classmethod
    def from_state(cls, state: dict) -> "ChicaneDetails":
        return cls(points=tuple(Vec3.from_state(p) for p in state["points"]))


@dataclass(frozen=True)
class JumpDetails:
    """Parabolic jump with its apex control point."""
    jump_height: float
    control_point: Vec3

    def get_state(self) -> dict:
        return {
            "jump_height": self.jump_height,
            "control_point": self.control_point.get_state(),
        }

    @classmethod
    def from_state(cls, state: dict) -> "JumpDetails":
        return cls(
            jump_height=state["jump_height"],
            control_point=Vec3.from_state(state["control_point"]),
        )


@dataclass(frozen=True)
class TunnelDetails:
    height: float
    width: float

    def get_state(self) -> dict:
        return {"height": self.height, "width": self.width}

    @classmethod
    def from_state(cls, state: dict) -> "TunnelDetails":
        return cls(height=state["height"], width=state["width"])


@dataclass(frozen=True)
class BridgeDetails:
    deck_height: float                # Height of the deck above the ground
    width: float

    def get_state(self) -> dict:
        return {"deck_height": self.deck_height, "width": self.width}

    @classmethod
    def from_state(cls, state: dict) -> "BridgeDetails":
        return cls(deck_height=state["deck_height"], width=state["width"])


@dataclass(frozen=True)
class OffroadDetails:
    roughness: float
    mud_level: float

    def get_state(self) -> dict:
        return {"roughness": self.roughness, "mud_level": self.mud_level}

    @classmethod
    def from_state(cls, state: dict) -> "OffroadDetails":
        return cls(roughness=state["roughness"], mud_level=state["mud_level"])


@dataclass(frozen=True)
class SpeedBumpDetails:
    bump_height: float
    bump_width: float

    def get_state(self) -> dict:
        return {"bump_height": self.bump_height, "bump_width": self.bump_width}

    @classmethod
    def from_state(cls, state: dict) -> "SpeedBumpDetails":
        return cls(bump_height=state["bump_height"], bump_width=state["bump_width"])


@dataclass(frozen=True)
class BranchPose:
    """End pose of one branch of a split."""
    end_pos: Vec3
    direction: Vec3

    def get_state(self) -> dict:
        return {"end_pos": self.end_pos.get_state(), "direction": self.direction.get_state()}

    @classmethod
    def from_state(cls, state: dict) -> "BranchPose":
        return cls(
            end_pos=Vec3.from_state(state["end_pos"]),
            direction=Vec3.from_state(state["direction"]),
        )


@dataclass(frozen=True)
class SplitDetails:
    """Fork into two branches; only the chosen one continues the track."""
    split_point: Vec3
    split_angle: float
    left: BranchPose
    right: BranchPose
    chosen: SplitBranch = SplitBranch.LEFT

    def branch(self, which: SplitBranch) -> BranchPose:
        return self.left if which is SplitBranch.LEFT else self.right

    def get_state(self) -> dict:
        return {
            "split_point": self.split_point.get_state(),
            "split_angle": self.split_angle,
            "left": self.left.get_state(),
            "right": self.right.get_state(),
            "chosen": self.chosen.value,
        }

    @classmethod
    def from_state(cls, state: dict) -> "SplitDetails":
        return cls(
            split_point=Vec3.from_state(state["split_point"]),
            split_angle=state["split_angle"],
            left=BranchPose.from_state(state["left"]),
            right=BranchPose.from_state(state["right"]),
            chosen=SplitBranch(state.get("chosen", "left")),
        )


SegmentDetails = Union[
    CornerDetails,
    HillDetails,
    SlopeDetails,
    ChicaneDetails,
    JumpDetails,
    TunnelDetails,
    BridgeDetails,
    OffroadDetails,
    SpeedBumpDetails,
    SplitDetails,
]

# Details record expected for each kind (None = no extra geometry)
DETAILS_BY_KIND: Dict[SegmentKind, Optional[Type]] = {
    SegmentKind.STRAIGHT: None,
    SegmentKind.CORNER: CornerDetails,
    SegmentKind.HILL: HillDetails,
    SegmentKind.CHICANE: ChicaneDetails,
    SegmentKind.JUMP: JumpDetails,
    SegmentKind.BANKED_CORNER: CornerDetails,
    SegmentKind.TUNNEL: TunnelDetails,
    SegmentKind.HAIRPIN: CornerDetails,
    SegmentKind.DOWNHILL: SlopeDetails,
    SegmentKind.UPHILL: SlopeDetails,
    SegmentKind.SPEED_BUMP: SpeedBumpDetails,
    SegmentKind.OFFROAD: OffroadDetails,
    SegmentKind.BRIDGE: BridgeDetails,
    SegmentKind.SPLIT: SplitDetails,
}


@dataclass(frozen=True)
class TrackSegment:
    """A single segment of the race track.

    Segments are the building blocks of a track, each defining:
    - Start and end pose (position + forward direction)
    - Nominal length and width
    - Kind-specific geometry in ``details``
    - Local features
    """
    kind: SegmentKind = SegmentKind.STRAIGHT
    start_pos: Vec3 = Vec3()
    end_pos: Vec3 = Vec3()
    start_direction: Vec3 = Vec3(0.0, 0.0, 1.0)
    end_direction: Vec3 = Vec3(0.0, 0.0, 1.0)
    length: float = 0.0               # Requested nominal length
    width: float = 8.0
    details: Optional[SegmentDetails] = None
    features: Tuple[Feature, ...] = field(default_factory=tuple)
    index: int = 0

    def __post_init__(self):
        expected = DETAILS_BY_KIND[self.kind]
        if expected is None and self.details is not None:
            raise ValueError(f"{self.kind.value} segments carry no details")
        if expected is not None and not isinstance(self.details, expected):
            raise ValueError(
                f"{self.kind.value} segments require {expected.__name__}"
            )

    @property
    def elevation_change(self) -> float:
        """Elevation change across segment (positive = uphill)."""
        return self.end_pos.y - self.start_pos.y

    @property
    def heading_change(self) -> float:
        """Signed change of heading in radians (positive = left)."""
        start = np.arctan2(self.start_direction.x, self.start_direction.z)
        end = np.arctan2(self.end_direction.x, self.end_direction.z)
        delta = end - start
        while delta > np.pi:
            delta -= 2 * np.pi
        while delta < -np.pi:
            delta += 2 * np.pi
        return float(delta)

    @property
    def radius(self) -> float:
        """Turn radius (infinity for segments without an arc)."""
        if isinstance(self.details, CornerDetails):
            return self.details.radius
        return float('inf')

    def get_position_at(self, progress: float) -> Vec3:
        """Get position at a fraction along the segment.

        Positions are interpolated linearly between the end points,
        which is how checkpoints and track features are placed.

        Args:
            progress: Fraction of the segment length (clamped to 0-1)

        Returns:
            World position
        """
        progress = float(np.clip(progress, 0.0, 1.0))
        return interpolate(self.start_pos, self.end_pos, progress)

    def get_state(self) -> dict:
        """Get segment state for serialization.

        Returns:
            Dictionary containing segment data
        """
        return {
            "index": self.index,
            "type": self.kind.value,
            "start_pos": self.start_pos.get_state(),
            "end_pos": self.end_pos.get_state(),
            "start_direction": self.start_direction.get_state(),
            "end_direction": self.end_direction.get_state(),
            "length": self.length,
            "width": self.width,
            "details": self.details.get_state() if self.details is not None else None,
            "features": [f.get_state() for f in self.features],
        }

    @classmethod
    def from_state(cls, state: dict) -> "TrackSegment":
        kind = SegmentKind(state["type"])
        details_type = DETAILS_BY_KIND[kind]
        details = None
        if details_type is not None:
            details = details_type.from_state(state["details"])
        return cls(
            kind=kind,
            start_pos=Vec3.from_state(state["start_pos"]),
            end_pos=Vec3.from_state(state["end_pos"]),
            start_direction=Vec3.from_state(state["start_direction"]),
            end_direction=Vec3.from_state(state["end_direction"]),
            length=state["length"],
            width=state["width"],
            details=details,
            features=tuple(Feature.from_state(f) for f in state.get("features", [])),
            index=state.get("index", 0),
        )
