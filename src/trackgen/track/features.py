"""
Track features - Decorative and functional markers.

Defines:
- Feature types placed by segment builders and the track feature placer
- Anchoring (segment-local or track/world coordinates)
- The parameter schema for every feature type

Segment-anchored positions use the owning segment's local frame:
x is the lateral offset, y the height, z the fraction (0-1) along the
segment. Track-anchored positions are world coordinates.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from trackgen.track.geometry import Vec3


class FeatureAnchor(Enum):
    """Coordinate frame of a feature position."""
    SEGMENT = "segment"
    TRACK = "track"


class FeatureType(Enum):
    """Types of track features."""
    # Straights
    BILLBOARD = "billboard"
    TIRE_MARKS = "tire_marks"
    # Corners
    SPECTATORS = "spectators"
    BANKING_SIGN = "banking_sign"
    APEX_MARKER = "apex_marker"
    HAIRPIN_SIGN = "hairpin_sign"
    RUNOFF_AREA = "runoff_area"
    BRAKING_ZONE = "braking_zone"
    # Elevation
    JUMP_RAMP = "jump_ramp"
    LANDING_ZONE = "landing_zone"
    SPEED_BOOST = "speed_boost"
    SLOPE_SIGN = "slope_sign"
    SPEED_MARKER = "speed_marker"
    DRAINAGE = "drainage"
    GEAR_MARKER = "gear_marker"
    SWITCHBACK_MARKER = "switchback_marker"
    # Chicanes
    WARNING_SIGN = "warning_sign"
    # Tunnels
    TUNNEL_LIGHT = "tunnel_light"
    TUNNEL_ENTRANCE = "tunnel_entrance"
    TUNNEL_EXIT = "tunnel_exit"
    # Speed bumps
    SPEED_BUMP_SIGN = "speed_bump_sign"
    REFLECTIVE_MARKER = "reflective_marker"
    SPEED_ZONE = "speed_zone"
    # Offroad
    SURFACE_SIGN = "surface_sign"
    TRACTION_MARKER = "traction_marker"
    MUD_POOL = "mud_pool"
    RECOVERY_POINT = "recovery_point"
    # Bridges
    BRIDGE_SIGN = "bridge_sign"
    BRIDGE_RAILING = "bridge_railing"
    BRIDGE_SUPPORT = "bridge_support"
    WIND_WARNING = "wind_warning"
    # Splits
    SPLIT_SIGN = "split_sign"
    PATH_MARKER = "path_marker"
    MERGE_WARNING = "merge_warning"
    SHORTCUT_HINT = "shortcut_hint"
    # Track-wide
    PIT_ENTRANCE = "pit_entrance"
    GRANDSTAND = "grandstand"


# Parameter keys carried by each feature type
FEATURE_PARAMS: Dict[FeatureType, Tuple[str, ...]] = {
    FeatureType.BILLBOARD: ("content",),
    FeatureType.TIRE_MARKS: ("length",),
    FeatureType.SPECTATORS: ("count",),
    FeatureType.BANKING_SIGN: ("bank_angle",),
    FeatureType.APEX_MARKER: ("optimal_line",),
    FeatureType.HAIRPIN_SIGN: ("warning",),
    FeatureType.RUNOFF_AREA: ("size",),
    FeatureType.BRAKING_ZONE: ("intensity",),
    FeatureType.JUMP_RAMP: ("height",),
    FeatureType.LANDING_ZONE: ("size",),
    FeatureType.SPEED_BOOST: ("multiplier",),
    FeatureType.SLOPE_SIGN: ("angle", "direction"),
    FeatureType.SPEED_MARKER: ("recommended_speed",),
    FeatureType.DRAINAGE: ("width",),
    FeatureType.GEAR_MARKER: ("recommended_gear",),
    FeatureType.SWITCHBACK_MARKER: (),
    FeatureType.WARNING_SIGN: ("sign_type",),
    FeatureType.TUNNEL_LIGHT: ("intensity",),
    FeatureType.TUNNEL_ENTRANCE: ("effect",),
    FeatureType.TUNNEL_EXIT: ("effect",),
    FeatureType.SPEED_BUMP_SIGN: ("height",),
    FeatureType.REFLECTIVE_MARKER: ("color",),
    FeatureType.SPEED_ZONE: ("max_speed", "zone_length"),
    FeatureType.SURFACE_SIGN: ("condition",),
    FeatureType.TRACTION_MARKER: (),
    FeatureType.MUD_POOL: ("depth", "size"),
    FeatureType.RECOVERY_POINT: (),
    FeatureType.BRIDGE_SIGN: ("height",),
    FeatureType.BRIDGE_RAILING: ("length",),
    FeatureType.BRIDGE_SUPPORT: ("height",),
    FeatureType.WIND_WARNING: ("intensity",),
    FeatureType.SPLIT_SIGN: ("options",),
    FeatureType.PATH_MARKER: ("path", "color"),
    FeatureType.MERGE_WARNING: (),
    FeatureType.SHORTCUT_HINT: ("path",),
    FeatureType.PIT_ENTRANCE: ("length", "distance"),
    FeatureType.GRANDSTAND: ("capacity", "distance"),
}


@dataclass(frozen=True)
class Feature:
    """A marker attached to a segment or to the whole track.

    Features are descriptive output only; they never change the
    track path or checkpoint placement.
    """
    feature_type: FeatureType
    position: Vec3 = Vec3()
    anchor: FeatureAnchor = FeatureAnchor.SEGMENT
    params: Mapping[str, Any] = field(default_factory=dict, hash=False)  # Read-only after init

    def __post_init__(self):
        expected = set(FEATURE_PARAMS[self.feature_type])
        if set(self.params) != expected:
            raise ValueError(
                f"{self.feature_type.value} expects params {sorted(expected)}, "
                f"got {sorted(self.params)}"
            )
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __getitem__(self, key: str) -> Any:
        return self.params[key]

    def get_state(self) -> dict:
        """Get feature state for serialization."""
        params = {
            key: list(value) if isinstance(value, tuple) else value
            for key, value in self.params.items()
        }
        return {
            "type": self.feature_type.value,
            "anchor": self.anchor.value,
            "position": self.position.get_state(),
            "params": params,
        }

    @classmethod
    def from_state(cls, state: dict) -> "Feature":
        params = {
            key: tuple(value) if isinstance(value, list) else value
            for key, value in state.get("params", {}).items()
        }
        return cls(
            feature_type=FeatureType(state["type"]),
            position=Vec3.from_state(state["position"]),
            anchor=FeatureAnchor(state["anchor"]),
            params=params,
        )
