"""
Segment selector - Difficulty-weighted choice of the next segment kind.
"""

from typing import Dict, Tuple

from trackgen.track.random_stream import RandomStream
from trackgen.track.segment import SegmentKind


# (base weight, weight added per unit of difficulty), walked in this order
SEGMENT_WEIGHTS: Dict[SegmentKind, Tuple[float, float]] = {
    SegmentKind.STRAIGHT: (0.30, 0.10),
    SegmentKind.CORNER: (0.20, 0.20),
    SegmentKind.HILL: (0.10, 0.15),
    SegmentKind.CHICANE: (0.10, 0.20),
    SegmentKind.JUMP: (0.06, 0.10),
    SegmentKind.BANKED_CORNER: (0.04, 0.05),
    SegmentKind.TUNNEL: (0.03, 0.05),
    SegmentKind.HAIRPIN: (0.03, 0.10),
    SegmentKind.DOWNHILL: (0.02, 0.08),
    SegmentKind.UPHILL: (0.02, 0.08),
    SegmentKind.SPEED_BUMP: (0.02, 0.05),
    SegmentKind.OFFROAD: (0.02, 0.10),
    SegmentKind.BRIDGE: (0.01, 0.05),
    SegmentKind.SPLIT: (0.01, 0.05),
}


def segment_probabilities(difficulty: float) -> Dict[SegmentKind, float]:
    """Get the normalized probability of every segment kind.

    Args:
        difficulty: Difficulty in [0, 1]

    Returns:
        Probability per kind, summing to 1
    """
    weights = {
        kind: base + difficulty * scale
        for kind, (base, scale) in SEGMENT_WEIGHTS.items()
    }
    total = sum(weights.values())
    return {kind: weight / total for kind, weight in weights.items()}


def choose_segment_kind(
    index: int,
    difficulty: float,
    rand: RandomStream,
) -> SegmentKind:
    """Pick the kind of the next segment.

    Draws exactly one value from the stream and walks the kinds in a
    fixed order, accumulating their probabilities.

    Args:
        index: Position of the segment in the track (reserved for
            positional bias, currently unused)
        difficulty: Difficulty in [0, 1]
        rand: Random stream

    Returns:
        Chosen segment kind
    """
    r = rand.next()
    cumulative = 0.0
    for kind, probability in segment_probabilities(difficulty).items():
        cumulative += probability
        if r < cumulative:
            return kind

    # Rounding can leave the total just under r
    return SegmentKind.STRAIGHT
