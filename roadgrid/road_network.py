"""Basic road network types: lane relations and way points along a lane."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

LaneId = int
SLPair = tuple[float, float]


class LaneTurningType(Enum):
    NO_TURN = 1
    LEFT_TURN = 2
    RIGHT_TURN = 3


class LaneNeighborType(Enum):
    LEFT = 0
    RIGHT = 1
    UNKNOWN = 2


class LaneConnectionType(Enum):
    NEXT = 0
    PREVIOUS = 1
    UNKNOWN = 2


@dataclass
class WayPoint:
    """A point on a lane centre line with its arc length and heading."""

    s: float = 0.0
    heading: float = 0.0
    point: tuple[float, float] = (0.0, 0.0)

    def __str__(self) -> str:
        x, y = self.point
        return (
            f"[x: {x:<6.4f}, y: {y:<6.4f}, "
            f"s: {self.s:<6.4f}, 0: {self.heading:<6.4f}]\n"
        )


@dataclass
class NeighborLane:
    """A lane beside another one."""

    id: LaneId = 0
    type: LaneNeighborType = LaneNeighborType.UNKNOWN
    lane_changable: bool = False


@dataclass
class ConnectedLane:
    """A lane before or after another one."""

    id: LaneId = 0
    type: LaneConnectionType = LaneConnectionType.UNKNOWN


def format_waypoints(waypoints: Iterable[WayPoint]) -> str:
    """Numbered listing of way points, one per line."""
    return "".join(f"{count}. {point}" for count, point in enumerate(waypoints))