"""A route across road segments, each holding the drivable lane segments."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from roadgrid.road_network import LaneId


class LaneSegmentBehavior(Enum):
    """What the ego vehicle may do while in a lane segment."""

    KEEP = 0
    LEFT_CHANGE = 1
    RIGHT_CHANGE = 2
    NONE = 3

    def __str__(self) -> str:
        if self is LaneSegmentBehavior.LEFT_CHANGE:
            return "left"
        if self is LaneSegmentBehavior.RIGHT_CHANGE:
            return "right"
        return "keep"


@dataclass
class LaneSegment:
    """The part of a lane that the route uses. Neighbour id zero means none."""

    id: LaneId = 0
    start_s: float = 0.0
    end_s: float = 0.0
    length: float = 0.0
    maximum_lane_keeping_length: float = 0.0
    left_neighbor_id: LaneId = 0
    right_neighbor_id: LaneId = 0
    successors_id: list[LaneId] = field(default_factory=list)
    presuccessor_id: list[LaneId] = field(default_factory=list)
    behavior: list[LaneSegmentBehavior] = field(default_factory=list)


@dataclass
class RoadSegment:
    """Drivable lane segments side by side, ordered from right to left."""

    lane_segments: list[LaneSegment] = field(default_factory=list)
    num_of_drivable_lanes: Optional[int] = None

    def __post_init__(self) -> None:
        if self.num_of_drivable_lanes is None:
            self.num_of_drivable_lanes = len(self.lane_segments)


@dataclass
class FullRoute:
    """A route from ``start`` to ``end`` ending in lane ``target_lane_id``.

    ``lane_map`` maps a lane id to its (road segment, lane segment) indices;
    lanes missing from it are indexed on construction.
    """

    start: tuple[float, float] = (0.0, 0.0)
    end: tuple[float, float] = (0.0, 0.0)
    target_lane_id: LaneId = 0
    road_segments: list[RoadSegment] = field(default_factory=list)
    lane_map: dict[LaneId, tuple[int, int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for i, road in enumerate(self.road_segments):
            for j, lane in enumerate(road.lane_segments):
                self.lane_map.setdefault(lane.id, (i, j))

    def get_lane_segment(self, lane_id: LaneId) -> LaneSegment:
        """The lane segment of ``lane_id``; raises ``KeyError`` if absent."""
        road_index, lane_index = self.lane_map[lane_id]
        return self.road_segments[road_index].lane_segments[lane_index]