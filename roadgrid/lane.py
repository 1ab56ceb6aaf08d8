"""Lanes built from a centre line, and a registry of lanes by id."""

from __future__ import annotations

import bisect
import math
from collections.abc import Iterable, Iterator, Sequence
from typing import Optional

from roadgrid.road_network import (
    ConnectedLane,
    LaneConnectionType,
    LaneId,
    LaneNeighborType,
    NeighborLane,
    SLPair,
    WayPoint,
)

_SIDES = (LaneNeighborType.LEFT, LaneNeighborType.RIGHT)
_LINKS = (LaneConnectionType.NEXT, LaneConnectionType.PREVIOUS)


def _normalize_angle(angle: float) -> float:
    """Wrap an angle into ``[-pi, pi)``."""
    wrapped = math.fmod(angle + math.pi, 2.0 * math.pi)
    if wrapped < 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi


def _interpolate_angle(a0: float, t0: float, a1: float, t1: float, t: float) -> float:
    """Interpolate between two headings along the shorter arc."""
    if t1 == t0:
        return _normalize_angle(a0)
    ratio = (t - t0) / (t1 - t0)
    delta = _normalize_angle(a1 - a0)
    return _normalize_angle(a0 + delta * ratio)


class Lane:
    """A lane: way points along its centre line plus its neighbours and links.

    ``center_line`` is given in the map's stored order; when
    ``negative_direction`` is true the lane is driven against that order and
    the way points are reversed.
    """

    def __init__(
        self,
        lane_id: LaneId,
        center_line: Iterable[Sequence[float]],
        width: float = 0.0,
        negative_direction: bool = False,
    ) -> None:
        points = [(float(p[0]), float(p[1])) for p in center_line]
        if not points:
            raise ValueError(f"lane {lane_id} needs at least one centre line point")
        if negative_direction:
            points.reverse()

        self.id: LaneId = lane_id
        self.width = float(width)
        self.negative_direction = bool(negative_direction)
        self._neighbors: dict[LaneNeighborType, list[NeighborLane]] = {
            side: [] for side in _SIDES
        }
        self._connections: dict[LaneConnectionType, list[ConnectedLane]] = {
            link: [] for link in _LINKS
        }
        self._way_points = self._create_way_points(points)
        self._stations = [p.s for p in self._way_points]
        self.length = self._stations[-1]

    @staticmethod
    def _create_way_points(points: list[tuple[float, float]]) -> list[WayPoint]:
        way_points = []
        arc_length = 0.0
        for (x0, y0), (x1, y1) in zip(points, points[1:]):
            way_points.append(
                WayPoint(s=arc_length, heading=math.atan2(y1 - y0, x1 - x0), point=(x0, y0))
            )
            arc_length += math.hypot(x1 - x0, y1 - y0)
        heading = way_points[-1].heading if way_points else 0.0
        way_points.append(WayPoint(s=arc_length, heading=heading, point=points[-1]))
        return way_points

    def __repr__(self) -> str:
        return f"Lane(id={self.id!r}, length={self.length!r}, width={self.width!r})"

    # ------------------------------------------------------------------
    # neighbours and connections
    # ------------------------------------------------------------------
    def add_neighbor_lane(
        self, neighbor_id: LaneId, neighbor_type: LaneNeighborType, lane_changable: bool
    ) -> None:
        if neighbor_type not in self._neighbors:
            raise ValueError(f"cannot add a neighbour of type {neighbor_type}")
        self._neighbors[neighbor_type].append(
            NeighborLane(id=neighbor_id, type=neighbor_type, lane_changable=lane_changable)
        )

    def add_connected_lane(
        self, lane_id: LaneId, connection_type: LaneConnectionType
    ) -> None:
        if connection_type not in self._connections:
            raise ValueError(f"cannot add a connection of type {connection_type}")
        self._connections[connection_type].append(
            ConnectedLane(id=lane_id, type=connection_type)
        )

    def find_all_neighbor_lanes(self, lane_map: LaneMap) -> None:
        """Add the neighbours of neighbours on each side, outwards."""
        for side in _SIDES:
            current = self.neighbor_lane(side, lane_map)
            if current is None:
                continue
            visited = {self.id, current.id}
            while current.has_neighbor(side):
                next_id = current._neighbors[side][0].id
                if next_id in visited:
                    break
                next_lane = lane_map.get_lane(next_id)
                if next_lane is None:
                    break
                self.add_neighbor_lane(
                    next_id, side, next_lane.negative_direction == self.negative_direction
                )
                visited.add(next_id)
                current = next_lane

    def neighbors(self, neighbor_type: LaneNeighborType) -> list[NeighborLane]:
        """Neighbours on one side, nearest first."""
        return list(self._neighbors.get(neighbor_type, []))

    def has_neighbor(self, neighbor_type: LaneNeighborType) -> bool:
        return bool(self._neighbors.get(neighbor_type))

    def has_left_neighbor(self) -> bool:
        return self.has_neighbor(LaneNeighborType.LEFT)

    def has_right_neighbor(self) -> bool:
        return self.has_neighbor(LaneNeighborType.RIGHT)

    def left_lane_changable(self) -> bool:
        left = self._neighbors[LaneNeighborType.LEFT]
        return bool(left) and left[0].lane_changable

    def right_lane_changable(self) -> bool:
        right = self._neighbors[LaneNeighborType.RIGHT]
        return bool(right) and right[0].lane_changable

    def neighbor_lane(
        self, neighbor_type: LaneNeighborType, lane_map: LaneMap
    ) -> Optional[Lane]:
        """The nearest neighbour on one side, looked up in ``lane_map``."""
        if not self.has_neighbor(neighbor_type):
            return None
        return lane_map.get_lane(self._neighbors[neighbor_type][0].id)

    def has_successor(self, lane_id: Optional[LaneId] = None) -> bool:
        """Whether the lane has any successor, or the successor ``lane_id``."""
        return self._has_connection(LaneConnectionType.NEXT, lane_id)

    def has_predecessor(self, lane_id: Optional[LaneId] = None) -> bool:
        """Whether the lane has any predecessor, or the predecessor ``lane_id``."""
        return self._has_connection(LaneConnectionType.PREVIOUS, lane_id)

    def _has_connection(
        self, connection_type: LaneConnectionType, lane_id: Optional[LaneId]
    ) -> bool:
        lanes = self._connections[connection_type]
        if lane_id is None:
            return bool(lanes)
        return any(lane.id == lane_id for lane in lanes)

    def next_lanes(self) -> list[LaneId]:
        return [lane.id for lane in self._connections[LaneConnectionType.NEXT]]

    def previous_lanes(self) -> list[LaneId]:
        return [lane.id for lane in self._connections[LaneConnectionType.PREVIOUS]]

    # ------------------------------------------------------------------
    # geometry
    # ------------------------------------------------------------------
    @property
    def way_points(self) -> list[WayPoint]:
        return list(self._way_points)

    def way_points_between(self, start_s: float, end_s: float) -> list[WayPoint]:
        """Way points whose arc length lies in ``[start_s, end_s]``."""
        return [p for p in self._way_points if start_s <= p.s <= end_s]

    def get_way_point(self, s: float) -> WayPoint:
        """Way point at arc length ``s``, interpolated between neighbours."""
        index = bisect.bisect_left(self._stations, s)
        last = len(self._way_points) - 1
        p1 = self._way_points[max(0, index - 1)]
        p2 = self._way_points[min(index, last)]
        if p2.s == p1.s:
            return WayPoint(s=s, heading=p1.heading, point=p1.point)
        weight = (s - p1.s) / (p2.s - p1.s)
        point = (
            (1 - weight) * p1.point[0] + weight * p2.point[0],
            (1 - weight) * p1.point[1] + weight * p2.point[1],
        )
        heading = _interpolate_angle(p1.heading, p1.s, p2.heading, p2.s, s)
        return WayPoint(s=s, heading=heading, point=point)

    def percentage_to_arc_length(self, percentage_s: float) -> float:
        """Arc length of a fraction of the lane given in stored map order."""
        if not 0.0 <= percentage_s <= 1.0:
            raise ValueError(f"percentage s ({percentage_s}) should be in [0, 1]")
        true_s = 1 - percentage_s if self.negative_direction else percentage_s
        return true_s * self.length

    def _nearest_index(self, point: Sequence[float]) -> int:
        px, py = point
        return min(
            range(len(self._way_points)),
            key=lambda i: (self._way_points[i].point[0] - px) ** 2
            + (self._way_points[i].point[1] - py) ** 2,
        )

    def get_arc_length(self, point: Sequence[float]) -> float:
        """Arc length of the projection of ``point``, clamped to the lane."""
        nearest = self._way_points[self._nearest_index(point)]
        along = math.cos(nearest.heading) * (point[0] - nearest.point[0]) + math.sin(
            nearest.heading
        ) * (point[1] - nearest.point[1])
        return min(max(nearest.s + along, 0.0), self.length)

    def get_projection(self, point: Sequence[float]) -> SLPair:
        """``(s, l)`` of ``point``: arc length and signed lateral offset (left > 0)."""
        nearest = self._way_points[self._nearest_index(point)]
        vx = point[0] - nearest.point[0]
        vy = point[1] - nearest.point[1]
        cos = math.cos(nearest.heading)
        sin = math.sin(nearest.heading)
        return nearest.s + cos * vx + sin * vy, -sin * vx + cos * vy

    def get_projection_and_boundary(
        self, point: Sequence[float]
    ) -> tuple[SLPair, tuple[float, float]]:
        """The projection of ``point`` and the lateral bounds ``(-w/2, w/2)``."""
        return self.get_projection(point), (-self.width / 2, self.width / 2)

    def is_in_lane(self, point: Sequence[float]) -> bool:
        s, l = self.get_projection(point)
        return 0.0 < s < self.length and abs(l) < self.width / 2


class LaneMap:
    """Lanes by id."""

    def __init__(self, lanes: Iterable[Lane] = ()) -> None:
        self._lanes: dict[LaneId, Lane] = {}
        for lane in lanes:
            self.add(lane)

    def add(self, lane: Lane) -> None:
        """Register ``lane``, replacing any lane with the same id."""
        self._lanes[lane.id] = lane

    def get_lane(self, lane_id: LaneId) -> Optional[Lane]:
        return self._lanes.get(lane_id)

    def __contains__(self, lane_id: object) -> bool:
        return lane_id in self._lanes

    def __len__(self) -> int:
        return len(self._lanes)

    def __iter__(self) -> Iterator[Lane]:
        return iter(self._lanes.values())