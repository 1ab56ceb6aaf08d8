"""Nodes of the speed search tree over the station-time plane."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional

_MIN_SAFE_DISTANCE = 1.0
_OBSTACLE_INFLUENCE_DISTANCE = 2.5
_COLLISION_COST = 1e9


@dataclass(frozen=True)
class StNodeWeights:
    """Cost weights shared by all nodes."""

    ref_v: float = 0.0
    obstacle: float = 0.0
    control: float = 0.0


@dataclass
class StNode:
    """A state (station, speed, acceleration) at a time, with its path cost."""

    s: float = 0.0
    v: float = 0.0
    a: float = 0.0
    t: float = 0.0
    cost: float = 0.0
    parent: Optional[StNode] = field(default=None, repr=False, compare=False)

    _ref_v: ClassVar[float] = 0.0
    _weights: ClassVar[StNodeWeights] = StNodeWeights()

    def forward(self, delta_t: float, a: float) -> StNode:
        """Child node reached after ``delta_t`` at constant acceleration ``a``."""
        weights = StNode._weights
        cost = self.cost
        cost += weights.ref_v * abs(self.v + a * delta_t / 2.0 - StNode._ref_v)
        cost += weights.control * abs(a) * delta_t
        return StNode(
            s=self.s + self.v * delta_t + 0.5 * a * delta_t * delta_t,
            v=self.v + a * delta_t,
            a=a,
            t=self.t + delta_t,
            cost=cost,
            parent=self,
        )

    def cal_obstacle_cost(self, d: float) -> None:
        """Add the cost of passing at signed distance ``d`` from obstacles."""
        if d <= _MIN_SAFE_DISTANCE:
            self.cost += _COLLISION_COST
        elif d < _OBSTACLE_INFLUENCE_DISTANCE:
            self.cost += StNode._weights.obstacle * 10 / d

    def get_distance(self, delta_t: float, a: float) -> float:
        """Station after ``delta_t`` at constant acceleration ``a``."""
        return self.s + self.v * delta_t + 0.5 * a * delta_t * delta_t

    @classmethod
    def set_reference_speed(cls, ref_v: float) -> None:
        StNode._ref_v = float(ref_v)

    @classmethod
    def set_weights(cls, weights: StNodeWeights) -> None:
        StNode._weights = weights

    @classmethod
    def reference_speed(cls) -> float:
        return StNode._ref_v