"""Two-dimensional Euclidean signed distance field over an occupancy grid.

The field shares the grid layout of :class:`~roadgrid.grid_map.GridMap2D`:
the origin is the bottom-left corner of the map.

::

             y ^_______________________________
      Y  ^     |                               |
         |     |     Signed distance field     |
         |     |                               |
         |     o-------->______________________|
         |  origin     x
         |
         O----------------->X
       Global coordinate

Free cells hold their distance to the nearest occupied cell, occupied cells
hold a non-positive value that decreases towards the inside of an obstacle.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from roadgrid.grid_map import GridMap2D

_VERTICAL_INF = 1_000_000_000


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding towards zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def _column_scan(mask: np.ndarray, inf: int) -> np.ndarray:
    """Distance in cells along y from each cell to the nearest marked cell."""
    g = np.empty(mask.shape, dtype=np.int64)
    ny = mask.shape[0]
    g[0] = np.where(mask[0], 0, inf)
    for y in range(1, ny):
        g[y] = np.where(mask[y], 0, g[y - 1] + 1)
    for y in range(ny - 2, -1, -1):
        np.minimum(g[y], g[y + 1] + 1, out=g[y])
    return g


def _row_transform(g_row: list[int]) -> list[int]:
    """Squared Euclidean distances along one row, given column distances."""
    n = len(g_row)

    def f(x: int, i: int) -> int:
        return (x - i) * (x - i) + g_row[i] * g_row[i]

    s = [0] * n
    t = [0] * n
    q = 0
    for u in range(1, n):
        while q >= 0 and f(t[q], s[q]) > f(t[q], u):
            q -= 1
        if q < 0:
            q = 0
            s[0] = u
        else:
            numerator = (
                u * u - s[q] * s[q] + g_row[u] * g_row[u] - g_row[s[q]] * g_row[s[q]]
            )
            w = 1 + _trunc_div(numerator, 2 * (u - s[q]))
            if w < n:
                q += 1
                s[q] = u
                t[q] = w

    squared = [0] * n
    for u in range(n - 1, -1, -1):
        squared[u] = f(u, s[q])
        if u == t[q]:
            q -= 1
    return squared


class SignedDistanceField2D:
    """An occupancy grid together with its signed distance field."""

    def __init__(
        self,
        origin: Sequence[float] = (0.0, 0.0),
        dim: Sequence[int] = (0, 0),
        map_resolution: float = 1.0,
    ) -> None:
        self._map_resolution = float(map_resolution)
        self._occupancy_map = GridMap2D(
            origin, dim, (self._map_resolution, self._map_resolution), dtype=np.uint8
        )
        self._esdf = GridMap2D(dtype=np.float64)
        self._esdf.resize_from(self._occupancy_map)

    @classmethod
    def from_occupancy_map(cls, occupancy_map: GridMap2D) -> SignedDistanceField2D:
        """Build a field around an existing occupancy map, which it takes over."""
        field = cls(
            occupancy_map.origin, occupancy_map.cell_num, occupancy_map.resolution[0]
        )
        field._occupancy_map = occupancy_map
        field._esdf.resize_from(occupancy_map)
        return field

    # ------------------------------------------------------------------
    @property
    def map_resolution(self) -> float:
        return self._map_resolution

    @property
    def occupancy_map(self) -> GridMap2D:
        return self._occupancy_map

    @property
    def esdf(self) -> GridMap2D:
        return self._esdf

    def set_origin(self, origin: Sequence[float]) -> None:
        self._occupancy_map.origin = origin
        self._esdf.origin = origin

    def set_resolution(self, map_resolution: float) -> None:
        self._map_resolution = float(map_resolution)
        resolution = (self._map_resolution, self._map_resolution)
        self._occupancy_map.resolution = resolution
        self._esdf.resolution = resolution

    def set_cell_num(self, cell_num: Sequence[int]) -> None:
        """Resize both grids; every cell is cleared."""
        self._occupancy_map.cell_num = cell_num
        self._esdf.cell_num = cell_num

    # ------------------------------------------------------------------
    def _occupied_mask(self) -> np.ndarray:
        nx, ny = self._occupancy_map.cell_num
        return self._occupancy_map.data.reshape(ny, nx) > 0

    def _euclidean_distance_transform(self, mask: np.ndarray) -> np.ndarray:
        """Distance from each cell to the nearest cell marked in ``mask``."""
        ny, nx = mask.shape
        if nx == 0 or ny == 0:
            return np.zeros(mask.shape, dtype=np.float64)
        g = _column_scan(mask, nx + ny + 10)
        squared = np.array(
            [_row_transform(row) for row in g.tolist()], dtype=np.float64
        )
        return self._map_resolution * np.sqrt(squared)

    def _vertical_distance_transform(self, mask: np.ndarray) -> np.ndarray:
        """Distance along y only from each cell to the nearest marked cell."""
        if mask.size == 0:
            return np.zeros(mask.shape, dtype=np.float64)
        g = _column_scan(mask, _VERTICAL_INF)
        return self._map_resolution * g.astype(np.float64)

    def _store(self, distance: np.ndarray, inv_distance: np.ndarray) -> None:
        esdf = distance.copy()
        inside = inv_distance > 0
        esdf[inside] += self._map_resolution - inv_distance[inside]
        self._esdf.set_data(esdf.ravel(), self._occupancy_map.cell_num)

    def update_sdf(self) -> None:
        """Recompute the field from the occupancy map."""
        occupied = self._occupied_mask()
        self._store(
            self._euclidean_distance_transform(occupied),
            self._euclidean_distance_transform(~occupied),
        )

    def update_vertical_sdf(self) -> None:
        """Recompute the field measuring distances along the y axis only."""
        occupied = self._occupied_mask()
        self._store(
            self._vertical_distance_transform(occupied),
            self._vertical_distance_transform(~occupied),
        )

    def signed_distance(
        self, coord: Sequence[float]
    ) -> tuple[float, tuple[float, float]]:
        """Interpolated signed distance at ``coord`` and its gradient."""
        value, gradient = self._esdf.get_value_bilinear(coord)
        if math.isnan(value):
            raise ValueError(f"signed distance at {tuple(coord)} is undefined")
        return value, gradient