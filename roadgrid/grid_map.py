"""Two-dimensional regular grid map whose origin is the bottom-left corner.

::

      y
      ^
      |________________
      |_*_|_*_|_*_|_*_|
      |_*_|_*_|_*_|_*_|
      |_*_|_*_|_*_|_*_|------->x
     o

Cells are stored row by row in a flat array: the cell ``(x, y)`` lives at
address ``x + y * cell_num[0]``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence

import numpy as np

Index = tuple[int, int]
Coord = tuple[float, float]


def _line_cells(start: Index, end: Index) -> Iterator[Index]:
    """Yield the 8-connected cells of the segment from ``start`` to ``end``."""
    x0, y0 = start
    x1, y1 = end
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


class GridMap2D:
    """A grid of ``cell_num[0] x cell_num[1]`` cells over a planar region."""

    def __init__(
        self,
        origin: Sequence[float] = (0.0, 0.0),
        cell_num: Sequence[int] = (0, 0),
        resolution: Sequence[float] = (1.0, 1.0),
        dtype=np.uint8,
    ) -> None:
        self._dtype = np.dtype(dtype)
        self._origin: Coord = (0.0, 0.0)
        self._resolution: Coord = (1.0, 1.0)
        self._resolution_inv: Coord = (1.0, 1.0)
        self._cell_num: Index = (0, 0)
        self._data = np.zeros(0, dtype=self._dtype)
        self.origin = origin
        self.cell_num = cell_num
        self.resolution = resolution

    # ------------------------------------------------------------------
    # geometry and storage
    # ------------------------------------------------------------------
    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def origin(self) -> Coord:
        return self._origin

    @origin.setter
    def origin(self, origin: Sequence[float]) -> None:
        ox, oy = origin
        self._origin = (float(ox), float(oy))

    @property
    def resolution(self) -> Coord:
        return self._resolution

    @resolution.setter
    def resolution(self, resolution: Sequence[float]) -> None:
        rx, ry = (float(r) for r in resolution)
        if rx <= 0.0 or ry <= 0.0:
            raise ValueError(f"resolution must be positive, got {(rx, ry)}")
        self._resolution = (rx, ry)
        self._resolution_inv = (1.0 / rx, 1.0 / ry)

    @property
    def cell_num(self) -> Index:
        return self._cell_num

    @cell_num.setter
    def cell_num(self, cell_num: Sequence[int]) -> None:
        """Set the grid size; all cells are cleared to zero."""
        nx, ny = (int(n) for n in cell_num)
        if nx < 0 or ny < 0:
            raise ValueError(f"cell numbers must be non-negative, got {(nx, ny)}")
        self._cell_num = (nx, ny)
        self._data = np.zeros(nx * ny, dtype=self._dtype)

    @property
    def data(self) -> np.ndarray:
        """The flat cell array (a live view; writes change the map)."""
        return self._data

    def _grid(self) -> np.ndarray:
        nx, ny = self._cell_num
        return self._data.reshape(ny, nx)

    def reset_map(self) -> None:
        """Set every cell to zero."""
        self._data.fill(0)

    def resize_from(self, other: GridMap2D) -> None:
        """Take the origin, size and resolution of ``other``; cells become zero."""
        self.origin = other.origin
        self.cell_num = other.cell_num
        self.resolution = other.resolution

    def set_data(self, data: Iterable, cell_num: Sequence[int]) -> None:
        """Replace the cells with a copy of ``data`` laid out as ``cell_num``."""
        nx, ny = (int(n) for n in cell_num)
        array = np.array(data, dtype=self._dtype).ravel()
        if nx < 0 or ny < 0 or array.size != nx * ny:
            raise ValueError(
                f"data of size {array.size} does not fit cell numbers {(nx, ny)}"
            )
        self._cell_num = (nx, ny)
        self._data = array

    # ------------------------------------------------------------------
    # index arithmetic
    # ------------------------------------------------------------------
    def bound_index(self, index: Sequence[int]) -> Index:
        """Clamp an index into the grid."""
        nx, ny = self._cell_num
        x, y = index
        return max(min(int(x), nx - 1), 0), max(min(int(y), ny - 1), 0)

    def index_to_address(self, x: int, y: int) -> int:
        return int(x) + int(y) * self._cell_num[0]

    def coordinate_to_index(self, coord: Sequence[float]) -> Index:
        cx, cy = coord
        return (
            math.floor((cx - self._origin[0]) * self._resolution_inv[0]),
            math.floor((cy - self._origin[1]) * self._resolution_inv[1]),
        )

    def index_to_coordinate(self, index: Sequence[int]) -> Coord:
        """Return the centre of a cell."""
        x, y = index
        return (
            (x + 0.5) * self._resolution[0] + self._origin[0],
            (y + 0.5) * self._resolution[1] + self._origin[1],
        )

    def is_in_map(self, index: Sequence[int]) -> bool:
        x, y = index
        nx, ny = self._cell_num
        return 0 <= x < nx and 0 <= y < ny

    def is_coord_in_map(self, coord: Sequence[float]) -> bool:
        return self.is_in_map(self.coordinate_to_index(coord))

    def _checked_address(self, x: int, y: int) -> int:
        if not self.is_in_map((x, y)):
            raise IndexError(f"cell {(x, y)} is outside a {self._cell_num} grid")
        return self.index_to_address(x, y)

    # ------------------------------------------------------------------
    # cell access
    # ------------------------------------------------------------------
    def get_value(self, x: int, y: int):
        return self._data[self._checked_address(x, y)]

    def get_value_safe(self, index: Sequence[int]):
        """Value of the cell nearest to ``index`` inside the grid."""
        return self.get_value(*self.bound_index(index))

    def get_value_bilinear(
        self, coord: Sequence[float]
    ) -> tuple[float, tuple[float, float]]:
        """Bilinear interpolation of cell values, with its gradient.

        Outside the map the value and the gradient are zero.
        """
        if not self.is_coord_in_map(coord):
            return 0.0, (0.0, 0.0)

        cx, cy = coord
        rx, ry = self._resolution
        inv_x, inv_y = self._resolution_inv
        lb = self.bound_index(self.coordinate_to_index((cx - 0.5 * rx, cy - 0.5 * ry)))
        lb_x, lb_y = self.index_to_coordinate(lb)

        dx = (cx - lb_x) * inv_x
        dy = (cy - lb_y) * inv_y

        v00 = float(self.get_value_safe((lb[0], lb[1])))
        v01 = float(self.get_value_safe((lb[0], lb[1] + 1)))
        v10 = float(self.get_value_safe((lb[0] + 1, lb[1])))
        v11 = float(self.get_value_safe((lb[0] + 1, lb[1] + 1)))

        y0 = (1 - dx) * v00 + dx * v10
        y1 = (1 - dx) * v01 + dx * v11
        x0 = (1 - dy) * v00 + dy * v01
        x1 = (1 - dy) * v10 + dy * v11

        gradient = ((x1 - x0) * inv_x, (y1 - y0) * inv_y)
        return (1 - dy) * y0 + dy * y1, gradient

    def set_value(self, x: int, y: int, value) -> None:
        self._data[self._checked_address(x, y)] = value

    def is_occupied(self, x: int, y: int) -> bool:
        return bool(self.get_value(x, y) > 0)

    def is_coord_occupied(self, coord: Sequence[float]) -> bool:
        """Occupancy of the cell holding ``coord``, clamped into the grid."""
        index = self.bound_index(self.coordinate_to_index(coord))
        return bool(self.get_value(*index) > 0)

    # ------------------------------------------------------------------
    # views for debugging and display; the data is copied on every call
    # ------------------------------------------------------------------
    def matrix(self) -> np.ndarray:
        """Cells as a matrix whose first row is the top of the map."""
        return np.flipud(self._grid()).copy()

    def binary_image(self) -> np.ndarray:
        """Image of the map: occupied cells black (0), free cells 200."""
        image = np.where(self._grid() > 0.5, 0, 200).astype(np.uint8)
        return np.flipud(image).copy()

    # ------------------------------------------------------------------
    # drawing; drawn cells are set to one
    # ------------------------------------------------------------------
    def _one(self):
        return self._dtype.type(1)

    def _paint(self, cells: Iterable[Index]) -> None:
        grid = self._grid()
        nx, ny = self._cell_num
        one = self._one()
        for x, y in cells:
            if 0 <= x < nx and 0 <= y < ny:
                grid[y, x] = one

    def _to_indices(self, points: Iterable[Sequence[float]]) -> list[Index]:
        return [self.coordinate_to_index(p) for p in points]

    def _draw_closed_outline(self, polygon: list[Index]) -> None:
        for start, end in zip(polygon, polygon[1:] + polygon[:1]):
            self._paint(_line_cells(start, end))

    def _fill_polygon(self, polygon: list[Index]) -> None:
        if not polygon:
            return
        nx, ny = self._cell_num
        grid = self._grid()
        one = self._one()
        edges = [
            (start, end)
            for start, end in zip(polygon, polygon[1:] + polygon[:1])
            if start[1] != end[1]
        ]
        ys = [y for _, y in polygon]
        for row in range(max(min(ys), 0), min(max(ys), ny - 1) + 1):
            crossings = sorted(
                x0 + (row - y0) * (x1 - x0) / (y1 - y0)
                for (x0, y0), (x1, y1) in edges
                if min(y0, y1) <= row < max(y0, y1)
            )
            for left, right in zip(crossings[::2], crossings[1::2]):
                start = max(math.ceil(left), 0)
                stop = min(math.floor(right), nx - 1)
                if start <= stop:
                    grid[row, start : stop + 1] = one
        self._draw_closed_outline(polygon)

    def fill_circle(self, center: Sequence[float], radius: float) -> None:
        """Fill the disc around ``center``; the radius is cut to whole cells."""
        cx, cy = self.coordinate_to_index(center)
        grid_radius = int(radius * self._resolution_inv[0])
        if grid_radius < 0:
            return
        nx, ny = self._cell_num
        x_lo, x_hi = max(cx - grid_radius, 0), min(cx + grid_radius, nx - 1)
        y_lo, y_hi = max(cy - grid_radius, 0), min(cy + grid_radius, ny - 1)
        if x_lo > x_hi or y_lo > y_hi:
            return
        xs = np.arange(x_lo, x_hi + 1)
        ys = np.arange(y_lo, y_hi + 1)
        inside = (xs[None, :] - cx) ** 2 + (ys[:, None] - cy) ** 2 <= grid_radius**2
        window = self._grid()[y_lo : y_hi + 1, x_lo : x_hi + 1]
        window[inside] = self._one()

    def fill_poly(self, points: Iterable[Sequence[float]]) -> None:
        """Fill a polygon (even-odd rule), including its outline."""
        self._fill_polygon(self._to_indices(points))

    def fill_convex_poly(self, points: Iterable[Sequence[float]]) -> None:
        """Fill a convex polygon, including its outline."""
        self._fill_polygon(self._to_indices(points))

    def poly_line(self, points: Iterable[Sequence[float]]) -> None:
        """Draw an open polyline through ``points``."""
        indices = self._to_indices(points)
        if len(indices) == 1:
            self._paint(indices)
        for start, end in zip(indices, indices[1:]):
            self._paint(_line_cells(start, end))

    def fill_entire_row(self, y_coord: float) -> None:
        """Mark the whole row holding ``y_coord``; rows outside are ignored."""
        row = math.floor((y_coord - self._origin[1]) * self._resolution_inv[1])
        if 0 <= row < self._cell_num[1]:
            self._grid()[row, :] = self._one()

    # ------------------------------------------------------------------
    # free-space queries along the y axis
    # ------------------------------------------------------------------
    def _column_index(self, x_coord: float) -> int:
        x = math.floor((x_coord - self._origin[0]) * self._resolution_inv[0])
        if not 0 <= x < self._cell_num[0]:
            raise IndexError(f"x coordinate {x_coord} is outside the map")
        return x

    def search_for_vertical_boundaries(
        self, x_coords: Iterable[float]
    ) -> list[list[tuple[float, float]]]:
        """Free intervals ``(lower, upper)`` along y for each x coordinate."""
        ry = self._resolution[1]
        oy = self._origin[1]
        last = self._cell_num[1] - 1
        result = []
        for x_coord in x_coords:
            column = self._grid()[:, self._column_index(x_coord)]
            boundary: list[tuple[float, float]] = []
            lower = 0
            in_free_run = False
            for y, value in enumerate(column):
                if not in_free_run:
                    if value == 0:
                        in_free_run = True
                        lower = y
                elif value > 0 or y == last:
                    boundary.append(((lower + 0.5) * ry + oy, (y - 1) * ry + oy))
                    in_free_run = False
            result.append(boundary)
        return result

    def find_vertical_boundary(self, x: float, y: float) -> tuple[float, float]:
        """Extend from ``(x, y)`` through free cells downwards and upwards.

        Returns ``(lower, upper)``.
        """
        x_idx = self._column_index(x)
        y_idx = math.floor((y - self._origin[1]) * self._resolution_inv[1])
        if not 0 <= y_idx < self._cell_num[1]:
            raise IndexError(f"y coordinate {y} is outside the map")
        column = self._grid()[:, x_idx]
        lower = upper = y

        for value in column[y_idx + 1 :]:
            if value != 0:
                break
            upper += self._resolution[1]

        for value in column[:y_idx][::-1]:
            if value != 0:
                break
            lower -= self._resolution_inv[1]

        return lower, upper