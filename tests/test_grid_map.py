import numpy as np
import pytest

from roadgrid.grid_map import GridMap2D


def make_map(nx=10, ny=8, res=1.0, origin=(0.0, 0.0), dtype=np.uint8):
    return GridMap2D(origin, (nx, ny), (res, res), dtype)


def occupied_cells(gm):
    nx, ny = gm.cell_num
    return {(x, y) for x in range(nx) for y in range(ny) if gm.is_occupied(x, y)}


def test_new_map_is_empty_and_sized():
    nx, ny = 6, 4
    gm = make_map(nx, ny)
    assert gm.data.size == nx * ny
    assert not gm.data.any()
    assert gm.cell_num == (nx, ny)


def test_invalid_resolution_raises():
    with pytest.raises(ValueError):
        GridMap2D((0.0, 0.0), (3, 3), (0.0, 1.0))


def test_negative_cell_num_raises():
    with pytest.raises(ValueError):
        GridMap2D((0.0, 0.0), (-1, 3), (1.0, 1.0))


def test_index_coordinate_round_trip():
    gm = make_map(7, 5, res=0.3, origin=(-2.0, 4.5))
    for x in range(7):
        for y in range(5):
            assert gm.coordinate_to_index(gm.index_to_coordinate((x, y))) == (x, y)


def test_cell_centre_is_half_a_cell_from_origin():
    res = 0.5
    origin = (1.0, -3.0)
    gm = make_map(4, 4, res=res, origin=origin)
    cx, cy = gm.index_to_coordinate((0, 0))
    assert cx - origin[0] == pytest.approx(res / 2)
    assert cy - origin[1] == pytest.approx(res / 2)


def test_bound_index_clamps():
    nx, ny = 5, 6
    gm = make_map(nx, ny)
    assert gm.bound_index((-3, 100)) == (0, ny - 1)
    assert gm.bound_index((2, 3)) == (2, 3)


def test_set_value_matches_address_and_get_value():
    gm = make_map(5, 4, dtype=np.int32)
    gm.set_value(3, 2, 7)
    assert gm.data[gm.index_to_address(3, 2)] == 7
    assert gm.get_value(3, 2) == 7
    assert gm.data.sum() == 7


def test_is_in_map():
    nx, ny = 5, 4
    gm = make_map(nx, ny)
    assert gm.is_in_map((0, 0))
    assert gm.is_in_map((nx - 1, ny - 1))
    assert not gm.is_in_map((nx, 0))
    assert not gm.is_in_map((0, -1))
    assert not gm.is_coord_in_map((-0.1, 0.0))


def test_get_value_outside_raises():
    gm = make_map(3, 3)
    with pytest.raises(IndexError):
        gm.get_value(3, 0)


def test_is_coord_occupied_clamps_into_map():
    nx, ny = 4, 4
    gm = make_map(nx, ny)
    gm.set_value(nx - 1, ny - 1, 1)
    assert gm.is_coord_occupied((1000.0, 1000.0))
    assert not gm.is_coord_occupied((-1000.0, -1000.0))


def test_get_value_safe_clamps():
    gm = make_map(4, 4)
    gm.set_value(0, 0, 1)
    assert gm.get_value_safe((-5, -5)) == 1


def test_reset_map_clears_all():
    gm = make_map(4, 4)
    gm.fill_entire_row(1.5)
    gm.reset_map()
    assert not gm.data.any()


def test_resize_from_copies_geometry_not_data():
    source = GridMap2D((1.0, 2.0), (6, 3), (0.5, 0.25), np.uint8)
    source.set_value(1, 1, 1)
    target = GridMap2D(dtype=np.float64)
    target.resize_from(source)
    assert target.origin == source.origin
    assert target.cell_num == source.cell_num
    assert target.resolution == source.resolution
    assert target.data.dtype == np.float64
    assert not target.data.any()


def test_set_data_round_trip_and_size_check():
    gm = make_map(2, 2)
    values = [0, 1, 2, 3]
    gm.set_data(values, (2, 2))
    assert list(gm.data) == values
    assert gm.get_value(1, 1) == values[3]
    with pytest.raises(ValueError):
        gm.set_data(values, (3, 2))


def test_bilinear_at_cell_centres_returns_cell_values():
    gm = make_map(4, 4, dtype=np.float64)
    gm.set_value(1, 2, 5.0)
    gm.set_value(2, 2, 3.0)
    value, _ = gm.get_value_bilinear(gm.index_to_coordinate((1, 2)))
    assert value == pytest.approx(5.0)
    value, _ = gm.get_value_bilinear(gm.index_to_coordinate((2, 2)))
    assert value == pytest.approx(3.0)


def test_bilinear_midway_is_average():
    gm = make_map(4, 4, dtype=np.float64)
    gm.set_value(1, 1, 2.0)
    gm.set_value(2, 1, 6.0)
    a = gm.index_to_coordinate((1, 1))
    b = gm.index_to_coordinate((2, 1))
    mid = ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)
    value, _ = gm.get_value_bilinear(mid)
    assert value == pytest.approx((2.0 + 6.0) / 2)


def test_bilinear_gradient_of_ramp():
    res = 0.5
    nx, ny = 6, 6
    gm = make_map(nx, ny, res=res, dtype=np.float64)
    ramp = [float(x) for _ in range(ny) for x in range(nx)]
    gm.set_data(ramp, (nx, ny))
    value, (gx, gy) = gm.get_value_bilinear(gm.index_to_coordinate((2, 3)))
    assert value == pytest.approx(ramp[gm.index_to_address(2, 3)])
    assert gx == pytest.approx(1.0 / res)
    assert gy == pytest.approx(0.0)


def test_bilinear_outside_is_zero():
    gm = make_map(3, 3, dtype=np.float64)
    gm.set_data(np.ones(9), (3, 3))
    value, grad = gm.get_value_bilinear((-1.0, -1.0))
    assert value == 0.0
    assert grad == (0.0, 0.0)


def test_matrix_puts_top_row_first():
    nx, ny = 3, 4
    gm = make_map(nx, ny)
    gm.set_value(0, ny - 1, 1)
    m = gm.matrix()
    assert m.shape == (ny, nx)
    assert m[0, 0] == 1
    assert m.sum() == 1


def test_binary_image_values():
    gm = make_map(3, 2)
    gm.set_value(0, 0, 1)
    image = gm.binary_image()
    assert image[-1, 0] == 0
    assert image[0, 0] == 200
    assert int((image == 200).sum()) == gm.data.size - 1


def test_fill_circle_symmetric_and_bounded():
    gm = make_map(21, 21)
    gm.fill_circle((10.5, 10.5), 3.0)
    cells = occupied_cells(gm)
    assert (10, 10) in cells
    assert (13, 10) in cells and (7, 10) in cells
    assert (14, 10) not in cells
    assert all((20 - x, y) in cells and (x, 20 - y) in cells for x, y in cells)
    assert all((x - 10) ** 2 + (y - 10) ** 2 <= 9 for x, y in cells)


def test_fill_convex_poly_rectangle():
    gm = make_map(10, 8)
    gm.fill_convex_poly([(2.5, 1.5), (5.5, 1.5), (5.5, 3.5), (2.5, 3.5)])
    expected = {(x, y) for x in range(2, 6) for y in range(1, 4)}
    assert occupied_cells(gm) == expected


def test_fill_poly_matches_convex_for_convex_shape():
    points = [(1.2, 1.2), (8.2, 2.2), (4.2, 6.2)]
    a = make_map(10, 8)
    b = make_map(10, 8)
    a.fill_poly(points)
    b.fill_convex_poly(points)
    assert np.array_equal(a.data, b.data)
    assert a.is_occupied(4, 3)


def test_fill_poly_concave_leaves_notch_free():
    gm = make_map(10, 10)
    l_shape = [(0.5, 0.5), (8.5, 0.5), (8.5, 3.5), (3.5, 3.5), (3.5, 8.5), (0.5, 8.5)]
    gm.fill_poly(l_shape)
    assert gm.is_occupied(1, 1)
    assert gm.is_occupied(7, 2)
    assert gm.is_occupied(2, 7)
    assert not gm.is_occupied(6, 6)


def test_fill_poly_is_clipped_to_map():
    gm = make_map(5, 5)
    gm.fill_poly([(-10.0, -10.0), (20.0, -10.0), (20.0, 20.0), (-10.0, 20.0)])
    assert gm.data.all()


def test_poly_line_horizontal():
    gm = make_map(10, 5)
    gm.poly_line([(1.5, 2.5), (6.5, 2.5)])
    assert occupied_cells(gm) == {(x, 2) for x in range(1, 7)}


def test_poly_line_is_open():
    gm = make_map(10, 10)
    gm.poly_line([(1.5, 1.5), (6.5, 1.5), (6.5, 6.5)])
    assert gm.is_occupied(1, 1) and gm.is_occupied(6, 6)
    assert not gm.is_occupied(3, 3)


def test_fill_entire_row():
    nx, ny = 6, 5
    gm = make_map(nx, ny)
    gm.fill_entire_row(2.3)
    assert occupied_cells(gm) == {(x, 2) for x in range(nx)}
    gm.reset_map()
    gm.fill_entire_row(-1.0)
    gm.fill_entire_row(float(ny) + 1.0)
    assert not gm.data.any()


def test_search_for_vertical_boundaries():
    nx, ny = 3, 10
    gm = make_map(nx, ny)
    obstacle_row = 4
    gm.set_value(1, obstacle_row, 1)
    boundaries = gm.search_for_vertical_boundaries([1.5, 0.5])
    assert len(boundaries) == 2
    blocked = boundaries[0]
    assert len(blocked) == 2
    assert blocked[0] == pytest.approx((0.5, 3.0))
    assert blocked[0][1] < obstacle_row < blocked[1][0]
    assert all(lower < upper for lower, upper in blocked)
    assert len(boundaries[1]) == 1


def test_search_for_vertical_boundaries_outside_raises():
    gm = make_map(3, 3)
    with pytest.raises(IndexError):
        gm.search_for_vertical_boundaries([10.0])


def test_find_vertical_boundary_blocked_on_both_sides():
    gm = make_map(3, 10)
    gm.set_value(1, 3, 1)
    gm.set_value(1, 5, 1)
    y = 4.5
    assert gm.find_vertical_boundary(1.5, y) == (y, y)


def test_find_vertical_boundary_extends_through_free_cells():
    gm = make_map(3, 12)
    y = 4.5
    query_row = 4
    free_above = 3
    free_below = 2
    gm.set_value(1, query_row + free_above + 1, 1)
    gm.set_value(1, query_row - free_below - 1, 1)
    lower, upper = gm.find_vertical_boundary(1.5, y)
    assert upper == pytest.approx(y + free_above * gm.resolution[1])
    assert lower == pytest.approx(y - free_below * gm.resolution[1])
    assert lower <= y <= upper


def test_find_vertical_boundary_outside_raises():
    gm = make_map(3, 3)
    with pytest.raises(IndexError):
        gm.find_vertical_boundary(-1.0, 1.0)