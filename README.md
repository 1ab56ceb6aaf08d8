# roadgrid

Building blocks for road-vehicle motion planning.

## Modules

- `roadgrid.grid_map`: `GridMap2D`, a 2-D grid whose origin is the bottom-left
  corner. It converts between coordinates and cells (`coordinate_to_index`,
  `index_to_coordinate`, `bound_index`), reads and writes cells (`get_value`,
  `get_value_safe`, `set_value`, `is_occupied`), interpolates bilinearly with a
  gradient (`get_value_bilinear`), draws circles, polygons, polylines and whole
  rows (`fill_circle`, `fill_poly`, `fill_convex_poly`, `poly_line`,
  `fill_entire_row`), and finds free intervals along y
  (`search_for_vertical_boundaries`, `find_vertical_boundary`). `matrix()` and
  `binary_image()` return copies flipped so that the first row is the top of
  the map.
- `roadgrid.sdf`: `SignedDistanceField2D`, an occupancy grid together with its
  Euclidean signed distance field. `update_sdf()` computes the full 2-D field,
  `update_vertical_sdf()` measures distances along y only, and
  `signed_distance(coord)` returns the interpolated value and its gradient.
- `roadgrid.st_node`: `StNode` and `StNodeWeights`, nodes of a station–time
  search. `forward(delta_t, a)` creates a child node and adds the
  reference-speed and control costs, and `cal_obstacle_cost(d)` adds the cost
  of passing at distance `d` from an obstacle. The reference speed and the
  weights are shared by all nodes (`set_reference_speed`, `set_weights`).
- `roadgrid.road_network`: `WayPoint`, `NeighborLane`, `ConnectedLane`, the
  enums `LaneTurningType`, `LaneNeighborType`, `LaneConnectionType`, and
  `format_waypoints` for a numbered listing of way points.
- `roadgrid.lane`: `Lane`, built from a centre line, with neighbour and
  successor/predecessor links, interpolated way points (`get_way_point`),
  projection of a point onto the lane (`get_projection`, `get_arc_length`,
  `is_in_lane`) and `percentage_to_arc_length`; `LaneMap`, a registry of lanes
  by id.
- `roadgrid.full_route`: `FullRoute`, `RoadSegment`, `LaneSegment` and
  `LaneSegmentBehavior` (keep / left / right) describing a route through road
  segments. `FullRoute.get_lane_segment(lane_id)` finds a lane segment by id.

## Installation

```
pip install roadgrid
```

numpy is the only runtime dependency.

## Examples

```python
from roadgrid.grid_map import GridMap2D
from roadgrid.sdf import SignedDistanceField2D

grid = GridMap2D(origin=(0.0, 0.0), cell_num=(50, 50), resolution=(0.1, 0.1), dtype="uint8")
grid.fill_circle((2.5, 2.5), 0.5)

sdf = SignedDistanceField2D.from_occupancy_map(grid)
sdf.update_sdf()
distance, gradient = sdf.signed_distance((1.0, 1.0))
```

```python
from roadgrid.st_node import StNode, StNodeWeights

StNode.set_reference_speed(10.0)
StNode.set_weights(StNodeWeights(ref_v=3.0, obstacle=10.0))
start = StNode(s=0.0, v=8.0)
child = start.forward(1.0, 2.0)   # s=9.0, v=10.0, t=1.0
```

```python
from roadgrid.lane import Lane, LaneMap
from roadgrid.road_network import LaneConnectionType

lanes = LaneMap([
    Lane(1, [(0.0, 0.0), (10.0, 0.0)], width=3.5),
    Lane(2, [(10.0, 0.0), (20.0, 0.0)], width=3.5),
])
lanes.get_lane(1).add_connected_lane(2, LaneConnectionType.NEXT)

s, l = lanes.get_lane(1).get_projection((5.0, 1.0))   # (5.0, 1.0)
```

## What the package does not do

- It does not build a station–time graph from predicted obstacles, search it
  or fit a speed profile; `StNode` supplies the nodes and costs for such a
  search, but the search itself is up to the caller.
- It does not plan routes or decide lane-change behaviour for a route; the
  `FullRoute` structures hold a route and its behaviours once they are known.
- It does not read map files: lanes are built from centre lines that the
  caller supplies.

## Tests

```
pip install "roadgrid[test]"
pytest
```