"""Grids, signed distance fields, station-time search nodes, lanes and route structures."""

__version__ = "0.1.0"