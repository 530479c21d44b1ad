"""Recording of tiled parallel execution traces and an interactive Gantt-chart viewer for them."""

__version__ = "0.1.0"