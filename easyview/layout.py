"""Geometry of the trace viewer window: Gantt charts, tile mosaics and margins."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .trace_data import MAX_TRACES, Task

WINDOW_MIN_WIDTH = 1024

MIN_TASK_HEIGHT = 8
MAX_TASK_HEIGHT = 44

MAX_PREVIEW_DIM = 512
MIN_PREVIEW_DIM = 256

Y_MARGIN = 5
LEFT_MARGIN = 64
TOP_MARGIN = 48
FONT_HEIGHT = 20
BOTTOM_MARGIN = FONT_HEIGHT + 4
INTERTRACE_MARGIN = 2 * FONT_HEIGHT + 2


class LayoutError(ValueError):
    """Raised when the window cannot hold the requested traces."""


@dataclass
class Rect:
    """An axis-aligned rectangle; ``x + w`` and ``y + h`` are excluded."""

    x: int = 0
    y: int = 0
    w: int = 0
    h: int = 0

    def contains_x(self, x: int) -> bool:
        return self.x <= x < self.x + self.w

    def contains_y(self, y: int) -> bool:
        return self.y <= y < self.y + self.h

    def contains(self, x: int, y: int) -> bool:
        return self.contains_x(x) and self.contains_y(y)


def _row_height(task_height: int) -> int:
    return task_height + 2 * Y_MARGIN + 2


def _check_core_counts(core_counts: Sequence[int]) -> tuple[int, ...]:
    counts = tuple(core_counts)
    if not 1 <= len(counts) <= MAX_TRACES:
        raise LayoutError(f"expected 1 to {MAX_TRACES} traces, got {len(counts)}")
    if any(c < 1 for c in counts):
        raise LayoutError(f"invalid core counts: {counts}")
    return counts


def min_width() -> int:
    """Smallest window width the viewer accepts."""
    return WINDOW_MIN_WIDTH


def min_height(core_counts: Sequence[int]) -> int:
    """Smallest window height able to show traces with these core counts."""
    counts = _check_core_counts(core_counts)
    min_row = _row_height(MIN_TASK_HEIGHT)
    if len(counts) == 1:
        need_right = TOP_MARGIN + MIN_PREVIEW_DIM + BOTTOM_MARGIN
        gantt_h = counts[0] * min_row
    else:
        need_right = TOP_MARGIN + 2 * MIN_PREVIEW_DIM + INTERTRACE_MARGIN + BOTTOM_MARGIN
        gantt_h = sum(counts) * min_row + INTERTRACE_MARGIN
    need_left = TOP_MARGIN + gantt_h + BOTTOM_MARGIN
    return max(need_left, need_right)


class Layout:
    """Positions of every area of the window for one or two traces.

    The constructor enlarges the requested size up to the minimum size;
    :meth:`recompute` uses the size it is given as is.
    """

    def __init__(self, core_counts: Sequence[int], width: int, height: int) -> None:
        self.core_counts = _check_core_counts(core_counts)
        self.width = 0
        self.height = 0
        self.task_height = MAX_TASK_HEIGHT
        self.preview_dim = MIN_PREVIEW_DIM
        self.gantt_height = 0
        self.gantt: list[Rect] = []
        self.mosaic: list[Rect] = []
        self.bounding_box = Rect()
        self.recompute(max(width, min_width()), max(height, min_height(self.core_counts)))

    @property
    def nb_traces(self) -> int:
        return len(self.core_counts)

    @property
    def cpu_row_height(self) -> int:
        return _row_height(self.task_height)

    @property
    def gantt_width(self) -> int:
        return self.width - (LEFT_MARGIN + self.preview_dim + TOP_MARGIN)

    def _task_height_for(self, space: int, nb_rows: int) -> int:
        task_height = space // nb_rows - 2 * Y_MARGIN - 2
        if task_height < MIN_TASK_HEIGHT:
            raise LayoutError(
                f"Window height ({self.height}) is not big enough to display "
                f"so many CPUS ({self.core_counts[0]})"
            )
        return min(task_height, MAX_TASK_HEIGHT)

    def recompute(self, width: int, height: int) -> None:
        """Lay the window out again for a ``width`` x ``height`` size."""
        self.width = width
        self.height = height
        mosaic_x_offset = LEFT_MARGIN + TOP_MARGIN // 2

        if self.nb_traces == 1:
            (cores,) = self.core_counts
            available = height - TOP_MARGIN - BOTTOM_MARGIN
            self.preview_dim = min(
                MAX_PREVIEW_DIM, max(MIN_PREVIEW_DIM, min(width // 4, available))
            )
            self.task_height = self._task_height_for(available, cores)
            self.gantt_height = cores * self.cpu_row_height
            gw = self.gantt_width
            self.gantt = [Rect(LEFT_MARGIN, TOP_MARGIN, gw, self.gantt_height)]
            self.mosaic = [
                Rect(mosaic_x_offset + gw, TOP_MARGIN, self.preview_dim, self.preview_dim)
            ]
        else:
            first, second = self.core_counts
            available = height - TOP_MARGIN - BOTTOM_MARGIN - INTERTRACE_MARGIN
            self.preview_dim = min(
                MAX_PREVIEW_DIM, max(MIN_PREVIEW_DIM, min(width // 4, available // 2))
            )
            self.task_height = self._task_height_for(available, first + second)
            row = self.cpu_row_height
            self.gantt_height = (first + second) * row + INTERTRACE_MARGIN
            need_left = TOP_MARGIN + self.gantt_height + BOTTOM_MARGIN
            padding = height - need_left if height > need_left else 0

            gw = self.gantt_width
            pd = self.preview_dim
            top = Rect(LEFT_MARGIN, TOP_MARGIN + padding // 2, gw, first * row)
            bottom = Rect(
                LEFT_MARGIN,
                TOP_MARGIN + INTERTRACE_MARGIN + top.h + padding // 2,
                gw,
                second * row,
            )
            self.gantt = [top, bottom]
            self.mosaic = [
                Rect(mosaic_x_offset + gw, TOP_MARGIN, pd, pd),
                Rect(mosaic_x_offset + gw, height - BOTTOM_MARGIN - pd, pd, pd),
            ]

        top, last = self.gantt[0], self.gantt[-1]
        self.bounding_box = Rect(top.x, top.y, top.w, (last.y + last.h - 1) - top.y)

    def sibling_y(self, x: int, y: int) -> int:
        """Row in the other Gantt chart matching ``y`` in this one, else ``y``."""
        for num, rect in enumerate(self.gantt):
            if rect.contains(x, y):
                if self.nb_traces < 2:
                    return y
                other = self.gantt[1 - num]
                dy = y - rect.y
                return other.y + dy if dy < other.h else y
        return y

    def tile_rect(self, trace_num: int, task: Task, dimensions: int) -> Rect:
        """Where the tile computed by ``task`` lies in the mosaic of a trace."""
        if dimensions <= 0:
            raise LayoutError(f"invalid image dimensions: {dimensions}")
        mosaic = self.mosaic[trace_num]
        x = task.x * mosaic.w // dimensions + mosaic.x
        y = task.y * mosaic.h // dimensions + mosaic.y
        w = (task.x + task.w) * mosaic.w // dimensions + mosaic.x - x
        h = (task.y + task.h) * mosaic.h // dimensions + mosaic.y - y
        return Rect(x, y, w or 1, h or 1)