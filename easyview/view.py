"""Navigation state of the trace viewer: visible time window, zoom and mouse."""

from __future__ import annotations

from .layout import LEFT_MARGIN, Layout, Rect
from .trace_data import TraceSet

# Fraction of the visible duration moved by one scroll or zoom step.
SHIFT_FACTOR = 0.02
# Narrowest time window that can be displayed.
MIN_DURATION = 100


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


class ViewState:
    """What part of the traces is visible and how the user interacts with it.

    Every method that changes what should be on screen returns ``True`` when
    a redraw is needed.
    """

    def __init__(self, traces: TraceSet, width: int, height: int) -> None:
        if len(traces) == 0:
            raise ValueError("no trace loaded")
        for trace in traces:
            if trace.nb_iterations == 0:
                raise ValueError(f'trace "{trace.label}" holds no iteration')
        self.traces = traces
        first, last = traces[0], traces[len(traces) - 1]
        self.max_iterations = max(first.nb_iterations, last.nb_iterations)
        self.max_cores = max(first.nb_cores, last.nb_cores)
        self.max_time = self._compute_max_time()
        self.layout = Layout([t.nb_cores for t in traces], width, height)

        self.start_time = 0
        self.end_time = 0
        self.duration = 0
        self.first_displayed = [0] * len(traces)
        self.last_displayed = [0] * len(traces)

        self.quick_nav_mode = False
        self.horiz_mode = False

        self.mouse_x = -1
        self.mouse_y = -1
        self.mouse_in_gantt_zone = False
        self.mouse_selection = Rect()
        self.mouse_orig_x = -1
        self.mouse_is_down = False

    @property
    def nb_traces(self) -> int:
        return len(self.traces)

    @property
    def align_mode(self) -> bool:
        return self.traces.align_mode

    def _compute_max_time(self) -> int:
        first = self.traces[0]
        last = self.traces[len(self.traces) - 1]
        return max(
            first.iteration_end_time(first.nb_iterations - 1),
            last.iteration_end_time(last.nb_iterations - 1),
        )

    def _longest(self) -> int:
        last = self.nb_traces - 1
        if self.traces[0].nb_iterations >= self.traces[last].nb_iterations:
            return 0
        return last

    # Coordinate conversions

    def time_to_pixel(self, time: int) -> int:
        """Horizontal position in the Gantt chart of instant ``time``."""
        if self.duration == 0:
            return LEFT_MARGIN
        gw = self.layout.gantt_width
        return (
            LEFT_MARGIN
            + _trunc_div(time * gw, self.duration)
            - _trunc_div(self.start_time * gw, self.duration)
        )

    def pixel_to_time(self, x: int) -> int:
        """Instant displayed at horizontal position ``x`` of the Gantt chart."""
        return self.start_time + _trunc_div((x - LEFT_MARGIN) * self.duration, self.layout.gantt_width)

    # Bounds management

    def set_bounds(self, start: int, end: int) -> None:
        """Show the time window [start, end] and update displayed iterations."""
        self.start_time = start
        self.end_time = end
        self.duration = end - start
        for num, trace in enumerate(self.traces):
            self.first_displayed[num] = trace.search_next_iteration(start) + 1
            self.last_displayed[num] = trace.search_prev_iteration(end) + 1

    def _update_bounds(self) -> None:
        last = self.nb_traces - 1
        t0, tl = self.traces[0], self.traces[last]
        f0, fl = self.first_displayed[0] - 1, self.first_displayed[last] - 1
        l0, ll = self.last_displayed[0] - 1, self.last_displayed[last] - 1

        if self.first_displayed[0] > t0.nb_iterations:
            start = tl.iteration_start_time(fl)
        elif self.first_displayed[last] > tl.nb_iterations:
            start = t0.iteration_start_time(f0)
        else:
            start = min(t0.iteration_start_time(f0), tl.iteration_start_time(fl))

        if self.last_displayed[0] > t0.nb_iterations:
            end = tl.iteration_end_time(ll)
        elif self.last_displayed[last] > tl.nb_iterations:
            end = t0.iteration_end_time(l0)
        else:
            end = max(t0.iteration_end_time(l0), tl.iteration_end_time(ll))

        self.set_bounds(start, end)

    def set_widest_iteration_range(self, first: int, last: int) -> None:
        """Display iterations ``first`` to ``last`` (1-based) of every trace."""
        other = self.nb_traces - 1
        self.first_displayed[0] = self.first_displayed[other] = first
        self.last_displayed[0] = self.last_displayed[other] = last
        self._update_bounds()

    def set_iteration_range(self, trace_num: int) -> None:
        """Fit the window to the iteration range displayed for ``trace_num``."""
        if self.nb_traces > 1:
            other = 1 - trace_num
            self.first_displayed[other] = self.first_displayed[trace_num]
            self.last_displayed[other] = self.last_displayed[trace_num]
        trace = self.traces[trace_num]
        self.start_time = trace.iteration_start_time(self.first_displayed[trace_num] - 1)
        self.end_time = trace.iteration_end_time(self.last_displayed[trace_num] - 1)
        self.duration = self.end_time - self.start_time

    # Navigation

    def scroll(self, delta: int) -> bool:
        """Move the window by ``delta`` steps; positive moves toward later times."""
        start = int(self.start_time + self.duration * SHIFT_FACTOR * delta)
        end = start + self.duration

        if start < 0:
            start = 0
            end = self.duration
        if end > self.max_time:
            end = self.max_time
            start = end - self.duration

        if start != self.start_time or end != self.end_time:
            self.set_bounds(start, end)
            self.quick_nav_mode = False
            return True
        return False

    def shift_left(self) -> bool:
        """Move toward later iterations (content slides left)."""
        if not self.quick_nav_mode:
            return self.scroll(1)
        longest = self._longest()
        if self.last_displayed[longest] < self.max_iterations:
            self.first_displayed[longest] += 1
            self.last_displayed[longest] += 1
            self.set_iteration_range(longest)
            return True
        return False

    def shift_right(self) -> bool:
        """Move toward earlier iterations (content slides right)."""
        if not self.quick_nav_mode:
            return self.scroll(-1)
        longest = self._longest()
        if self.first_displayed[longest] > 1:
            self.first_displayed[longest] -= 1
            self.last_displayed[longest] -= 1
            self.set_iteration_range(longest)
            return True
        return False

    def zoom_in(self) -> bool:
        if self.quick_nav_mode and self.last_displayed[0] > self.first_displayed[0]:
            longest = self._longest()
            self.last_displayed[longest] -= 1
            self.set_iteration_range(longest)
            return True
        if self.end_time > self.start_time + MIN_DURATION:
            start = int(self.start_time + self.duration * SHIFT_FACTOR)
            end = int(self.end_time - self.duration * SHIFT_FACTOR)
            if end < start + MIN_DURATION:
                end = start + MIN_DURATION
            self.set_bounds(start, end)
            self.quick_nav_mode = False
            return True
        return False

    def zoom_out(self) -> bool:
        if self.quick_nav_mode:
            longest = self._longest()
            if self.last_displayed[longest] < self.max_iterations:
                self.last_displayed[longest] += 1
            elif self.first_displayed[longest] > 1:
                self.first_displayed[longest] -= 1
            else:
                return False
            self.set_iteration_range(longest)
            return True

        start = int(self.start_time - self.duration * SHIFT_FACTOR)
        end = int(self.end_time + self.duration * SHIFT_FACTOR)
        start = max(start, 0)
        end = min(end, self.max_time)
        if start != self.start_time or end != self.end_time:
            self.set_bounds(start, end)
            self.quick_nav_mode = False
            return True
        return False

    # Mouse

    def mouse_moved(self, x: int, y: int) -> bool:
        self.mouse_x = x
        self.mouse_y = y
        box = self.layout.bounding_box
        gantt = self.layout.gantt[0]

        if box.contains(x, y):
            self.mouse_in_gantt_zone = True
        else:
            self.mouse_in_gantt_zone = False
            if self.mouse_is_down:
                if not box.contains_y(y):
                    self.mouse_is_down = False
                elif x < gantt.x:
                    x = gantt.x
                elif x > gantt.x + gantt.w - 1:
                    x = gantt.x + gantt.w - 1

        if self.mouse_is_down:
            self.mouse_selection.x = min(self.mouse_orig_x, x)
            self.mouse_selection.w = max(self.mouse_orig_x, x) - self.mouse_selection.x + 1
        return True

    def mouse_down(self, x: int, y: int) -> bool:
        """Start a click-and-drag selection if (x, y) lies in the Gantt charts."""
        if not self.layout.bounding_box.contains(x, y):
            return False
        self.mouse_orig_x = x
        self.mouse_selection = Rect(x, self.layout.gantt[0].y, 0, self.layout.gantt_height)
        self.mouse_is_down = True
        return False

    def mouse_up(self, x: int, y: int) -> bool:
        """End a selection and zoom onto the selected time range."""
        if not self.mouse_is_down:
            return False
        self.mouse_is_down = False
        if self.mouse_selection.w <= 0:
            return False
        start = self.pixel_to_time(self.mouse_selection.x)
        end = self.pixel_to_time(self.mouse_selection.x + self.mouse_selection.w)
        if end < start + MIN_DURATION:
            end = start + MIN_DURATION
        self.set_bounds(start, end)
        self.quick_nav_mode = False
        return True

    # Whole-view commands

    def setview(self, first: int, last: int) -> bool:
        """Display iterations ``first`` to ``last``, clamped to valid values."""
        if last < 1:
            last = 1
        elif last > self.max_iterations:
            last = self.max_iterations
        if first < 1:
            first = 1
        elif first > last:
            first = last
        self.quick_nav_mode = self.align_mode
        self.set_widest_iteration_range(first, last)
        return True

    def reset_zoom(self) -> bool:
        if not self.align_mode:
            return False
        if self.quick_nav_mode:
            self.quick_nav_mode = False
            return True
        other = self.nb_traces - 1
        if self.first_displayed[0] > self.last_displayed[other]:
            first = self.first_displayed[0]
        elif self.first_displayed[other] > self.last_displayed[0]:
            first = self.first_displayed[other]
        else:
            first = min(self.first_displayed[0], self.first_displayed[other])
        last = max(self.last_displayed[0], self.last_displayed[other])
        self.set_widest_iteration_range(first, last)
        self.quick_nav_mode = True
        return True

    def display_all(self) -> bool:
        self.set_widest_iteration_range(1, self.max_iterations)
        self.quick_nav_mode = self.align_mode
        return True

    def toggle_align_mode(self) -> bool:
        if self.nb_traces == 1:
            return False
        self.traces.set_align_mode(not self.align_mode)
        self.max_time = self._compute_max_time()
        if self.end_time > self.max_time:
            self.end_time = self.max_time
            self.duration = self.end_time - self.start_time
        self.set_bounds(self.start_time, self.end_time)
        self.quick_nav_mode = False
        return True

    def toggle_vh_mode(self) -> bool:
        self.horiz_mode = not self.horiz_mode
        return True

    def relayout(self, width: int, height: int) -> bool:
        self.layout.recompute(width, height)
        return True