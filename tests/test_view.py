import pytest

from easyview.layout import LEFT_MARGIN
from easyview.trace_data import TraceBuilder, TraceSet
from easyview.view import MIN_DURATION, ViewState


def _build(num, bounds, nb_cores=2):
    builder = TraceBuilder(num)
    builder.set_nb_cores(nb_cores)
    builder.set_dimensions(64)
    for it, (start, end) in enumerate(bounds):
        builder.start_iteration(start)
        for cpu in range(nb_cores):
            builder.add_task(start, end, cpu * 32, 0, 32, 32, it, cpu)
        builder.end_iteration(end)
    return builder.finish()


BOUNDS = [(0, 1000), (1200, 2200), (2400, 3400)]


def _single_view():
    traces = TraceSet([_build(0, BOUNDS)])
    traces.sync_iterations()
    return ViewState(traces, 1920, 1024)


def _double_view():
    a = _build(0, [(0, 1000), (1200, 2200)])
    b = _build(1, [(0, 500), (700, 2200)])
    traces = TraceSet([a, b])
    traces.sync_iterations()
    return ViewState(traces, 1920, 1024)


def test_empty_trace_rejected():
    builder = TraceBuilder(0)
    builder.set_nb_cores(1)
    with pytest.raises(ValueError):
        ViewState(TraceSet([builder.finish()]), 1920, 1024)


def test_display_all_covers_every_iteration():
    view = _single_view()
    trace = view.traces[0]
    assert view.display_all() is True
    assert view.start_time == trace.iteration_start_time(0)
    assert view.end_time == trace.iteration_end_time(trace.nb_iterations - 1)
    assert view.duration == view.end_time - view.start_time
    assert view.first_displayed == [1]
    assert view.last_displayed == [trace.nb_iterations]
    assert view.quick_nav_mode is True


def test_pixel_time_conversions():
    view = _single_view()
    view.display_all()
    assert view.time_to_pixel(view.start_time) == LEFT_MARGIN
    assert view.pixel_to_time(LEFT_MARGIN) == view.start_time
    assert view.time_to_pixel(view.end_time) == LEFT_MARGIN + view.layout.gantt_width
    assert view.pixel_to_time(LEFT_MARGIN + view.layout.gantt_width) == view.end_time


def test_setview_clamps_range():
    view = _single_view()
    view.setview(0, 99)
    assert (view.first_displayed[0], view.last_displayed[0]) == (1, view.max_iterations)
    view.setview(3, 2)
    assert (view.first_displayed[0], view.last_displayed[0]) == (2, 2)
    assert view.start_time == view.traces[0].iteration_start_time(1)
    assert view.end_time == view.traces[0].iteration_end_time(1)


def test_quick_nav_shift():
    view = _single_view()
    view.setview(1, 1)
    assert view.shift_right() is False
    assert view.shift_left() is True
    assert (view.first_displayed[0], view.last_displayed[0]) == (2, 2)
    assert view.start_time == view.traces[0].iteration_start_time(1)
    assert view.shift_right() is True
    assert view.first_displayed[0] == 1


def test_quick_nav_shift_left_stops_at_last_iteration():
    view = _single_view()
    view.display_all()
    assert view.shift_left() is False
    assert view.last_displayed[0] == view.max_iterations


def test_quick_nav_zoom_in_and_out():
    view = _single_view()
    view.display_all()
    assert view.zoom_in() is True
    assert view.last_displayed[0] == view.max_iterations - 1
    assert view.zoom_out() is True
    assert view.last_displayed[0] == view.max_iterations
    assert view.zoom_out() is False


def test_reset_zoom_toggles_quick_nav():
    view = _single_view()
    view.display_all()
    assert view.reset_zoom() is True
    assert view.quick_nav_mode is False
    assert view.reset_zoom() is True
    assert view.quick_nav_mode is True


def test_time_zoom_in_narrows_window():
    view = _single_view()
    view.display_all()
    view.reset_zoom()
    before = (view.start_time, view.end_time)
    assert view.zoom_in() is True
    assert view.start_time > before[0]
    assert view.end_time < before[1]
    assert view.duration == view.end_time - view.start_time
    assert view.duration >= MIN_DURATION


def test_time_zoom_out_at_full_view_is_noop():
    view = _single_view()
    view.display_all()
    view.reset_zoom()
    assert view.zoom_out() is False
    assert view.start_time == 0
    assert view.end_time == view.max_time


def test_scroll_keeps_duration_and_bounds():
    view = _single_view()
    view.display_all()
    view.reset_zoom()
    view.zoom_in()
    duration = view.duration
    assert view.scroll(-1) is True
    assert view.duration == duration
    start = view.start_time
    assert view.scroll(1) is True
    assert view.start_time > start
    assert view.duration == duration
    for _ in range(200):
        view.scroll(1)
    assert view.end_time == view.max_time
    assert view.scroll(1) is False


def test_mouse_selection_zooms_on_range():
    view = _single_view()
    view.display_all()
    y = view.layout.gantt[0].y + 5
    view.mouse_down(100, y)
    assert view.mouse_is_down is True
    assert view.mouse_moved(300, y) is True
    assert view.mouse_in_gantt_zone is True
    assert view.mouse_selection.x == 100
    assert view.mouse_selection.w == 201
    expected = (view.pixel_to_time(100), view.pixel_to_time(301))
    assert view.mouse_up(300, y) is True
    assert view.mouse_is_down is False
    assert view.start_time == expected[0]
    assert view.end_time == max(expected[1], expected[0] + MIN_DURATION)
    assert view.quick_nav_mode is False


def test_mouse_down_outside_gantt_does_nothing():
    view = _single_view()
    view.display_all()
    view.mouse_down(0, 0)
    assert view.mouse_is_down is False
    before = (view.start_time, view.end_time)
    assert view.mouse_up(0, 0) is False
    assert (view.start_time, view.end_time) == before


def test_toggle_vh_mode():
    view = _single_view()
    assert view.horiz_mode is False
    view.toggle_vh_mode()
    assert view.horiz_mode is True
    view.toggle_vh_mode()
    assert view.horiz_mode is False


def test_toggle_align_mode_single_trace_ignored():
    view = _single_view()
    view.display_all()
    assert view.toggle_align_mode() is False
    assert view.align_mode is True


def test_toggle_align_mode_two_traces():
    view = _double_view()
    assert view.align_mode is False
    view.display_all()
    assert view.toggle_align_mode() is True
    assert view.align_mode is True
    a, b = view.traces
    assert a.iteration_end_time(1) == b.iteration_end_time(1)
    assert view.max_time == a.iteration_end_time(1)
    assert view.quick_nav_mode is False
    assert view.end_time <= view.max_time


def test_two_traces_quick_nav_keeps_ranges_in_step():
    view = _double_view()
    view.traces.set_align_mode(True)
    view.setview(1, 1)
    assert view.shift_left() is True
    assert view.first_displayed == [2, 2]
    assert view.last_displayed == [2, 2]


def test_relayout_updates_geometry():
    view = _single_view()
    view.relayout(1600, 900)
    assert view.layout.width == 1600
    assert view.layout.height == 900
    view.display_all()
    assert view.time_to_pixel(view.end_time) == LEFT_MARGIN + view.layout.gantt_width