import pytest

from easyview.trace_data import FIXED_GAP, Trace, TraceBuilder, TraceSet


def build_sample():
    b = TraceBuilder(0)
    b.set_nb_cores(2)
    b.set_dimensions(1024)
    b.start_iteration(1000)
    b.add_task(1010, 1050, 0, 0, 32, 32, 0, 0)
    b.add_task(1060, 1080, 32, 0, 32, 32, 0, 0)
    b.end_iteration(1100)
    b.start_iteration(5000)
    b.add_task(5010, 5020, 0, 32, 32, 32, 1, 1)
    b.end_iteration(5100)
    return b.finish()


def make_trace(num, durations):
    b = TraceBuilder(num)
    b.set_nb_cores(1)
    t = 0
    for d in durations:
        b.start_iteration(t)
        b.add_task(t, t + d, 0, 0, 1, 1, 0, 0)
        b.end_iteration(t + d)
        t += d + 1000
    return b.finish()


def test_first_iteration_starts_at_zero():
    tr = build_sample()
    assert tr.iteration_start_time(0) == 0
    assert tr.iteration_end_time(0) == 100
    first = next(tr.tasks_from(0, 0))
    assert (tr.task_start_time(first), tr.task_end_time(first)) == (10, 50)


def test_overhead_replaced_by_fixed_gap():
    tr = build_sample()
    assert tr.iteration_start_time(1) - tr.iteration_end_time(0) == FIXED_GAP
    # Durations are preserved
    assert tr.iteration_end_time(1) - tr.iteration_start_time(1) == 100


def test_first_cpu_task_backfilled_from_later_iteration():
    tr = build_sample()
    assert [t.iteration for t in tr.tasks_from(1, 0)] == [1]
    assert list(tr.tasks_from(0, 1)) == []
    assert [t.x for t in tr.tasks_from(0, 0)] == [0, 32]


def test_search_functions():
    tr = build_sample()
    end0 = tr.iteration_end_time(0)
    start1 = tr.iteration_start_time(1)
    between = (end0 + start1) // 2
    assert tr.search_iteration(end0) == 0
    assert tr.search_iteration(between) == -1
    assert tr.search_iteration(start1) == 1
    assert tr.search_next_iteration(between) == 1
    assert tr.search_prev_iteration(between) == 0
    assert tr.search_prev_iteration(start1 + 10**6) == 1
    assert tr.search_next_iteration(start1 + 10**6) == 1
    assert tr.search_prev_iteration(-5) == 0


def test_empty_trace_search():
    tr = Trace(0)
    assert tr.search_iteration(10) == -1
    assert tr.search_next_iteration(10) == 0


def test_task_outside_iteration_rejected():
    b = TraceBuilder(0)
    b.set_nb_cores(1)
    with pytest.raises(ValueError):
        b.add_task(0, 1, 0, 0, 1, 1, 0, 0)


def test_task_on_unknown_cpu_rejected():
    b = TraceBuilder(0)
    b.set_nb_cores(2)
    b.start_iteration(0)
    with pytest.raises(ValueError):
        b.add_task(0, 1, 0, 0, 1, 1, 0, 2)


def test_end_before_start_rejected():
    with pytest.raises(ValueError):
        TraceBuilder(0).end_iteration(10)


def test_builder_cannot_be_reused():
    b = TraceBuilder(0)
    b.finish()
    with pytest.raises(ValueError):
        b.start_iteration(0)


def test_single_trace_sync_enables_align():
    ts = TraceSet([build_sample()])
    ts.sync_iterations()
    assert ts.align_mode is True
    assert ts[0].align is True


def test_sync_equalises_aligned_durations():
    a = make_trace(0, [100, 100, 80])
    b = make_trace(1, [150, 50])
    ts = TraceSet([a, b])
    ts.sync_iterations()
    ts.set_align_mode(True)
    for it in range(2):
        da = a.iteration_end_time(it) - a.iteration_start_time(it)
        db = b.iteration_end_time(it) - b.iteration_start_time(it)
        assert da == db
    # Trailing iterations of the longer trace keep the accumulated correction
    assert a.iterations[2].correction == a.iterations[1].correction + a.iterations[1].gap


def test_align_mode_off_ignores_gaps():
    a = make_trace(0, [100])
    b = make_trace(1, [150])
    ts = TraceSet([a, b])
    ts.sync_iterations()
    ts.set_align_mode(False)
    assert a.iteration_end_time(0) == a.iterations[0].end_time
    assert a.iterations[0].gap == b.iterations[0].end_time - a.iterations[0].end_time


def test_too_many_traces():
    ts = TraceSet([make_trace(0, [10]), make_trace(1, [10])])
    with pytest.raises(ValueError):
        ts.add(make_trace(2, [10]))


def test_sync_without_traces():
    with pytest.raises(ValueError):
        TraceSet().sync_iterations()