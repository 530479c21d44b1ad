"""In-memory representation of execution traces and their construction."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Iterator
from dataclasses import dataclass, field
from itertools import islice

MAX_TRACES = 2

# Idle time kept between two consecutive iterations once overhead is removed.
FIXED_GAP = 200


@dataclass
class Task:
    """One tile computed by one CPU."""

    start_time: int
    end_time: int
    x: int
    y: int
    w: int
    h: int
    iteration: int
    cpu: int


@dataclass
class Iteration:
    """Time bounds of one iteration and where its tasks start on each CPU."""

    start_time: int
    end_time: int = 0
    correction: int = 0
    gap: int = 0
    first_cpu_task: list[int | None] = field(default_factory=list)


@dataclass
class Trace:
    """A fully loaded trace: tasks per CPU and the list of iterations."""

    num: int
    nb_cores: int = 1
    dimensions: int = 0
    label: str | None = None
    per_cpu: list[list[Task]] = field(default_factory=lambda: [[]])
    iterations: list[Iteration] = field(default_factory=list)
    align: bool = False

    @property
    def nb_iterations(self) -> int:
        return len(self.iterations)

    def iteration_start_time(self, it: int) -> int:
        """Start of iteration ``it``, shifted by its correction in align mode."""
        iteration = self.iterations[it]
        if self.align:
            return iteration.start_time + iteration.correction
        return iteration.start_time

    def iteration_end_time(self, it: int) -> int:
        """End of iteration ``it``; in align mode it includes correction and gap."""
        iteration = self.iterations[it]
        if self.align:
            return iteration.end_time + iteration.correction + iteration.gap
        return iteration.end_time

    def _task_correction(self, task: Task) -> int:
        if self.align and 0 <= task.iteration < len(self.iterations):
            return self.iterations[task.iteration].correction
        return 0

    def task_start_time(self, task: Task) -> int:
        return task.start_time + self._task_correction(task)

    def task_end_time(self, task: Task) -> int:
        return task.end_time + self._task_correction(task)

    def tasks_from(self, cpu: int, iteration: int) -> Iterator[Task]:
        """Yield the tasks of ``cpu`` starting at the first one of ``iteration``."""
        first = self.iterations[iteration].first_cpu_task[cpu]
        if first is not None:
            yield from islice(self.per_cpu[cpu], first, None)

    def search_iteration(self, t: int) -> int:
        """Index of the iteration containing time ``t``, or -1."""
        if not self.iterations:
            return -1
        it = self.search_next_iteration(t)
        if self.iteration_start_time(it) <= t <= self.iteration_end_time(it):
            return it
        return -1

    def search_next_iteration(self, t: int) -> int:
        """First iteration ending at or after ``t`` (the last one if none)."""
        n = len(self.iterations)
        if n == 0:
            return 0
        index = bisect_left(range(n), t, key=self.iteration_end_time)
        return min(index, n - 1)

    def search_prev_iteration(self, t: int) -> int:
        """Last iteration starting at or before ``t`` (the first one if none)."""
        n = len(self.iterations)
        if n == 0:
            return 0
        index = bisect_right(range(n), t, key=self.iteration_start_time) - 1
        return min(max(index, 0), n - 1)


class TraceBuilder:
    """Accumulates trace events and produces a :class:`Trace`.

    Time spent between iterations is removed so that consecutive iterations
    are always separated by :data:`FIXED_GAP`.
    """

    def __init__(self, num: int) -> None:
        self._trace = Trace(num)
        self._overhead = 0
        self._end_last_iteration = 0
        self._fixed_gap = 0
        self._current: Iteration | None = None
        self._finished = False

    def _shift(self, t: int) -> int:
        return t - self._overhead

    def _check_open(self) -> None:
        if self._finished:
            raise ValueError("trace already finished")

    def set_nb_cores(self, nb_cores: int) -> None:
        self._check_open()
        if nb_cores < 1:
            raise ValueError(f"invalid number of cores: {nb_cores}")
        self._trace.nb_cores = nb_cores
        self._trace.per_cpu = [[] for _ in range(nb_cores)]

    def set_dimensions(self, dim: int) -> None:
        self._check_open()
        self._trace.dimensions = dim

    def set_label(self, label: str) -> None:
        self._check_open()
        self._trace.label = label

    @property
    def label(self) -> str | None:
        return self._trace.label

    @property
    def nb_iterations(self) -> int:
        return len(self._trace.iterations)

    def start_iteration(self, start_time: int) -> None:
        self._check_open()
        # Everything between the end of the previous iteration (plus the
        # fixed gap) and this start is overhead and gets discarded.
        self._overhead = start_time - self._end_last_iteration - self._fixed_gap
        self._current = Iteration(
            start_time=self._shift(start_time),
            first_cpu_task=[None] * self._trace.nb_cores,
        )
        self._trace.iterations.append(self._current)

    def end_iteration(self, end_time: int) -> None:
        self._check_open()
        if self._current is None:
            raise ValueError("iteration ended before any was started")
        self._current.end_time = self._shift(end_time)
        self._end_last_iteration = self._current.end_time
        if len(self._trace.iterations) == 1:
            self._fixed_gap = FIXED_GAP

    def add_task(
        self,
        start_time: int,
        end_time: int,
        x: int,
        y: int,
        w: int,
        h: int,
        iteration: int,
        cpu: int,
    ) -> None:
        self._check_open()
        if self._current is None:
            raise ValueError("task recorded outside of any iteration")
        if not 0 <= cpu < self._trace.nb_cores:
            raise ValueError(f"cpu {cpu} out of range (0..{self._trace.nb_cores - 1})")
        tasks = self._trace.per_cpu[cpu]
        if self._current.first_cpu_task[cpu] is None:
            self._current.first_cpu_task[cpu] = len(tasks)
        tasks.append(
            Task(
                start_time=self._shift(start_time),
                end_time=self._shift(end_time),
                x=x,
                y=y,
                w=w,
                h=h,
                iteration=iteration,
                cpu=cpu,
            )
        )

    def finish(self) -> Trace:
        """Complete the trace and return it.

        Afterwards, ``first_cpu_task`` of an iteration without tasks on a CPU
        points to the first task of a later iteration on that CPU.
        """
        self._check_open()
        self._finished = True
        iterations = self._trace.iterations
        for current, following in zip(reversed(iterations[:-1]), reversed(iterations[1:])):
            current.first_cpu_task = [
                mine if mine is not None else theirs
                for mine, theirs in zip(current.first_cpu_task, following.first_cpu_task)
            ]
        return self._trace


class TraceSet:
    """The (at most two) traces displayed together."""

    def __init__(self, traces=(), align_mode: bool = False) -> None:
        self.traces: list[Trace] = []
        self.align_mode = bool(align_mode)
        for trace in traces:
            self.add(trace)

    def __len__(self) -> int:
        return len(self.traces)

    def __iter__(self) -> Iterator[Trace]:
        return iter(self.traces)

    def __getitem__(self, index: int) -> Trace:
        return self.traces[index]

    def add(self, trace: Trace) -> None:
        if len(self.traces) >= MAX_TRACES:
            raise ValueError(f"Too many trace files specified (max {MAX_TRACES})")
        trace.align = self.align_mode
        self.traces.append(trace)

    def set_align_mode(self, enabled: bool) -> None:
        self.align_mode = bool(enabled)
        for trace in self.traces:
            trace.align = self.align_mode

    def sync_iterations(self) -> None:
        """Compute per-iteration gaps so that both traces line up iteration by iteration."""
        if not self.traces:
            raise ValueError("no trace loaded")
        if len(self.traces) == 1:
            self.set_align_mode(True)
            return

        first, second = self.traces
        correction = [0, 0]
        for it0, it1 in zip(first.iterations, second.iterations):
            it0.correction, it1.correction = correction
            d0 = it0.end_time - it0.start_time
            d1 = it1.end_time - it1.start_time
            if d0 < d1:
                it0.gap = d1 - d0
                correction[0] += it0.gap
            else:
                it1.gap = d0 - d1
                correction[1] += it1.gap

        min_it = min(first.nb_iterations, second.nb_iterations)
        remaining = 0 if first.nb_iterations > second.nb_iterations else 1
        for iteration in self.traces[remaining].iterations[min_it:]:
            iteration.correction = correction[remaining]