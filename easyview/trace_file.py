"""Reading trace files into :class:`~easyview.trace_data.Trace` objects."""

from __future__ import annotations

import os
import struct
import warnings
from collections.abc import Iterator

from .record import EVENT_HEADER, MAGIC, PARAM, Event, EventCode
from .trace_data import Trace, TraceBuilder


class TraceFileError(Exception):
    """Raised when a trace file cannot be opened or makes no sense."""


def _decode(data: bytes, path) -> Iterator[Event]:
    if not data.startswith(MAGIC):
        raise TraceFileError(f'"{path}" is not a trace file')
    offset = len(MAGIC)
    while offset < len(data):
        if offset + EVENT_HEADER.size > len(data):
            warnings.warn(f'Trace "{path}" stops on a truncated event header')
            return
        code, nparams, rawlen = EVENT_HEADER.unpack_from(data, offset)
        offset += EVENT_HEADER.size
        end = offset + nparams * PARAM.size + rawlen
        if end > len(data):
            warnings.warn(f'Trace "{path}" stops on truncated event {code:#x}')
            return
        params = struct.unpack_from(f"<{nparams}q", data, offset)
        raw = data[offset + nparams * PARAM.size : end]
        offset = end
        try:
            code = EventCode(code)
        except ValueError:
            pass
        yield Event(code, params, raw)


def read_events(path) -> list[Event]:
    """Return every event stored in the trace file at ``path``."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise TraceFileError(f'Cannot open "{path}" trace file ({exc.strerror})') from exc
    return list(_decode(data, path))


def _default_label(path) -> str:
    name = os.path.basename(os.fspath(path))
    dot = name.rfind(".")
    return name[:dot] if dot != -1 else name


def _params(event: Event, count: int, path) -> tuple[int, ...]:
    if len(event.params) < count:
        raise TraceFileError(
            f'"{path}": event {event.code!r} has {len(event.params)} parameters, expected {count}'
        )
    return event.params


def load_trace(path, num: int) -> Trace:
    """Load the trace file at ``path`` as trace number ``num``."""
    builder = TraceBuilder(num)
    last_start_times: list[int] | None = None
    current_iteration = 0

    try:
        for event in read_events(path):
            code = event.code
            if code == EventCode.BEGIN_ITER:
                builder.start_iteration(_params(event, 1, path)[0])
            elif code == EventCode.END_ITER:
                builder.end_iteration(_params(event, 1, path)[0])
                current_iteration += 1
            elif code == EventCode.NB_CORES:
                nb_cores = _params(event, 1, path)[0]
                builder.set_nb_cores(nb_cores)
                last_start_times = [0] * nb_cores
            elif code in (EventCode.BEGIN_TILE, EventCode.END_TILE):
                if last_start_times is None:
                    raise TraceFileError(f'"{path}": tile event before core count')
                needed = 2 if code == EventCode.BEGIN_TILE else 6
                time, cpu, *tile = _params(event, needed, path)[:needed]
                if not 0 <= cpu < len(last_start_times):
                    raise TraceFileError(f'"{path}": tile event on unknown cpu {cpu}')
                if code == EventCode.BEGIN_TILE:
                    last_start_times[cpu] = time
                else:
                    x, y, w, h = tile
                    builder.add_task(
                        last_start_times[cpu], time, x, y, w, h, current_iteration, cpu
                    )
            elif code == EventCode.DIM:
                builder.set_dimensions(_params(event, 1, path)[0])
            elif code == EventCode.LABEL:
                builder.set_label(event.raw.decode("utf-8", errors="replace"))
    except ValueError as exc:
        raise TraceFileError(f'"{path}": {exc}') from exc

    if builder.label is None:
        builder.set_label(_default_label(path))

    return builder.finish()