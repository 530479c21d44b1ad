"""Recording of trace events to a file, and monitoring hooks around it."""

from __future__ import annotations

import struct
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

MAGIC = b"EZVTRACE"
# code, number of integer parameters, length of the raw payload
EVENT_HEADER = struct.Struct("<HBI")
PARAM = struct.Struct("<q")


class EventCode(IntEnum):
    BEGIN_ITER = 0x100
    END_ITER = 0x101
    NB_CORES = 0x102
    BEGIN_TILE = 0x103
    END_TILE = 0x104
    DIM = 0x105
    LABEL = 0x106


@dataclass(frozen=True)
class Event:
    """One trace event: a code, integer parameters and optional raw bytes."""

    code: int
    params: tuple[int, ...] = ()
    raw: bytes = b""


class TraceRecorder:
    """Writes trace events to a file; usable as a context manager."""

    def __init__(self, path, nb_cores: int, dimensions: int, label: str | None = None) -> None:
        self.path = Path(path)
        self._file = open(self.path, "wb")
        self._file.write(MAGIC)
        self._write(EventCode.NB_CORES, nb_cores)
        self._write(EventCode.DIM, dimensions)
        if label is not None:
            self._write(EventCode.LABEL, raw=label.encode("utf-8"))

    def _write(self, code: EventCode, *params: int, raw: bytes = b"") -> None:
        if self._file.closed:
            raise ValueError("trace recorder is closed")
        self._file.write(EVENT_HEADER.pack(int(code), len(params), len(raw)))
        for value in params:
            self._file.write(PARAM.pack(value))
        self._file.write(raw)

    def start_iteration(self, time: int) -> None:
        self._write(EventCode.BEGIN_ITER, time)

    def end_iteration(self, time: int) -> None:
        self._write(EventCode.END_ITER, time)

    def start_tile(self, time: int, cpu: int) -> None:
        self._write(EventCode.BEGIN_TILE, time, cpu)

    def end_tile(self, time: int, cpu: int, x: int, y: int, w: int, h: int) -> None:
        self._write(EventCode.END_TILE, time, cpu, x, y, w, h)

    @property
    def closed(self) -> bool:
        return self._file.closed

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> TraceRecorder:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _now_us() -> int:
    return time.monotonic_ns() // 1000


class Monitor:
    """Timestamps iterations and tiles and forwards them to a recorder.

    Without a recorder every hook is a no-op and iteration hooks return 0.
    """

    def __init__(self, recorder=None, clock: Callable[[], int] | None = None) -> None:
        self.recorder = recorder
        self.clock = clock if clock is not None else _now_us

    @property
    def enabled(self) -> bool:
        return self.recorder is not None

    def start_iteration(self) -> int:
        if not self.enabled:
            return 0
        t = self.clock()
        self.recorder.start_iteration(t)
        return t

    def end_iteration(self) -> int:
        if not self.enabled:
            return 0
        t = self.clock()
        self.recorder.end_iteration(t)
        return t

    def start_tile(self, cpu: int) -> None:
        if self.enabled:
            self.recorder.start_tile(self.clock(), cpu)

    def end_tile(self, x: int, y: int, w: int, h: int, cpu: int) -> None:
        if self.enabled:
            self.recorder.end_tile(self.clock(), cpu, x, y, w, h)