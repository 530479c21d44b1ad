# easyview

`easyview` records execution traces of tiled parallel computations and shows
them in an interactive pygame viewer. Each CPU gets one row of a Gantt chart.
Next to the chart, a mosaic shows which tile of the image each task worked on.
You can load two traces at once to compare two runs iteration by iteration,
for example two scheduling policies or two tile sizes.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Recording a trace

`easyview.record.TraceRecorder(path, nb_cores, dimensions, label=None)` writes
a trace file. The constructor writes the number of CPUs, the image dimension
and the optional label. After that, use these methods:

- `start_iteration(time)` and `end_iteration(time)`;
- `start_tile(time, cpu)` and `end_tile(time, cpu, x, y, w, h)`;
- `close()`.

A recorder is also a context manager, which closes the file on exit.

`easyview.record.Monitor(recorder=None, clock=None)` takes the timestamps for
you. By default they come from a monotonic clock, in microseconds. Call these
hooks around your work:

- `start_iteration()` and `end_iteration()` around each iteration; both return
  the timestamp they took;
- `start_tile(cpu)` and `end_tile(x, y, w, h, cpu)` around each tile.

Without a recorder, every hook does nothing, and the iteration hooks return 0.

```python
from easyview.record import Monitor, TraceRecorder

with TraceRecorder("run.evt", nb_cores=4, dimensions=1024, label="run") as rec:
    mon = Monitor(rec)
    mon.start_iteration()
    mon.start_tile(0)
    ...  # compute a 32x32 tile on CPU 0
    mon.end_tile(0, 0, 32, 32, 0)
    mon.end_iteration()
```

## Viewing traces

```
easyview [options] [file ...]
```

- With no file, the viewer opens `ezv_trace_current.evt` in the trace
  directory. The trace directory is `traces/data` unless you set it with `-d`.
- With one file, it shows that trace.
- With two files, it shows both, the first on top and the second below.
- More than two files is an error.

Options must come before the file names.

| option | meaning |
| --- | --- |
| `-d`, `--dir <dir>` | trace directory; it also holds the `thumb_NNNN.png` thumbnails |
| `-h`, `--help` | show help |
| `-nt`, `--no-thumbs` | do not load thumbnails |
| `-i`, `--iteration <i>` | show iteration *i* |
| `-r`, `--range <i> <j>` | show iterations *i* to *j* |
| `-w`, `--whole-trace` | show all iterations |
| `-a`, `--align` | align the iterations of the two traces |

When the viewer loads a trace, it removes the idle time between iterations, so
that consecutive iterations are 200 time units apart.

In align mode, each iteration of the faster run is padded so that its length
matches the slower run. The padding is drawn in green, so the iterations line
up. A single trace is always shown in align mode.

The command exits with status 1 in these cases:

- the command line is malformed;
- a trace file cannot be read;
- the window is too small for the number of CPUs.

### Controls

| key / action | effect |
| --- | --- |
| Right / Left arrow | move forward / backward in time (one iteration at a time in quick-navigation mode) |
| `+`, `p` / `-`, `m` | zoom in / zoom out (by iterations in quick-navigation mode) |
| Space | switch quick-navigation mode on or off (align mode only) |
| `w` | show the whole trace |
| `a` | switch align mode on or off (two traces only) |
| `x` | switch between the vertical and the horizontal cursor |
| horizontal mouse wheel | scroll in time |
| click and drag in the chart | zoom to the selected time range |
| `q`, Escape, closing the window | quit |

When you move the mouse over the chart:

- the viewer highlights the tiles of the tasks under the cursor;
- it shows the duration of the task you point at, in microseconds;
- thumbnails, when present, show the image of the iteration under the cursor.

When you move the mouse over a mosaic, the viewer highlights the tasks that
processed the tile you point at.

## Using traces from Python

```python
from easyview.trace_data import TraceSet
from easyview.trace_file import load_trace

trace = load_trace("run.evt", 0)
it = trace.search_iteration(12_000)  # 0-based index of the iteration at t=12000, or -1

traces = TraceSet([trace])
traces.sync_iterations()
```

Other functions you can use:

- `easyview.trace_file.read_events(path)` returns the raw events of a file.
- `easyview.trace_data.TraceBuilder` builds a `Trace` from events one by one.
- `TraceSet.sync_iterations()` computes the per-iteration padding that align
  mode uses.

## What it does not do

The viewer reads only files written by `TraceRecorder`. It does not read any
other trace format.

The package does not produce the iteration thumbnails. It only displays
`thumb_NNNN.png` files that are already in the trace directory.

There is no command for recording. Recording is done from Python code, with
`TraceRecorder` and `Monitor`.