"""Command line entry point of the trace viewer."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import pygame

from .layout import LayoutError, min_height, min_width
from .render import Renderer
from .trace_data import MAX_TRACES, TraceSet
from .trace_file import TraceFileError, load_trace
from .view import ViewState

PROGNAME = "easyview"

DEFAULT_TRACE_DIR = os.path.join("traces", "data")
DEFAULT_TRACE_FILE = "ezv_trace_current.evt"

WINDOW_PREFERRED_WIDTH = 1920
WINDOW_PREFERRED_HEIGHT = 1024

USAGE = f"""\
Usage: {PROGNAME} [options] {{file ...}}
options can be:
\t-d\t| --dir <dir>\t\t: specify trace directory
\t-h\t| --help\t\t: display help
\t-nt\t| --no-thumb\t\t: ignore thumbnails
\t-i\t| --iteration <i>\t: display iteration i
\t-r\t| --range <i> <j>\t: display iteration range [i-j]
\t-w\t| --whole-trace\t\t: display all iterations
\t-c\t| --compare\t\t: compare last two traces
\t-a\t| --align\t\t: align iterations
"""


class UsageError(Exception):
    """Raised when the command line is malformed."""


@dataclass
class Options:
    """Settings gathered from the command line."""

    files: list[str] = field(default_factory=list)
    trace_dir: str = DEFAULT_TRACE_DIR
    first_iteration: int = -1
    last_iteration: int = -1
    whole_trace: bool = False
    align: bool = False
    use_thumbnails: bool = True
    show_help: bool = False


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    """Leading integer of ``text``, or 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_args(argv: Sequence[str]) -> Options:
    """Parse options; the first argument that is not an option starts the file list."""
    options = Options()
    args = list(argv)
    pos = 0

    def take(count: int, what: str) -> list[str]:
        nonlocal pos
        if len(args) - pos - 1 < count:
            raise UsageError(f"parameter ({what}) missing")
        values = args[pos + 1 : pos + 1 + count]
        pos += count
        return values

    while pos < len(args):
        arg = args[pos]
        if arg in ("--no-thumbs", "-nt"):
            options.use_thumbnails = False
        elif arg in ("--align", "-a"):
            options.align = True
        elif arg in ("--whole-trace", "-w"):
            options.whole_trace = True
        elif arg in ("--help", "-h"):
            options.show_help = True
            return options
        elif arg in ("--range", "-r"):
            first, last = take(2, "number")
            options.first_iteration = _atoi(first)
            options.last_iteration = _atoi(last)
        elif arg in ("--iteration", "-i"):
            (value,) = take(1, "number")
            options.first_iteration = options.last_iteration = _atoi(value)
        elif arg in ("--dir", "-d"):
            (options.trace_dir,) = take(1, "dirname")
        else:
            break
        pos += 1

    options.files = args[pos:]
    return options


def load_traces(options: Options) -> TraceSet:
    """Load the trace files named by ``options`` and line their iterations up."""
    files = list(options.files) or [os.path.join(options.trace_dir, DEFAULT_TRACE_FILE)]
    if len(files) > MAX_TRACES:
        raise ValueError(f"Too many trace files specified (max {MAX_TRACES})")

    traces = TraceSet(align_mode=options.align)
    for num, path in enumerate(files):
        trace = load_trace(path, num)
        traces.add(trace)
        print(
            f'Trace #{num} "{trace.label}" successfully opened: '
            f"{trace.nb_iterations} iterations on {trace.nb_cores} CPUs ({path})"
        )
    traces.sync_iterations()
    return traces


def _window_title(traces: TraceSet) -> str:
    if len(traces) == 1:
        return f'EasyView Trace Viewer -- "{traces[0].label}"'
    return f'EasyView -- "{traces[0].label}" (top) VS "{traces[1].label}" (bottom)'


def _key_bindings(view: ViewState) -> dict[int, Callable[[], bool]]:
    bindings = {
        pygame.K_RIGHT: view.shift_left,
        pygame.K_LEFT: view.shift_right,
        pygame.K_SPACE: view.reset_zoom,
        pygame.K_w: view.display_all,
        pygame.K_a: view.toggle_align_mode,
        pygame.K_x: view.toggle_vh_mode,
    }
    for key in (pygame.K_MINUS, pygame.K_KP_MINUS, pygame.K_m):
        bindings[key] = view.zoom_out
    for key in (pygame.K_PLUS, pygame.K_KP_PLUS, pygame.K_p):
        bindings[key] = view.zoom_in
    return bindings


def _run(options: Options, traces: TraceSet) -> None:
    pygame.init()
    try:
        view = ViewState(traces, WINDOW_PREFERRED_WIDTH, WINDOW_PREFERRED_HEIGHT)
        min_w = min_width()
        min_h = min_height([t.nb_cores for t in traces])
        screen = pygame.display.set_mode((view.layout.width, view.layout.height), pygame.RESIZABLE)
        pygame.display.set_caption(_window_title(traces))

        renderer = Renderer(view, options.trace_dir, options.use_thumbnails)
        if options.use_thumbnails:
            loaded = renderer.load_thumbnails(view.max_iterations)
            print(f"{loaded}/{view.max_iterations} thumbnails successfully preloaded")

        if options.whole_trace:
            view.display_all()
        else:
            view.setview(options.first_iteration, options.last_iteration)

        bindings = _key_bindings(view)
        redraw = True
        while True:
            if redraw:
                renderer.draw(screen)
                pygame.display.flip()
            event = pygame.event.wait()
            redraw = False
            if event.type == pygame.QUIT or event.type == getattr(pygame, "WINDOWCLOSE", -1):
                break
            if event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_ESCAPE, pygame.K_q):
                    break
                action = bindings.get(event.key)
                if action is not None:
                    redraw = action()
            elif event.type == pygame.MOUSEMOTION:
                redraw = view.mouse_moved(*event.pos)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 2, 3):
                redraw = view.mouse_down(*event.pos)
            elif event.type == pygame.MOUSEBUTTONUP and event.button in (1, 2, 3):
                redraw = view.mouse_up(*event.pos)
            elif event.type == pygame.MOUSEWHEEL:
                redraw = view.scroll(event.x)
            elif event.type == pygame.VIDEORESIZE:
                width, height = max(event.w, min_w), max(event.h, min_h)
                if (width, height) != (event.w, event.h):
                    pygame.display.set_mode((width, height), pygame.RESIZABLE)
                screen = pygame.display.get_surface()
                redraw = view.relayout(width, height)
    finally:
        pygame.quit()


def main(argv: Sequence[str] | None = None) -> int:
    """Parse the command line, load the traces and run the viewer."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        options = parse_args(argv)
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(USAGE, end="", file=sys.stderr)
        return 1
    if options.show_help:
        print(USAGE, end="", file=sys.stderr)
        return 0

    try:
        traces = load_traces(options)
        _run(options, traces)
    except (TraceFileError, LayoutError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0