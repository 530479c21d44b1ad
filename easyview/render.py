"""Drawing of the trace viewer window with pygame."""

from __future__ import annotations

import math
import os

import pygame

from .colors import CPU_COLORS, MAX_COLORS, color_components
from .layout import FONT_HEIGHT, LEFT_MARGIN, Y_MARGIN, LayoutError, Rect
from .trace_data import MAX_TRACES, Task, Trace
from .view import ViewState

TILE_ALPHA = 0x80
BUTTON_ALPHA = 60

BACKGROUND = (50, 50, 65)
SILVER = (192, 192, 192)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
CURSOR_COLOR = (0, 255, 255)
SIBLING_COLOR = (150, 150, 200)
GAP_COLOR = (0, 90, 0)
SELECTION_ALPHA = 100

TAB_HEIGHT = 24
BUBBLE_WIDTH = 93
BUBBLE_HEIGHT = 39

# Attenuation reached at the right end of the task gradients.
FINAL_ATTENUATION = 0.3
WHITE_FINAL_ATTENUATION = 0.5


def gradient_colors(color: int, width: int, final_attenuation: float) -> list[tuple[int, int, int, int]]:
    """Column colours of a task bar ``width`` pixels wide.

    The first quarter keeps the original colour, the rest fades linearly
    down to ``final_attenuation`` of it.
    """
    if width < 0:
        raise ValueError(f"negative gradient width: {width}")
    r, g, b, _ = color_components(color)
    plain = width // 4
    fading = width - plain
    columns = []
    for j in range(width):
        if j < plain:
            columns.append((r, g, b, 255))
            continue
        coef = 1.0 - ((j - plain) / fading) * (1.0 - final_attenuation)
        columns.append((int(r * coef), int(g * coef), int(b * coef), 255))
    return columns


def thumbnail_path(trace_dir, iteration: int) -> str:
    """Path of the thumbnail image of iteration index ``iteration`` (0-based)."""
    return os.path.join(os.fspath(trace_dir), f"thumb_{iteration + 1:04d}.png")


def _to_pg(rect: Rect) -> pygame.Rect:
    return pygame.Rect(rect.x, rect.y, rect.w, rect.h)


def _fill_alpha(surface: pygame.Surface, rect: pygame.Rect, color, alpha: int = 255) -> None:
    if rect.w <= 0 or rect.h <= 0:
        return
    if alpha >= 255:
        surface.fill(color, rect)
        return
    overlay = pygame.Surface(rect.size)
    overlay.fill(color)
    overlay.set_alpha(alpha)
    surface.blit(overlay, rect.topleft)


def _blit_stretched(surface: pygame.Surface, source: pygame.Surface, dst: Rect) -> None:
    """Stretch ``source`` over ``dst``, only scaling the part that is visible."""
    if dst.w <= 0 or dst.h <= 0:
        return
    area = _to_pg(dst)
    visible = area.clip(surface.get_clip())
    if visible.w <= 0 or visible.h <= 0:
        return
    sw, sh = source.get_size()
    if sw == 0 or sh == 0:
        return
    x0 = min((visible.x - area.x) * sw // area.w, sw - 1)
    x1 = min(max(x0 + 1, -(-(visible.right - area.x) * sw // area.w)), sw)
    y0 = min((visible.y - area.y) * sh // area.h, sh - 1)
    y1 = min(max(y0 + 1, -(-(visible.bottom - area.y) * sh // area.h)), sh)
    part = source.subsurface(pygame.Rect(x0, y0, x1 - x0, y1 - y0))
    surface.blit(pygame.transform.scale(part, visible.size), visible.topleft)


class Renderer:
    """Draws the Gantt charts, tile mosaics and overlays of a :class:`ViewState`."""

    def __init__(self, view: ViewState, trace_dir=".", use_thumbnails: bool = True, font_path=None) -> None:
        self.view = view
        self.trace_dir = trace_dir
        self.use_thumbnails = use_thumbnails
        if not pygame.font.get_init():
            pygame.font.init()
        self.font = pygame.font.Font(font_path, FONT_HEIGHT - 4)
        self.thumbnails: list[pygame.Surface | None] = []
        self._displayed_iter = [-1] * MAX_TRACES
        self._shown_thumb: list[pygame.Surface | None] = [None] * MAX_TRACES
        self._fill_key: int | None = None
        self._perf_fill: list[pygame.Surface] = []
        self._labels = [self.font.render(t.label or "", True, BACKGROUND) for t in view.traces]

    def load_thumbnails(self, nb_iterations: int) -> int:
        """Load the thumbnail of each iteration; return how many were found."""
        self.thumbnails = []
        if not self.use_thumbnails:
            return 0
        loaded = 0
        for it in range(nb_iterations):
            path = thumbnail_path(self.trace_dir, it)
            image = None
            if os.path.isfile(path):
                try:
                    image = pygame.image.load(path)
                except pygame.error:
                    image = None
            if image is not None:
                loaded += 1
            self.thumbnails.append(image)
        return loaded

    # Cached surfaces

    def _fills(self) -> list[pygame.Surface]:
        width = max(self.view.layout.gantt_width, 1)
        if self._fill_key != width:
            self._perf_fill = []
            for c, color in enumerate(CPU_COLORS):
                final = WHITE_FINAL_ATTENUATION if c == MAX_COLORS else FINAL_ATTENUATION
                strip = pygame.Surface((width, 1))
                for j, rgba in enumerate(gradient_colors(color, width, final)):
                    strip.set_at((j, 0), rgba)
                self._perf_fill.append(strip)
            self._fill_key = width
        return self._perf_fill

    # Pieces of the display

    def _tile_rect(self, trace_num: int, trace: Trace, task: Task) -> Rect | None:
        try:
            return self.view.layout.tile_rect(trace_num, task, trace.dimensions)
        except LayoutError:
            return None

    def _show_tile(self, surface, trace_num: int, trace: Trace, task: Task, cpu: int, highlight: bool) -> None:
        rect = self._tile_rect(trace_num, trace, task)
        if rect is None:
            return
        color = color_components(CPU_COLORS[cpu % MAX_COLORS])[:3]
        _fill_alpha(surface, _to_pg(rect), color, 255 if highlight else TILE_ALPHA)

    def _button_rects(self) -> tuple[pygame.Rect, pygame.Rect]:
        gantt = self.view.layout.gantt[0]
        nav_w, nav_h = self.font.size("quick nav")
        align_w, align_h = self.font.size("align")
        nav = pygame.Rect(0, 2, nav_w + 8, nav_h + 4)
        nav.x = gantt.x + gantt.w - nav.w
        align = pygame.Rect(0, 2, align_w + 8, align_h + 4)
        align.x = nav.x - Y_MARGIN - align.w
        return nav, align

    def _draw_button(self, surface, rect: pygame.Rect, text: str, active: bool) -> None:
        alpha = 255 if active else BUTTON_ALPHA
        _fill_alpha(surface, rect, SILVER, alpha)
        label = self.font.render(text, True, BACKGROUND)
        label.set_alpha(alpha)
        surface.blit(label, (rect.x + 4, rect.y + 2))

    def _draw_misc_status(self, surface) -> None:
        nav, align = self._button_rects()
        self._draw_button(surface, nav, "quick nav", self.view.quick_nav_mode)
        if self.view.nb_traces > 1:
            self._draw_button(surface, align, "align", self.view.align_mode)

    def _draw_cpu_labels(self, surface) -> None:
        layout = self.view.layout
        row = layout.cpu_row_height
        for num, trace in enumerate(self.view.traces):
            for c in range(trace.nb_cores):
                text = self.font.render(f"CPU {c:2d} ", True, SILVER)
                w, h = text.get_size()
                y = layout.gantt[num].y + row * c + row // 2 - h // 2
                surface.blit(text, (LEFT_MARGIN - w, y))

    def _draw_tab(self, surface, trace_num: int) -> None:
        gantt = self.view.layout.gantt[trace_num]
        label = self._labels[trace_num]
        lw, _ = label.get_size()
        top = gantt.y - TAB_HEIGHT
        pygame.draw.rect(
            surface, SILVER, pygame.Rect(gantt.x, top, lw + 16, TAB_HEIGHT + 2),
            border_top_left_radius=6, border_top_right_radius=6,
        )
        surface.fill(SILVER, pygame.Rect(gantt.x, gantt.y - 2, gantt.w, 2))
        surface.blit(label, (gantt.x + 8, top + 2))

    def _draw_centered_text(self, surface, text: str, color, x_offset: int, y: int, max_size: int) -> None:
        rendered = self.font.render(text, True, color)
        width = rendered.get_width()
        surface.blit(rendered, (x_offset + max_size // 2 - width // 2, y))

    def _draw_gantt_background(self, surface, trace: Trace, trace_num: int, first_it: int) -> None:
        view = self.view
        layout = view.layout
        gantt = layout.gantt[trace_num]
        self._draw_tab(surface, trace_num)

        if first_it >= 0:
            for it in range(first_it, trace.nb_iterations):
                if trace.iteration_start_time(it) >= view.end_time:
                    break
                x = view.time_to_pixel(trace.iteration_start_time(it))
                w = view.time_to_pixel(trace.iteration_end_time(it)) - x + 1
                rect = pygame.Rect(x, gantt.y, w, gantt.h)
                if w > 0:
                    surface.fill(BLACK, rect)
                gap = trace.iterations[it].gap
                if view.align_mode and gap > 0:
                    gx = view.time_to_pixel(trace.iteration_end_time(it) - gap)
                    gap_rect = pygame.Rect(gx, gantt.y, x + w - gx, gantt.h)
                    if gap_rect.w > 0:
                        surface.fill(GAP_COLOR, gap_rect)
                self._draw_centered_text(surface, str(it + 1), WHITE, x, gantt.y + gantt.h + 1, w)

        fills = self._fills()
        row = layout.cpu_row_height
        for c in range(trace.nb_cores):
            line = Rect(LEFT_MARGIN, gantt.y + row - 2 + c * row, layout.gantt_width, 2)
            _blit_stretched(surface, fills[c % MAX_COLORS], line)

    def _draw_tile_background(self, surface, trace_num: int) -> None:
        view = self.view
        mosaic = _to_pg(view.layout.mosaic[trace_num])
        surface.fill(BLACK, mosaic)
        if self.use_thumbnails and view.mouse_in_gantt_zone:
            trace = view.traces[trace_num]
            it = trace.search_iteration(view.pixel_to_time(view.mouse_x))
            if it != -1 and it != self._displayed_iter[trace_num]:
                self._displayed_iter[trace_num] = it
                self._shown_thumb[trace_num] = self.thumbnails[it] if it < len(self.thumbnails) else None
        thumb = self._shown_thumb[trace_num]
        if thumb is not None and mosaic.w > 0 and mosaic.h > 0:
            surface.blit(pygame.transform.scale(thumb, mosaic.size), mosaic.topleft)

    def _draw_mouse(self, surface, selected: Task | None) -> None:
        view = self.view
        layout = view.layout
        gantt = layout.gantt[0]
        if view.mouse_is_down:
            _fill_alpha(surface, _to_pg(view.mouse_selection), WHITE, SELECTION_ALPHA)
        if not view.mouse_in_gantt_zone:
            return
        if view.horiz_mode:
            surface.fill(CURSOR_COLOR, pygame.Rect(gantt.x, view.mouse_y, layout.gantt_width, 1))
            sibling = layout.sibling_y(view.mouse_x, view.mouse_y)
            if sibling != view.mouse_y:
                surface.fill(SIBLING_COLOR, pygame.Rect(gantt.x, sibling, layout.gantt_width, 1))
            return
        surface.fill(CURSOR_COLOR, pygame.Rect(view.mouse_x, gantt.y, 1, layout.gantt_height))
        if selected is not None:
            bubble = pygame.Rect(view.mouse_x - 29, gantt.y - BUBBLE_HEIGHT, BUBBLE_WIDTH, BUBBLE_HEIGHT)
            pygame.draw.rect(surface, SILVER, bubble, border_radius=8)
            duration = selected.end_time - selected.start_time
            self._draw_centered_text(
                surface, f"{duration}us", BACKGROUND, view.mouse_x - 27, bubble.y + 6, bubble.w - 3
            )

    # Whole display

    def draw(self, surface: pygame.Surface) -> None:
        """Draw the complete window content onto ``surface``."""
        view = self.view
        layout = view.layout
        fills = self._fills()
        row = layout.cpu_row_height
        selected_task: Task | None = None

        surface.set_clip(None)
        surface.fill(BACKGROUND)
        self._draw_misc_status(surface)
        self._draw_cpu_labels(surface)

        for num, trace in enumerate(view.traces):
            first_it = view.first_displayed[num] - 1
            emphasized: list[Task | None] = [None] * trace.nb_cores
            target_tile: Rect | None = None
            selected_cpu: int | None = None
            wh = layout.gantt[num].y + Y_MARGIN

            top = layout.gantt[0]
            surface.set_clip(pygame.Rect(top.x, 0, top.w, layout.height))
            self._draw_gantt_background(surface, trace, num, first_it)

            mx, my = view.mouse_x, view.mouse_y
            in_mosaic = False
            other = 1 - num
            if view.mouse_in_gantt_zone:
                if view.horiz_mode and view.nb_traces > 1 and layout.gantt[other].contains(mx, my):
                    my = layout.sibling_y(mx, my)
                    mx = -1
            elif layout.mosaic[num].contains(mx, my):
                in_mosaic = True
            elif view.nb_traces > 1 and layout.mosaic[other].contains(mx, my):
                in_mosaic = True
                mx = layout.mosaic[num].x + (view.mouse_x - layout.mosaic[other].x)
                my = layout.mosaic[num].y + (view.mouse_y - layout.mosaic[other].y)

            if 0 <= first_it < trace.nb_iterations:
                for c in range(trace.nb_cores):
                    fill = fills[c % MAX_COLORS]
                    for task in trace.tasks_from(c, first_it):
                        start = trace.task_start_time(task)
                        end = trace.task_end_time(task)
                        if end < view.start_time:
                            continue
                        if start > view.end_time:
                            break
                        x = view.time_to_pixel(start)
                        dst = Rect(x, wh, view.time_to_pixel(end) - x + 1, layout.task_height)

                        if view.mouse_in_gantt_zone:
                            if view.horiz_mode and dst.contains_y(my) and selected_cpu is None:
                                selected_cpu = c
                            if dst.contains_x(mx):
                                if dst.contains_y(my):
                                    selected_task = task
                                    dst = Rect(dst.x - 3, dst.y - 3, dst.w + 6, dst.h + 6)
                                emphasized[c] = task
                            _blit_stretched(surface, fill, dst)
                        elif in_mosaic:
                            tile = self._tile_rect(num, trace, task)
                            if tile is not None and tile.contains(mx, my):
                                if target_tile is None:
                                    target_tile = tile
                                _blit_stretched(surface, fills[MAX_COLORS], dst)
                            else:
                                _blit_stretched(surface, fill, dst)
                        else:
                            _blit_stretched(surface, fill, dst)
                    wh += row

            surface.set_clip(None)
            self._draw_tile_background(surface, num)

            if target_tile is not None:
                white = color_components(CPU_COLORS[MAX_COLORS])[:3]
                _fill_alpha(surface, _to_pg(target_tile), white, TILE_ALPHA)
            elif view.horiz_mode:
                if selected_cpu is not None:
                    for task in trace.tasks_from(selected_cpu, first_it):
                        if trace.task_end_time(task) < view.start_time:
                            continue
                        if trace.task_start_time(task) > view.end_time:
                            break
                        self._show_tile(surface, num, trace, task, selected_cpu, task is selected_task)
            else:
                for c, task in enumerate(emphasized):
                    if task is not None:
                        self._show_tile(surface, num, trace, task, c, task is selected_task)

        self._draw_mouse(surface, selected_task)