import os

import pygame
import pytest

from easyview.colors import CPU_COLORS, MAX_COLORS, color_components
from easyview.layout import Y_MARGIN
from easyview.render import BACKGROUND, Renderer, gradient_colors, thumbnail_path
from easyview.trace_data import TraceBuilder, TraceSet
from easyview.view import ViewState


def _make_view(width=1200, height=700):
    builder = TraceBuilder(0)
    builder.set_nb_cores(2)
    builder.set_dimensions(64)
    builder.set_label("demo")
    builder.start_iteration(0)
    builder.add_task(100, 400, 0, 0, 32, 32, 0, 0)
    builder.add_task(500, 900, 32, 0, 32, 32, 0, 1)
    builder.end_iteration(1000)
    builder.start_iteration(1500)
    builder.add_task(1600, 2000, 0, 32, 32, 32, 1, 0)
    builder.end_iteration(2500)
    trace = builder.finish()
    traces = TraceSet([trace])
    traces.sync_iterations()
    view = ViewState(traces, width, height)
    view.display_all()
    return view


def _task_point(view):
    trace = view.traces[0]
    task = trace.per_cpu[0][0]
    x = view.time_to_pixel(trace.task_start_time(task))
    y = view.layout.gantt[0].y + Y_MARGIN + view.layout.task_height // 2
    return task, x, y


def _rgb(surface, point):
    return tuple(surface.get_at(point))[:3]


def _draw(renderer):
    layout = renderer.view.layout
    surface = pygame.Surface((layout.width, layout.height))
    renderer.draw(surface)
    return surface


YELLOW = color_components(CPU_COLORS[0])[:3]
WHITE = color_components(CPU_COLORS[MAX_COLORS])[:3]


def test_gradient_first_quarter_keeps_colour():
    columns = gradient_colors(CPU_COLORS[3], 100, 0.3)
    assert len(columns) == 100
    original = color_components(CPU_COLORS[3])[:3] + (255,)
    assert all(col == original for col in columns[:25])


def test_gradient_fades_monotonically():
    columns = gradient_colors(CPU_COLORS[0], 80, 0.3)
    reds = [c[0] for c in columns]
    assert all(a >= b for a, b in zip(reds, reds[1:]))
    assert reds[-1] >= int(255 * 0.3)
    assert reds[-1] < reds[0]
    assert all(c[3] == 255 for c in columns)


def test_gradient_empty_and_invalid():
    assert gradient_colors(CPU_COLORS[0], 0, 0.3) == []
    with pytest.raises(ValueError):
        gradient_colors(CPU_COLORS[0], -1, 0.3)


def test_thumbnail_path_format():
    assert thumbnail_path("traces/data", 0) == os.path.join("traces/data", "thumb_0001.png")
    assert thumbnail_path("d", 41) == os.path.join("d", "thumb_0042.png")


def test_load_thumbnails(tmp_path):
    view = _make_view()
    image = pygame.Surface((8, 8))
    image.fill((255, 0, 0))
    pygame.image.save(image, thumbnail_path(tmp_path, 0))
    pygame.image.save(image, thumbnail_path(tmp_path, 2))
    renderer = Renderer(view, trace_dir=tmp_path)
    assert renderer.load_thumbnails(3) == 2
    assert len(renderer.thumbnails) == 3
    assert renderer.thumbnails[1] is None
    assert renderer.thumbnails[0].get_size() == (8, 8)


def test_load_thumbnails_disabled(tmp_path):
    view = _make_view()
    renderer = Renderer(view, trace_dir=tmp_path, use_thumbnails=False)
    assert renderer.load_thumbnails(3) == 0
    assert renderer.thumbnails == []


def test_draw_background_and_task():
    view = _make_view()
    renderer = Renderer(view, use_thumbnails=False)
    surface = _draw(renderer)
    _, x, y = _task_point(view)
    assert _rgb(surface, (1, view.layout.height - 1)) == BACKGROUND
    assert _rgb(surface, (x, y)) == YELLOW
    assert surface.get_clip() == surface.get_rect()


def test_draw_mosaic_black_without_mouse():
    view = _make_view()
    renderer = Renderer(view, use_thumbnails=False)
    surface = _draw(renderer)
    mosaic = view.layout.mosaic[0]
    center = (mosaic.x + mosaic.w // 2, mosaic.y + mosaic.h // 2)
    assert _rgb(surface, center) == (0, 0, 0)


def test_hovered_task_is_enlarged_and_tile_highlighted():
    view = _make_view()
    renderer = Renderer(view, use_thumbnails=False)
    task, x, y = _task_point(view)
    assert view.mouse_moved(x + 5, y)
    surface = _draw(renderer)
    assert _rgb(surface, (x - 2, y)) == YELLOW
    tile = view.layout.tile_rect(0, task, 64)
    assert _rgb(surface, (tile.x + tile.w // 2, tile.y + tile.h // 2)) == YELLOW


def test_mouse_over_mosaic_whitens_task():
    view = _make_view()
    renderer = Renderer(view, use_thumbnails=False)
    task, x, y = _task_point(view)
    tile = view.layout.tile_rect(0, task, 64)
    view.mouse_moved(tile.x + tile.w // 2, tile.y + tile.h // 2)
    surface = _draw(renderer)
    assert _rgb(surface, (x, y)) == WHITE


def test_thumbnail_shown_in_mosaic(tmp_path):
    view = _make_view()
    image = pygame.Surface((8, 8))
    image.fill((255, 0, 0))
    pygame.image.save(image, thumbnail_path(tmp_path, 0))
    renderer = Renderer(view, trace_dir=tmp_path)
    renderer.load_thumbnails(view.max_iterations)
    _, x, y = _task_point(view)
    view.mouse_moved(x + 5, y)
    surface = _draw(renderer)
    mosaic = view.layout.mosaic[0]
    assert _rgb(surface, (mosaic.x + mosaic.w - 2, mosaic.y + mosaic.h - 2)) == (255, 0, 0)


def test_draw_after_relayout():
    view = _make_view()
    renderer = Renderer(view, use_thumbnails=False)
    _draw(renderer)
    view.relayout(1400, 800)
    surface = _draw(renderer)
    _, x, y = _task_point(view)
    assert surface.get_size() == (1400, 800)
    assert _rgb(surface, (x, y)) == YELLOW