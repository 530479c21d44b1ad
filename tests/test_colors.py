import pytest

from easyview.colors import CPU_COLORS, MAX_COLORS, WHITE, color_components


def test_palette_has_one_extra_white_entry():
    assert len(CPU_COLORS) == MAX_COLORS + 1
    assert color_components(CPU_COLORS[MAX_COLORS]) == (255, 255, 255, 255)
    assert color_components(WHITE) == (255, 255, 255, 255)


def test_yellow_components():
    assert color_components(0xFFFF00FF) == (255, 255, 0, 255)


def test_every_palette_colour_is_opaque():
    assert all(color_components(c)[3] == 255 for c in CPU_COLORS)


def test_components_recombine_to_value():
    for value in CPU_COLORS:
        r, g, b, a = color_components(value)
        assert (r << 24) | (g << 16) | (b << 8) | a == value


@pytest.mark.parametrize("value", [-1, 0x1_0000_0000])
def test_out_of_range_value_rejected(value):
    with pytest.raises(ValueError):
        color_components(value)