import pytest

from masonry_grid.models.breakpoints import (BREAKPOINT_THRESHOLDS, BREAKPOINTS,
                                             resolve_breakpoint_value,
                                             width_to_breakpoint)


@pytest.mark.parametrize(
    "width, expected",
    [
        (0, "xs"),
        (575, "xs"),
        (576, "sm"),
        (767, "sm"),
        (768, "md"),
        (991, "md"),
        (992, "lg"),
        (1199, "lg"),
        (1200, "xl"),
        (5000, "xl"),
    ],
)
def test_width_to_breakpoint_uses_threshold_table(width, expected):
    assert width_to_breakpoint(width) == expected


def test_breakpoints_are_ordered_by_threshold():
    thresholds = [threshold for _, threshold in BREAKPOINT_THRESHOLDS]
    assert thresholds == sorted(thresholds)
    assert BREAKPOINTS == ("xs", "sm", "md", "lg", "xl")


def test_resolve_returns_scalars_unchanged():
    assert resolve_breakpoint_value(236, "lg") == 236
    assert resolve_breakpoint_value(None, "lg") is None


def test_resolve_cascades_down_to_smaller_breakpoints():
    value = {"md": 10, "xs": 2}

    assert resolve_breakpoint_value(value, "xl") == 10
    assert resolve_breakpoint_value(value, "lg") == 10
    assert resolve_breakpoint_value(value, "md") == 10
    assert resolve_breakpoint_value(value, "sm") == 2
    assert resolve_breakpoint_value(value, "xs") == 2


def test_resolve_is_undefined_below_smallest_entry():
    value = {"lg": 300}

    assert resolve_breakpoint_value(value, "md") is None
    assert resolve_breakpoint_value(value, "xl") == 300


def test_resolve_keeps_zero_entries():
    assert resolve_breakpoint_value({"sm": 0, "xs": 5}, "md") == 0


def test_resolve_unknown_breakpoint_is_undefined():
    assert resolve_breakpoint_value({"xs": 1}, None) is None
