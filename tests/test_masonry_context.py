import json
import math

import pytest

from masonry_grid.utils import settings as settings_module
from masonry_grid.utils.settings import DEFAULT_SETTINGS
from masonry_grid.widgets.masonry_context import LayoutConfig, LayoutMode


def test_layout_config_defaults():
    config = LayoutConfig()

    assert config.mode is LayoutMode.DEFAULT
    assert config.column_width == 236
    assert config.gutter == 14
    assert config.min_cols == 3
    assert math.isinf(config.max_cols)
    assert config.ideal_width_source == 240


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_cols": 4, "max_cols": 3},
        {"gutter": -1},
        {"min_cols": 0},
        {"column_width": -5},
        {"column_width": {"xs": 100, "md": -1}},
    ],
)
def test_layout_config_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        LayoutConfig(**kwargs)


def test_layout_mode_coerce_falls_back_to_default():
    assert LayoutMode.coerce("uniformRow") is LayoutMode.UNIFORM_ROW
    assert LayoutMode.coerce(LayoutMode.FULL_WIDTH) is LayoutMode.FULL_WIDTH
    assert LayoutMode.coerce("grid") is LayoutMode.DEFAULT
    assert LayoutMode.coerce(None) is LayoutMode.DEFAULT


def test_flexible_config_is_full_width():
    config = LayoutConfig(layout_mode="uniformRow", column_width=300, flexible=True)

    assert config.mode is LayoutMode.FULL_WIDTH
    assert config.ideal_width_source == 300


def test_descriptor_serializes_unbounded_max_cols_as_null():
    payload = json.loads(LayoutConfig(column_width={"xs": 120, "lg": 236}).to_descriptor())

    assert payload == {
        "layout": "default",
        "columnWidth": {"xs": 120, "lg": 236},
        "gutter": 14,
        "minCols": 3,
        "maxCols": None,
    }


def test_descriptor_round_trip_keeps_full_width_settings():
    config = LayoutConfig(column_width=200, gutter=8, min_cols=2, max_cols=6, flexible=True)

    restored = LayoutConfig.from_descriptor(config.to_descriptor())

    assert restored.mode is LayoutMode.FULL_WIDTH
    assert restored.ideal_width_source == 200
    assert restored.gutter == 8
    assert restored.min_cols == 2
    assert restored.max_cols == 6


def test_from_descriptor_rejects_non_objects():
    with pytest.raises(TypeError):
        LayoutConfig.from_descriptor("[1, 2]")
    with pytest.raises(ValueError):
        LayoutConfig.from_descriptor("{not json")


def test_from_settings_reads_masonry_keys(monkeypatch):
    stored = dict(DEFAULT_SETTINGS)
    stored.update({
        "masonry_layout_mode": "uniformRow",
        "masonry_column_width": 180,
        "masonry_gutter": 6,
        "masonry_min_cols": 2,
        "masonry_max_cols": 4,
    })
    monkeypatch.setattr(settings_module.settings, "value",
                        lambda key, defaultValue=None, type=None: stored.get(key, defaultValue))

    config = LayoutConfig.from_settings()

    assert config.mode is LayoutMode.UNIFORM_ROW
    assert config.column_width == 180
    assert config.gutter == 6
    assert config.min_cols == 2
    assert config.max_cols == 4


def test_from_settings_treats_zero_max_cols_as_unbounded_and_survives_bad_values(monkeypatch):
    def fake_value(key, defaultValue=None, type=None):
        if key == "masonry_gutter":
            raise TypeError("unreadable")
        return defaultValue

    monkeypatch.setattr(settings_module.settings, "value", fake_value)

    config = LayoutConfig.from_settings()

    assert math.isinf(config.max_cols)
    assert config.gutter == DEFAULT_SETTINGS["masonry_gutter"]
