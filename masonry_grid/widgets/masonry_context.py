import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from masonry_grid.utils.settings import get_setting

DEFAULT_COLUMN_WIDTH = 236
DEFAULT_GUTTER = 14
DEFAULT_IDEAL_COLUMN_WIDTH = 240


class LayoutMode(str, Enum):
    DEFAULT = 'default'
    UNIFORM_ROW = 'uniformRow'
    FULL_WIDTH = 'fullWidth'

    @classmethod
    def coerce(cls, value) -> 'LayoutMode':
        """Map a mode name (or member) to a LayoutMode; unknown names fall back to DEFAULT."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.DEFAULT


def _check_width_value(name, value):
    values = value.values() if isinstance(value, Mapping) else [value]
    for entry in values:
        if entry is not None and entry < 0:
            raise ValueError(f'{name} must be >= 0, got {entry}')


@dataclass(frozen=True)
class LayoutConfig:
    """Serializable configuration shared by the full engine and the early render pass."""

    layout_mode: LayoutMode | str = LayoutMode.DEFAULT
    # Scalar or a per-breakpoint mapping such as {'xs': 160, 'md': 236}.
    column_width: int | Mapping | None = DEFAULT_COLUMN_WIDTH
    gutter: int = DEFAULT_GUTTER
    min_cols: int = 3
    max_cols: float = math.inf
    ideal_column_width: int | Mapping | None = None
    # Flexible grids stretch columns edge to edge (fullWidth) and read
    # `column_width` as the ideal width.
    flexible: bool = False

    def __post_init__(self):
        if self.min_cols < 1:
            raise ValueError(f'min_cols must be >= 1, got {self.min_cols}')
        if self.min_cols > self.max_cols:
            raise ValueError(
                f'min_cols ({self.min_cols}) must not exceed max_cols ({self.max_cols})')
        if self.gutter < 0:
            raise ValueError(f'gutter must be >= 0, got {self.gutter}')
        _check_width_value('column_width', self.column_width)
        _check_width_value('ideal_column_width', self.ideal_column_width)

    @property
    def mode(self) -> LayoutMode:
        if self.flexible:
            return LayoutMode.FULL_WIDTH
        return LayoutMode.coerce(self.layout_mode)

    @property
    def ideal_width_source(self):
        """Unresolved ideal column width (scalar or per-breakpoint mapping)."""
        if self.ideal_column_width is not None:
            return self.ideal_column_width
        if self.flexible and self.column_width is not None:
            return self.column_width
        return DEFAULT_IDEAL_COLUMN_WIDTH

    def to_descriptor(self) -> str:
        """Serialize to the JSON embedded next to a server-rendered grid."""
        descriptor = {
            'layout': self.mode.value,
            'columnWidth': _jsonable(self.column_width),
            'gutter': self.gutter,
            'minCols': self.min_cols,
            # JSON has no infinity; null means unbounded.
            'maxCols': None if math.isinf(self.max_cols) else self.max_cols,
        }
        if self.mode is LayoutMode.FULL_WIDTH:
            descriptor['idealColumnWidth'] = _jsonable(self.ideal_width_source)
        return json.dumps(descriptor, sort_keys=True)

    @classmethod
    def from_descriptor(cls, descriptor: str | Mapping) -> 'LayoutConfig':
        """
        Rebuild a config from `to_descriptor()` output.

        Raises ValueError (including json.JSONDecodeError) or TypeError on
        malformed input.
        """
        if isinstance(descriptor, (str, bytes)):
            descriptor = json.loads(descriptor)
        if not isinstance(descriptor, Mapping):
            raise TypeError(f'Descriptor must be an object, got {type(descriptor).__name__}')
        mode = LayoutMode.coerce(descriptor.get('layout'))
        max_cols = descriptor.get('maxCols')
        return cls(
            layout_mode=mode,
            column_width=descriptor.get('columnWidth', DEFAULT_COLUMN_WIDTH),
            gutter=descriptor.get('gutter') or 0,
            min_cols=descriptor.get('minCols') or 1,
            max_cols=math.inf if max_cols is None else max_cols,
            ideal_column_width=descriptor.get('idealColumnWidth'),
        )

    @classmethod
    def from_settings(cls) -> 'LayoutConfig':
        max_cols = get_setting('masonry_max_cols')
        min_cols = max(1, get_setting('masonry_min_cols'))
        if max_cols <= 0:
            max_cols = math.inf
        return cls(
            layout_mode=LayoutMode.coerce(get_setting('masonry_layout_mode')),
            column_width=max(0, get_setting('masonry_column_width')),
            gutter=max(0, get_setting('masonry_gutter')),
            min_cols=min_cols,
            max_cols=max(min_cols, max_cols),
            ideal_column_width=max(0, get_setting('masonry_ideal_column_width')),
            flexible=get_setting('masonry_flexible'),
        )


def _jsonable(value):
    if isinstance(value, Mapping):
        return dict(value)
    return value
