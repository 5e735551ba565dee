"""Masonry layout calculator for variable-height item grids."""

import heapq
import math
from dataclasses import dataclass, field

from PySide6.QtCore import QRect

from masonry_grid.models.breakpoints import resolve_breakpoint_value
from masonry_grid.utils.flow_log import log_flow
from masonry_grid.widgets.masonry_context import LayoutConfig, LayoutMode

# Above this many columns, the shortest column is tracked with a heap.
HEAP_COLUMN_THRESHOLD = 32


@dataclass(frozen=True)
class Position:
    """Absolute placement of one item; infinite values mean unconstrained."""
    top: float
    left: float
    width: float
    height: float

    @property
    def is_placed(self) -> bool:
        """False for off-canvas positions handed out to items still being measured."""
        return not math.isinf(self.top)

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def to_rect(self) -> QRect | None:
        """QRect for Qt surfaces, or None for off-canvas positions; unconstrained dimensions become 0."""
        if not self.is_placed:
            return None
        def _px(value):
            return 0 if math.isinf(value) else int(value)
        return QRect(_px(self.left), _px(self.top), _px(self.width), _px(self.height))


@dataclass
class LayoutResult:
    """Output of one layout pass, parallel to the items it was given."""
    positions: list = field(default_factory=list)
    # Column per item (row-major column for uniformRow); None when off-canvas.
    columns: list = field(default_factory=list)
    column_count: int = 0
    column_width: float = 0
    height: float = 0
    skipped: bool = False


def shortest_column(heights) -> int:
    """Index of the first column with the smallest height."""
    return min(range(len(heights)), key=lambda i: heights[i])


def longest_column(heights) -> int:
    """Index of the first column with the largest height."""
    return max(range(len(heights)), key=lambda i: heights[i])


class _ColumnHeap:
    """Shortest-column selection in O(log n); ties go to the lowest index."""

    def __init__(self, column_count: int):
        self.heights = [0] * column_count
        self._heap = [(0, col) for col in range(column_count)]

    def shortest(self) -> int:
        return self._heap[0][1]

    def grow(self, col: int, amount: float):
        self.heights[col] += amount
        heapq.heapreplace(self._heap, (self.heights[col], col))


class _ColumnList:
    def __init__(self, column_count: int):
        self.heights = [0] * column_count

    def shortest(self) -> int:
        return shortest_column(self.heights)

    def grow(self, col: int, amount: float):
        self.heights[col] += amount


def _column_tracker(column_count: int):
    if column_count > HEAP_COLUMN_THRESHOLD:
        return _ColumnHeap(column_count)
    return _ColumnList(column_count)


def _clamp_columns(count: int, config: LayoutConfig) -> int:
    return int(max(config.min_cols, min(config.max_cols, count)))


def _offscreen(column_width) -> Position:
    return Position(top=math.inf, left=math.inf, width=column_width, height=math.inf)


def _usable(value) -> bool:
    return value is not None and value > 0 and not math.isinf(value)


def column_count_for(width, column_width, gutter, config: LayoutConfig) -> int:
    """Column count shared by the default and uniformRow layouts."""
    return _clamp_columns(math.floor((width + gutter) / (column_width + gutter)), config)


def full_width_column_count(width, ideal_column_width, gutter, config: LayoutConfig) -> int:
    # Two-step guess: first ignore gutters, then subtract the gutters that guess implies.
    col_guess = math.floor(width / ideal_column_width)
    return _clamp_columns(
        math.floor((width - col_guess * gutter) / ideal_column_width), config)


def _place_shortest(items, cache, column_count, *, pitch, offset, item_width, gutter):
    tracker = _column_tracker(column_count)
    positions = []
    columns = []
    for item in items:
        height = cache.get(item)
        if height is None:
            positions.append(_offscreen(item_width))
            columns.append(None)
            continue
        col = tracker.shortest()
        positions.append(Position(
            top=tracker.heights[col],
            left=col * pitch + offset,
            width=item_width,
            height=height,
        ))
        columns.append(col)
        tracker.grow(col, height + gutter)
    heights = tracker.heights
    total_height = heights[longest_column(heights)] if heights else 0
    return positions, columns, total_height


def default_layout(items, cache, width, column_width, gutter, config):
    """Greedy shortest-column packing, centered in the container."""
    column_count = column_count_for(width, column_width, gutter, config)
    center_offset = max(
        math.floor((width - column_count * (column_width + gutter) + gutter) / 2), 0)
    positions, columns, total_height = _place_shortest(
        items, cache, column_count,
        pitch=column_width + gutter,
        offset=center_offset,
        item_width=column_width,
        gutter=gutter,
    )
    return LayoutResult(positions=positions, columns=columns, column_count=column_count,
                        column_width=column_width, height=total_height)


def uniform_row_layout(items, cache, width, column_width, gutter, config):
    column_count = column_count_for(width, column_width, gutter, config)
    positions = []
    columns = []
    row_heights = []
    # Rows are visited strictly in order, so every row above the current one is final.
    current_row = 0
    row_top = 0
    for i, item in enumerate(items):
        height = cache.get(item)
        if height is None:
            positions.append(_offscreen(column_width))
            columns.append(None)
            continue
        column = i % column_count
        row = i // column_count
        while len(row_heights) <= row:
            row_heights.append(0)
        while current_row < row:
            row_top += row_heights[current_row] + gutter
            current_row += 1
        if height > row_heights[row]:
            row_heights[row] = height
        positions.append(Position(
            top=row_top,
            left=column * (column_width + gutter),
            width=column_width,
            height=height,
        ))
        columns.append(column)
    total_height = sum(row_heights) + gutter * (len(row_heights) - 1) if row_heights else 0
    return LayoutResult(positions=positions, columns=columns, column_count=column_count,
                        column_width=column_width, height=total_height)


def full_width_layout(items, cache, width, ideal_column_width, gutter, config):
    column_count = full_width_column_count(width, ideal_column_width, gutter, config)
    column_width = math.floor(width / column_count)
    positions, columns, total_height = _place_shortest(
        items, cache, column_count,
        pitch=column_width,
        offset=gutter / 2,
        item_width=max(column_width - gutter, 0),
        gutter=gutter,
    )
    return LayoutResult(positions=positions, columns=columns, column_count=column_count,
                        column_width=column_width, height=total_height)


def compute_layout(items, cache, config: LayoutConfig, width, breakpoint=None) -> LayoutResult:
    """
    Position `items` using the heights in `cache`.

    Args:
        items: Ordered items; identity is the cache key
        cache: Anything with `get(item) -> height | None`
        config: Layout configuration
        width: Container width in pixels, None while unknown
        breakpoint: Breakpoint name used to resolve per-breakpoint widths

    Returns:
        LayoutResult with one position per item. Items without a cached
        height get an off-canvas position sized for measurement. The pass
        is skipped (no positions) when the width or the column width is
        unknown or zero.
    """
    if not _usable(width):
        log_flow("MASONRY", f"Pass skipped: container width unknown ({width})",
                 throttle_key="skip_width", every_s=1.0)
        return LayoutResult(skipped=True)

    mode = config.mode
    gutter = config.gutter
    if mode is LayoutMode.FULL_WIDTH:
        ideal_column_width = resolve_breakpoint_value(config.ideal_width_source, breakpoint)
        if not _usable(ideal_column_width):
            log_flow("MASONRY", f"Pass skipped: ideal column width={ideal_column_width}",
                     throttle_key="skip_ideal", every_s=1.0)
            return LayoutResult(skipped=True)
        return full_width_layout(items, cache, width, ideal_column_width, gutter, config)

    column_width = resolve_breakpoint_value(config.column_width, breakpoint)
    if not _usable(column_width):
        log_flow("MASONRY", f"Pass skipped: column width={column_width}",
                 throttle_key="skip_column", every_s=1.0)
        return LayoutResult(skipped=True)
    if mode is LayoutMode.UNIFORM_ROW:
        return uniform_row_layout(items, cache, width, column_width, gutter, config)
    return default_layout(items, cache, width, column_width, gutter, config)
