"""
Early render pass for server-rendered grids.

Before the coordinator is running, a grid that was rendered without a width
can already be laid out from the heights its static items report and the
JSON descriptor embedded next to it. This goes through the same
`compute_layout` as the full engine, so both agree on column counts and
positions for the same width, config and heights.
"""

from masonry_grid.models.breakpoints import width_to_breakpoint
from masonry_grid.utils.flow_log import log_flow
from masonry_grid.widgets.masonry_context import LayoutConfig
from masonry_grid.widgets.masonry_layout import LayoutResult, compute_layout


class StaticGridItem:
    """A server-rendered item whose height was read synchronously."""
    __slots__ = ('index', 'height', '__weakref__')

    def __init__(self, index: int, height):
        self.index = index
        self.height = height

    def __repr__(self):
        return f'StaticGridItem(index={self.index}, height={self.height})'


class _StaticHeights:
    @staticmethod
    def get(item):
        return item.height


def early_render(descriptor, width, heights, viewport_width=None) -> LayoutResult | None:
    """
    Lay out static items from their measured heights.

    Args:
        descriptor: JSON string (or parsed mapping) from `LayoutConfig.to_descriptor()`
        width: Grid width in pixels
        heights: Measured height of each static item, in order
        viewport_width: Window width used for the breakpoint; defaults to `width`

    Returns:
        LayoutResult, or None when the descriptor cannot be read.
    """
    try:
        config = LayoutConfig.from_descriptor(descriptor)
    except (ValueError, TypeError) as e:
        # json.JSONDecodeError is a ValueError.
        log_flow("EARLY_RENDER", f"Descriptor rejected: {e}", level="WARNING")
        return None
    breakpoint = width_to_breakpoint(viewport_width if viewport_width is not None else (width or 0))
    items = [StaticGridItem(i, height) for i, height in enumerate(heights)]
    return compute_layout(items, _StaticHeights, config, width, breakpoint)


def early_render_grids(grids, viewport_width=None) -> list:
    """Run `early_render` for each `(descriptor, width, heights)`; failures yield None."""
    return [early_render(descriptor, width, heights, viewport_width)
            for descriptor, width, heights in grids]


def descriptor_attribute(config: LayoutConfig) -> str:
    """HTML-safe `data-masonry` attribute value for a grid container."""
    escaped = config.to_descriptor().replace('&', '&amp;').replace('"', '&quot;')
    return f'data-masonry="{escaped}"'
