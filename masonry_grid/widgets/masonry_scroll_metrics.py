from dataclasses import dataclass


@dataclass(frozen=True)
class ScrollMetrics:
    container_height: float = 0
    scroll_top: float = 0
    # Top edge of the grid inside the scrolled content.
    container_offset: float = 0


def measure_scroll_area(scroll_area, grid_widget=None) -> ScrollMetrics | None:
    """
    Read viewport height, scroll position and grid offset from a scroll area.

    `scroll_area` only needs the QAbstractScrollArea surface used here
    (`viewport().height()` and `verticalScrollBar().value()`); `grid_widget`
    is the grid's widget inside the scrolled content, if it is not at the top.
    Returns None when there is no scroll container.
    """
    if scroll_area is None:
        return None
    viewport = scroll_area.viewport()
    if viewport is None:
        return None
    container_offset = 0
    if grid_widget is not None:
        container_offset = grid_widget.y()
    return ScrollMetrics(
        container_height=viewport.height(),
        scroll_top=scroll_area.verticalScrollBar().value(),
        container_offset=container_offset,
    )
