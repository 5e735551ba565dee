from dataclasses import dataclass

# Multiplied against the container height: extra space populated above and
# below the visible region.
VIRTUAL_BUFFER_FACTOR = 0.7


@dataclass(frozen=True)
class VirtualViewport:
    top: float
    bottom: float

    def contains(self, position) -> bool:
        return position.top + position.height >= self.top and position.top <= self.bottom


class VirtualizationFilter:
    """Decides which already-positioned items need to be rendered."""

    def __init__(self, enabled: bool = True, buffer_factor: float = VIRTUAL_BUFFER_FACTOR,
                 bounds_top: float | None = None, bounds_bottom: float | None = None):
        self.enabled = enabled
        self.buffer_factor = buffer_factor
        # Explicit margins replacing the buffer above / below the viewport.
        self.bounds_top = bounds_top
        self.bounds_bottom = bounds_bottom

    def viewport(self, container_height: float, scroll_top: float,
                 container_offset: float = 0) -> VirtualViewport:
        buffer = container_height * self.buffer_factor
        offset_scroll_pos = scroll_top - container_offset
        top_margin = self.bounds_top if self.bounds_top is not None else buffer
        bottom_margin = self.bounds_bottom if self.bounds_bottom is not None else buffer
        return VirtualViewport(
            top=offset_scroll_pos - top_margin,
            bottom=offset_scroll_pos + container_height + bottom_margin,
        )

    def visible_mask(self, positions, container_height: float, scroll_top: float,
                     container_offset: float = 0) -> list[bool]:
        """One flag per position, True when it should be rendered."""
        if not self.enabled:
            return [True] * len(positions)
        viewport = self.viewport(container_height, scroll_top, container_offset)
        return [viewport.contains(position) for position in positions]

    def visible_indices(self, positions, container_height: float, scroll_top: float,
                        container_offset: float = 0) -> list[int]:
        mask = self.visible_mask(positions, container_height, scroll_top, container_offset)
        return [i for i, visible in enumerate(mask) if visible]
