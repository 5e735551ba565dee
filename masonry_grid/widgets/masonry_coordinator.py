import traceback
from dataclasses import dataclass, field
from enum import Enum

from PySide6.QtCore import QObject, QTimer, Signal

from masonry_grid.models.breakpoints import width_to_breakpoint
from masonry_grid.models.measurement_store import MeasurementStore
from masonry_grid.utils.flow_log import log_flow
from masonry_grid.utils.settings import get_setting
from masonry_grid.widgets.masonry_context import LayoutConfig
from masonry_grid.widgets.masonry_layout import compute_layout
from masonry_grid.widgets.masonry_scroll_metrics import ScrollMetrics, measure_scroll_area
from masonry_grid.widgets.masonry_virtualization import VirtualizationFilter

# More items are requested once less than this many container heights of
# content remain below the scroll position.
FETCH_MORE_SCREENS = 3


class CoordinatorState(str, Enum):
    AWAITING_WIDTH = 'awaiting_width'
    PENDING_MEASUREMENT = 'pending_measurement'
    LAID_OUT = 'laid_out'


@dataclass
class MasonryRenderPlan:
    """What the render surface should show after one pass."""
    state: CoordinatorState
    # Visible measured items with their positions (parallel lists) and each
    # item's index among all measured items.
    items: list = field(default_factory=list)
    positions: list = field(default_factory=list)
    item_indices: list = field(default_factory=list)
    # Items to mount invisibly so their height can be captured.
    measuring_items: list = field(default_factory=list)
    measuring_positions: list = field(default_factory=list)
    height: float = 0
    width: float | None = None
    column_count: int = 0


class MasonryCoordinator(QObject):
    """
    Drives measurement passes and full layout passes for one masonry grid.

    The render surface reports width, item and scroll changes through the
    `on_*` methods (already debounced/throttled on its side) and renders
    each `MasonryRenderPlan` emitted through `layout_ready`. Heights come
    either from the injected `measure(item, position) -> height` callable
    or from `record_measurement()` once the surface has mounted an item.
    """

    state_changed = Signal(str)
    layout_ready = Signal(object)
    # Emitted with the current item count when more items should be loaded.
    fetch_requested = Signal(int)

    def __init__(self, measure=None, measurement_store: MeasurementStore | None = None,
                 virtualization: VirtualizationFilter | None = None, parent=None):
        super().__init__(parent)
        self._measure = measure
        self.measurement_store = measurement_store if measurement_store is not None else MeasurementStore()
        if virtualization is None:
            virtualization = VirtualizationFilter(
                enabled=get_setting('masonry_virtualize'),
                buffer_factor=get_setting('masonry_virtual_buffer_factor'),
            )
        self.virtualization = virtualization
        self.config: LayoutConfig | None = None
        self.items = []
        self.width = None
        self.breakpoint = None
        self.scroll_metrics = ScrollMetrics()
        self.state = CoordinatorState.AWAITING_WIDTH
        self.plan = MasonryRenderPlan(state=self.state)
        self._is_fetching = False
        # Without a measured scroll container every item counts as visible.
        self._has_scroll_container = False
        self._disposed = False

        self._relayout_delay = max(0, int(get_setting('masonry_relayout_delay_ms')))
        self._relayout_timer = QTimer(self)
        self._relayout_timer.setSingleShot(True)
        self._relayout_timer.timeout.connect(self.relayout)

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def has_pending_measurements(self) -> bool:
        store = self.measurement_store
        return any(item is not None and not store.has(item) for item in self.items)

    def initialize(self, config: LayoutConfig | None = None):
        """Set the layout configuration (from settings when omitted) and lay out."""
        if self._disposed:
            return None
        self.config = config if config is not None else LayoutConfig.from_settings()
        return self.relayout()

    def descriptor(self) -> str:
        """JSON descriptor for the early render pass of a server-rendered grid."""
        return self._config().to_descriptor()

    def on_width_changed(self, width, viewport_width=None):
        """
        Record a new container width and lay out again.

        The breakpoint follows `viewport_width` (the window) when given,
        otherwise the container width. Heights may depend on the width, so
        every measurement is discarded when a known width changes.
        """
        if self._disposed:
            return None
        if width is not None and width > 0:
            self.breakpoint = width_to_breakpoint(
                viewport_width if viewport_width is not None else width)
        else:
            width = None
        if self.width is not None and width != self.width:
            self.measurement_store.reset()
            log_flow("MASONRY", f"Width changed {self.width} -> {width}; measurements reset")
        self.width = width
        return self.relayout()

    def on_items_changed(self, items):
        if self._disposed:
            return None
        items = list(items)
        if self._items_replaced(items):
            self._is_fetching = False
        self.items = items
        self.measurement_store.retain(items)
        return self.relayout()

    def _items_replaced(self, items) -> bool:
        if len(items) != len(self.items):
            return True
        return any(new is not old for new, old in zip(items, self.items))

    def on_container_measured(self, container_height, container_offset=0):
        if self._disposed:
            return
        self.scroll_metrics = ScrollMetrics(
            container_height=container_height,
            scroll_top=self.scroll_metrics.scroll_top,
            container_offset=container_offset,
        )
        self._has_scroll_container = True

    def measure_container(self, scroll_area, grid_widget=None):
        """Refresh container metrics from a QAbstractScrollArea-like object."""
        if self._disposed:
            return None
        metrics = measure_scroll_area(scroll_area, grid_widget)
        if metrics is not None:
            self.scroll_metrics = metrics
            self._has_scroll_container = True
        return metrics

    def on_scroll(self, scroll_top):
        if self._disposed:
            return None
        self.scroll_metrics = ScrollMetrics(
            container_height=self.scroll_metrics.container_height,
            scroll_top=scroll_top,
            container_offset=self.scroll_metrics.container_offset,
        )
        return self.relayout()

    def record_measurement(self, item, height):
        """Store a height captured by the render surface and schedule a follow-up pass."""
        if self._disposed:
            return
        self.measurement_store.set(item, height)
        self.schedule_relayout()

    def schedule_relayout(self):
        """Run a pass on the next timer tick; restarting supersedes a pending pass."""
        if self._disposed:
            return
        self._relayout_timer.start(self._relayout_delay)

    def reflow(self):
        """Discard every measurement and lay the whole grid out again."""
        if self._disposed:
            return None
        log_flow("MASONRY", f"Reflow requested ({len(self.items)} items)")
        self.measurement_store.reset()
        return self.relayout()

    def dispose(self):
        """Cancel the pending pass; later events and measurements are ignored."""
        if self._disposed:
            return
        self._relayout_timer.stop()
        self._disposed = True
        self._measure = None

    def _config(self) -> LayoutConfig:
        if self.config is None:
            self.config = LayoutConfig.from_settings()
        return self.config

    def _set_state(self, state: CoordinatorState):
        if state is self.state:
            return
        log_flow("MASONRY", f"State {self.state.value} -> {state.value}")
        self.state = state
        self.state_changed.emit(state.value)

    def _publish(self, plan: MasonryRenderPlan) -> MasonryRenderPlan:
        self._set_state(plan.state)
        self.plan = plan
        self.layout_ready.emit(plan)
        return plan

    def relayout(self):
        """Run one layout pass now and publish its render plan."""
        if self._disposed:
            return None
        self._relayout_timer.stop()
        config = self._config()

        if self.width is None:
            return self._publish(MasonryRenderPlan(state=CoordinatorState.AWAITING_WIDTH))

        store = self.measurement_store
        present = [item for item in self.items if item is not None]
        ready = [item for item in present if store.has(item)]
        to_measure = [item for item in present if not store.has(item)][:config.min_cols]

        result = compute_layout(ready, store, config, self.width, self.breakpoint)
        if result.skipped:
            return self._publish(MasonryRenderPlan(state=CoordinatorState.AWAITING_WIDTH,
                                                   width=self.width))
        measuring = compute_layout(to_measure, store, config, self.width, self.breakpoint)

        metrics = self.scroll_metrics
        if self._has_scroll_container:
            visible = self.virtualization.visible_mask(
                result.positions, metrics.container_height, metrics.scroll_top,
                metrics.container_offset)
        else:
            visible = [True] * len(result.positions)
        plan = MasonryRenderPlan(
            state=(CoordinatorState.PENDING_MEASUREMENT if to_measure
                   else CoordinatorState.LAID_OUT),
            items=[item for item, shown in zip(ready, visible) if shown],
            positions=[pos for pos, shown in zip(result.positions, visible) if shown],
            item_indices=[i for i, shown in enumerate(visible) if shown],
            measuring_items=to_measure,
            measuring_positions=measuring.positions,
            height=result.height,
            width=self.width,
            column_count=result.column_count,
        )
        log_flow("MASONRY",
                 f"Pass done: {len(ready)} laid out, {len(plan.items)} visible, "
                 f"{len(to_measure)} measuring, cols={result.column_count}",
                 throttle_key="pass_done", every_s=0.5)
        self._publish(plan)

        if to_measure and self._measure is not None:
            self._measure_batch(to_measure, measuring.positions)
        self._maybe_fetch_more(plan)
        return plan

    def _measure_batch(self, items, positions):
        measured = 0
        for item, position in zip(items, positions):
            if self._disposed:
                return
            try:
                height = self._measure(item, position)
            except Exception:
                print(f"[MASONRY] Measurement failed for {item!r}; will retry on next pass")
                traceback.print_exc()
                continue
            if height is None:
                continue
            self.measurement_store.set(item, height)
            measured += 1
        if measured:
            self.schedule_relayout()

    def _maybe_fetch_more(self, plan: MasonryRenderPlan):
        metrics = self.scroll_metrics
        if self._is_fetching or plan.state is not CoordinatorState.LAID_OUT:
            return
        if metrics.container_height <= 0:
            return
        scroll_buffer = metrics.container_height * FETCH_MORE_SCREENS
        if metrics.scroll_top + scroll_buffer > plan.height:
            self._is_fetching = True
            self.fetch_requested.emit(len(self.items))
