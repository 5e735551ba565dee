from masonry_grid.widgets.masonry_scroll_metrics import ScrollMetrics, measure_scroll_area


class FakeScrollBar:
    def __init__(self, value):
        self._value = value

    def value(self):
        return self._value


class FakeViewport:
    def __init__(self, height):
        self._height = height

    def height(self):
        return self._height


class FakeScrollArea:
    def __init__(self, value=0, height=600):
        self._scrollbar = FakeScrollBar(value)
        self._viewport = FakeViewport(height)

    def verticalScrollBar(self):
        return self._scrollbar

    def viewport(self):
        return self._viewport


class FakeGridWidget:
    def __init__(self, y):
        self._y = y

    def y(self):
        return self._y


def test_measure_scroll_area_reads_viewport_and_scrollbar():
    metrics = measure_scroll_area(FakeScrollArea(value=320, height=700), FakeGridWidget(48))

    assert metrics == ScrollMetrics(container_height=700, scroll_top=320, container_offset=48)


def test_measure_scroll_area_without_container():
    assert measure_scroll_area(None) is None


def test_grid_at_top_has_zero_offset():
    assert measure_scroll_area(FakeScrollArea()).container_offset == 0
