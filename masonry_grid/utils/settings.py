from PySide6.QtCore import QSettings, Signal

# Defaults for settings that are accessed from multiple places.
DEFAULT_SETTINGS = {
    # default, uniformRow or fullWidth
    'masonry_layout_mode': 'default',
    'masonry_column_width': 236,
    'masonry_gutter': 14,
    'masonry_min_cols': 3,
    # 0 = no upper bound on the column count
    'masonry_max_cols': 0,
    # Only used by the fullWidth layout (and flexible grids).
    'masonry_ideal_column_width': 240,
    'masonry_flexible': False,
    'masonry_virtualize': False,
    # Extra space above and below the viewport, as a fraction of its height.
    'masonry_virtual_buffer_factor': 0.7,
    # Delay before the follow-up pass that picks up fresh measurements.
    'masonry_relayout_delay_ms': 0,
    'minimal_trace_logs': True,
}


class Settings(QSettings):
    # Signal that shows that the setting with the given string was changes
    change = Signal(str, object, name='settingsChanged')

    def __init__(self):
        super().__init__('masonry_grid', 'masonry_grid')

    def setValue(self, key, value):
        super().setValue(key, value)
        self.change.emit(key, value)

# Common shared instance to ensure the Signal is also shared
settings = Settings()


def get_setting(key: str, type_=None):
    """Read a setting, falling back to its default when unreadable."""
    default = DEFAULT_SETTINGS[key]
    if type_ is None:
        type_ = type(default)
    try:
        return settings.value(key, defaultValue=default, type=type_)
    except Exception:
        return default
