import pytest
from PySide6.QtCore import QCoreApplication


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    # QObject signals and timers need an application instance; no display is required.
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
