import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """setup_logging detaches the package logger from root; undo that per test."""
    pkg = logging.getLogger("gongzhu")
    handlers, level, propagate = list(pkg.handlers), pkg.level, pkg.propagate
    yield
    for h in list(pkg.handlers):
        if h not in handlers:
            pkg.removeHandler(h)
            h.close()
    pkg.setLevel(level)
    pkg.propagate = propagate
