import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def reset_logger():
    """Undo sinks added by LoggerManager so later tests don't write to stale streams."""
    yield
    logger.remove()
    logger.add(lambda message: sys.stderr.write(message), level="DEBUG")
