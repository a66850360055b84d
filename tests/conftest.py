import logging

import pytest


@pytest.fixture
def package_logger():
    """The ``jax_frames`` logger, restored to library defaults afterwards."""
    logger = logging.getLogger("jax_frames")
    yield logger
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
