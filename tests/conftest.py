import logging

import pytest

from layerthermal.model.layers import Dimensions, Layer, Position


@pytest.fixture
def slab():
    """100 x 20 x 100 layer centred at the origin."""
    return Layer("Slab", Dimensions(w=100, h=20, d=100), Position(0, 0, 0), color=0x888888)


@pytest.fixture
def reset_package_logger():
    yield
    logger = logging.getLogger("layerthermal")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
