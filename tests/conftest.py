import numpy as np
import pytest


@pytest.fixture
def data() -> bytes:
    return np.random.default_rng(7).integers(0, 256, size=2048, dtype=np.uint8).tobytes()


@pytest.fixture
def secret() -> bytes:
    return np.random.default_rng(11).integers(0, 256, size=192, dtype=np.uint8).tobytes()
