import os

# Run kernels on numba's CUDA simulator unless the caller chose otherwise
# (NUMBA_ENABLE_CUDASIM=0 to test on real hardware). Must happen before
# numba is imported.
os.environ.setdefault("NUMBA_ENABLE_CUDASIM", "1")

import numpy as np  # noqa: E402
import pytest  # noqa: E402
from numba.core import config as numba_config  # noqa: E402


def pytest_configure(config):
    config.addinivalue_line("markers", "hardware: needs a real CUDA device (too slow on the simulator)")


def pytest_collection_modifyitems(config, items):
    if not numba_config.ENABLE_CUDASIM:
        return
    skip_hw = pytest.mark.skip(reason="too slow on the CUDA simulator")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hw)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
