from .kernel import TILE_SIZE, tiled_matmul_kernel
from .orchestrator import (
    DeviceBuffers,
    LaunchGeometry,
    MultiplyTiming,
    ShapeError,
    check_shapes,
    format_report,
    launch_geometry,
    multiply,
    multiply_timed,
)
from .reference import reference_matmul
from .verify import RTOL, VerifyResult, compare

__all__ = [
    "TILE_SIZE",
    "tiled_matmul_kernel",
    "DeviceBuffers",
    "LaunchGeometry",
    "MultiplyTiming",
    "ShapeError",
    "check_shapes",
    "format_report",
    "launch_geometry",
    "multiply",
    "multiply_timed",
    "reference_matmul",
    "RTOL",
    "VerifyResult",
    "compare",
]
