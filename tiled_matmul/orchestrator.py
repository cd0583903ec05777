"""Host-side driver for the tiled CUDA matmul kernel.

One call to :func:`multiply` allocates device buffers, copies A and B in,
launches :func:`tiled_matmul.kernel.tiled_matmul_kernel` once, waits for it,
copies C back and releases everything again.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

import numpy as np
from numba import cuda
from numba.core import config

from .kernel import TILE_SIZE, tiled_matmul_kernel

DTYPE = np.float32


class ShapeError(ValueError):
    """Operands are not a tile-aligned, conformable A (N x M) and B (M x L)."""


class LaunchGeometry(NamedTuple):
    grid: Tuple[int, int]
    block: Tuple[int, int]


@dataclass
class MultiplyTiming:
    n: int
    m: int
    l: int
    kernel_seconds: float
    total_seconds: float

    @property
    def flops(self) -> int:
        return 2 * self.n * self.m * self.l

    @property
    def kernel_gflops(self) -> float:
        return _gflops(self.flops, self.kernel_seconds)

    @property
    def total_gflops(self) -> float:
        return _gflops(self.flops, self.total_seconds)


def _gflops(flops: int, seconds: float) -> float:
    if seconds <= 0.0:
        return float("inf")
    return flops / seconds / 1e9


def check_shapes(a: np.ndarray, b: np.ndarray, c: Optional[np.ndarray] = None) -> Tuple[int, int, int]:
    """Return (N, M, L) or raise ShapeError."""
    if a.ndim != 2 or b.ndim != 2:
        raise ShapeError(f"expected 2-D operands, got {a.ndim}-D and {b.ndim}-D")

    n, m = a.shape
    if b.shape[0] != m:
        raise ShapeError(f"inner dimensions disagree: A is {a.shape}, B is {b.shape}")
    l = b.shape[1]

    for name, dim in (("N", n), ("M", m), ("L", l)):
        if dim <= 0 or dim % TILE_SIZE != 0:
            raise ShapeError(f"{name}={dim} is not a positive multiple of the tile size {TILE_SIZE}")

    if c is not None:
        if c.shape != (n, l):
            raise ShapeError(f"C has shape {c.shape}, expected {(n, l)}")
        if c.dtype != DTYPE:
            raise ShapeError(f"C has dtype {c.dtype}, expected {np.dtype(DTYPE)}")

    return n, m, l


def launch_geometry(n: int, l: int) -> LaunchGeometry:
    return LaunchGeometry(grid=(n // TILE_SIZE, l // TILE_SIZE), block=(TILE_SIZE, TILE_SIZE))


class DeviceBuffers:
    """Device arrays that live exactly as long as the ``with`` block.

    The arrays are only reachable through ``buffers`` so that ``release``
    drops the last reference to each of them before flushing.
    """

    def __init__(self):
        self.buffers = {}

    def __enter__(self) -> "DeviceBuffers":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def allocate(self, name: str, like: np.ndarray) -> None:
        self.buffers[name] = cuda.device_array(like.shape, dtype=like.dtype)

    def to_device(self, name: str, host: np.ndarray) -> None:
        self.buffers[name].copy_to_device(host)

    def to_host(self, name: str, host: np.ndarray) -> None:
        if host.flags.c_contiguous:
            self.buffers[name].copy_to_host(host)
        else:
            host[...] = self.buffers[name].copy_to_host()

    def release(self) -> None:
        self.buffers.clear()
        # numba frees device memory lazily; flush the pending frees now
        if not config.ENABLE_CUDASIM:
            cuda.current_context().deallocations.clear()


def launch_tile_kernel(geometry: LaunchGeometry, bufs: DeviceBuffers) -> None:
    tiled_matmul_kernel[geometry.grid, geometry.block](
        bufs.buffers["a"], bufs.buffers["b"], bufs.buffers["c"]
    )
    # Launches are asynchronous; device faults surface here
    cuda.synchronize()


def multiply_timed(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> MultiplyTiming:
    """Compute C = A @ B on the device into ``c`` and return the timings."""
    a = np.ascontiguousarray(a, dtype=DTYPE)
    b = np.ascontiguousarray(b, dtype=DTYPE)
    n, m, l = check_shapes(a, b, c)

    total_start = time.perf_counter()
    with DeviceBuffers() as bufs:
        bufs.allocate("a", a)
        bufs.allocate("b", b)
        bufs.allocate("c", c)
        bufs.to_device("a", a)
        bufs.to_device("b", b)

        geometry = launch_geometry(n, l)

        kernel_start = time.perf_counter()
        launch_tile_kernel(geometry, bufs)
        kernel_end = time.perf_counter()

        bufs.to_host("c", c)
        total_end = time.perf_counter()

    return MultiplyTiming(
        n=n, m=m, l=l,
        kernel_seconds=kernel_end - kernel_start,
        total_seconds=total_end - total_start,
    )


def format_report(timing: MultiplyTiming) -> str:
    lines = [
        f"Arrays size (N x M x L): {timing.n} x {timing.m} x {timing.l}",
        f"Kernel time excluding data xfer: {timing.kernel_seconds * 1e6:.1f} microseconds",
        f"GFLOP/s excluding data xfer: {timing.kernel_gflops:.3f}",
        f"Total time including data xfer: {timing.total_seconds * 1e6:.1f} microseconds",
        f"GFLOP/s including data xfer: {timing.total_gflops:.3f}",
    ]
    return "\n".join(lines)


def multiply(a: np.ndarray, b: np.ndarray, c: Optional[np.ndarray] = None, report: bool = True) -> np.ndarray:
    """Multiply A (N x M) by B (M x L) on the GPU and return C (N x L).

    N, M and L must be multiples of TILE_SIZE. If ``c`` is given it is filled
    in place. With ``report`` the timing summary is printed to stdout.
    """
    if c is None:
        n, _, l = check_shapes(np.asarray(a), np.asarray(b))
        c = np.empty((n, l), dtype=DTYPE)
    timing = multiply_timed(a, b, c)
    if report:
        print(format_report(timing))
    return c
