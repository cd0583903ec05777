"""Compare a GPU product against the CPU reference and report mismatches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, TextIO

import numpy as np

# Largest relative error still counted as a match
RTOL = 2e-5
MAX_REPORTED_MISMATCHES = 10


class Mismatch(NamedTuple):
    row: int
    col: int
    computed: float
    expected: float
    rel_error: float


@dataclass
class VerifyResult:
    count: int
    rtol: float
    mismatches: List[Mismatch] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.count == 0


def relative_error(computed: np.ndarray, expected: np.ndarray) -> np.ndarray:
    """|computed - expected| / |expected|, or the absolute error where expected is 0."""
    computed = np.asarray(computed, dtype=np.float64)
    expected = np.asarray(expected, dtype=np.float64)
    diff = np.abs(computed - expected)
    scale = np.abs(expected)
    return np.divide(diff, scale, out=diff.copy(), where=scale != 0.0)


def compare(computed: np.ndarray, expected: np.ndarray, rtol: float = RTOL,
            max_reported: int = MAX_REPORTED_MISMATCHES) -> VerifyResult:
    if computed.shape != expected.shape:
        raise ValueError(f"shape mismatch: {computed.shape} vs {expected.shape}")

    err = relative_error(computed, expected)
    # NaN never compares greater, so count it explicitly
    bad = (err > rtol) | np.isnan(err)
    rows, cols = np.nonzero(bad)

    mismatches = [
        Mismatch(int(i), int(j), float(computed[i, j]), float(expected[i, j]), float(err[i, j]))
        for i, j in zip(rows[:max_reported], cols[:max_reported])
    ]
    return VerifyResult(count=int(rows.size), rtol=rtol, mismatches=mismatches)


def print_report(result: VerifyResult, file: Optional[TextIO] = None) -> None:
    """Print mismatch lines and the verdict to ``file``, or the current stdout."""
    for mm in result.mismatches:
        print(
            f"C({mm.row},{mm.col}) = {mm.computed:.6g}, expected {mm.expected:.6g}, "
            f"relative error {mm.rel_error:.3e}",
            file=file,
        )
    if result.passed:
        print(f"Test PASSED (relative error threshold {result.rtol:g})", file=file)
    else:
        print(f"{result.count} errors were encountered (relative error threshold {result.rtol:g})", file=file)
