import numpy as np
from numba import jit, prange


@jit(nopython=True, cache=True, parallel=True)
def _naive_mul(A, B, C):
    """Numba-jitted triple-loop matmul, parallelized over rows of C."""
    N = A.shape[0]
    M = A.shape[1]
    L = B.shape[1]
    for i in prange(N): # Parallelized outer loop
        for j in range(L):
            tmp = 0.0
            for k in range(M):
                tmp += A[i, k] * B[k, j]
            C[i, j] = tmp
    return C


def reference_matmul(a, b, out=None):
    """CPU reference product used to check the GPU result.

    Each product A[i, k] * B[k, j] is rounded to float32, as on the device;
    the products are summed in double precision in plain k order and the sum
    is stored as float32, independently of the tiled kernel's chunking.
    """
    a = np.ascontiguousarray(a, dtype=np.float32)
    b = np.ascontiguousarray(b, dtype=np.float32)
    if a.shape[1] != b.shape[0]:
        raise ValueError(f"inner dimensions disagree: A is {a.shape}, B is {b.shape}")
    if out is None:
        out = np.zeros((a.shape[0], b.shape[1]), dtype=np.float32)
    _naive_mul(a, b, out)
    return out
