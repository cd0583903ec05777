import numpy as np


def synthetic_operands(n, m, l, dtype=np.float32):
    """A (n x m) and B (m x l) filled with A[i, j] = i*10 + j*1000, B[i, j] = i - j."""
    a = np.fromfunction(lambda i, j: i * 10 + j * 1000, (n, m), dtype=dtype)
    b = np.fromfunction(lambda i, j: i - j, (m, l), dtype=dtype)
    return a, b
