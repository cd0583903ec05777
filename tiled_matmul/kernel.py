from numba import cuda, float32

# Edge length of the shared-memory tiles and of a thread block.
TILE_SIZE = 16


@cuda.jit
def tiled_matmul_kernel(A, B, C):
    """Shared-memory tiled matrix multiplication. One thread per C element.

    Launch with grid (N // TILE_SIZE, L // TILE_SIZE) and block
    (TILE_SIZE, TILE_SIZE). N, M and L must be multiples of TILE_SIZE;
    there is no bounds checking.
    """
    tx = cuda.threadIdx.x
    ty = cuda.threadIdx.y

    # Output element owned by this thread
    i = cuda.blockIdx.x * TILE_SIZE + tx
    j = cuda.blockIdx.y * TILE_SIZE + ty

    a_tile = cuda.shared.array(shape=(TILE_SIZE, TILE_SIZE), dtype=float32)
    b_tile = cuda.shared.array(shape=(TILE_SIZE, TILE_SIZE), dtype=float32)

    acc = float32(0.0)
    for kb in range(0, A.shape[1], TILE_SIZE):
        # Each thread stages one element of A and one of B
        a_tile[tx, ty] = A[i, kb + ty]
        b_tile[tx, ty] = B[kb + tx, j]

        # Tiles must be fully written before anyone reads them
        cuda.syncthreads()

        for k in range(TILE_SIZE):
            acc += a_tile[tx, k] * b_tile[k, ty]

        # Everyone must be done reading before the next chunk overwrites
        cuda.syncthreads()

    C[i, j] = acc
