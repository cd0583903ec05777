import argparse
import sys

import numpy as np
from numba import cuda

from .fill import synthetic_operands
from .orchestrator import check_shapes, format_report, multiply_timed
from .reference import reference_matmul
from .verify import RTOL, compare, print_report

BENCHMARK_NAME = "cuda_tiled_mul"
CSV_HEADER = "benchmark,N,M,L,rep,kernel_sec,total_sec"


def build_parser():
    parser = argparse.ArgumentParser(description="Tiled CUDA Matrix Multiplication Runner")
    parser.add_argument("--N", type=int, default=512, help="Rows of A and C")
    parser.add_argument("--M", type=int, default=1024, help="Columns of A / rows of B")
    parser.add_argument("--L", type=int, default=512, help="Columns of B and C")
    parser.add_argument("--reps", type=int, default=1, help="Number of repetitions")
    parser.add_argument("--mode", type=str, default="single_run", choices=["single_run", "multi_run_timing"])
    parser.add_argument("--rtol", type=float, default=RTOL, help="Relative error threshold for verification")
    parser.add_argument("--no-verify", action="store_true", help="Skip the CPU reference check")
    parser.add_argument("--no-header", action="store_true", help="Do not print the CSV header in multi_run_timing mode")
    return parser


def run_single(A, B, C, args):
    # Warm-up: first launch includes JIT compilation of the kernel
    multiply_timed(A, B, C)
    timing = multiply_timed(A, B, C)
    print(format_report(timing))

    if args.no_verify:
        return 0

    CC = reference_matmul(A, B)
    result = compare(C, CC, rtol=args.rtol)
    print_report(result)
    return 0 if result.passed else 1


def run_timing(A, B, C, args):
    # Warm-up: first launch includes JIT compilation of the kernel
    multiply_timed(A, B, C)

    if not args.no_header:
        print(CSV_HEADER)
    for i in range(args.reps):
        timing = multiply_timed(A, B, C)
        # Print CSV row to stdout
        print(f"{BENCHMARK_NAME},{args.N},{args.M},{args.L},{i+1},"
              f"{timing.kernel_seconds:.9f},{timing.total_seconds:.9f}")
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)

    if not cuda.is_available():
        print("Error: no CUDA device available. Set NUMBA_ENABLE_CUDASIM=1 to use the simulator.", file=sys.stderr)
        return 1

    try:
        A, B = synthetic_operands(args.N, args.M, args.L)
        C = np.zeros((args.N, args.L), dtype=np.float32)
        check_shapes(A, B, C)
    except ValueError as e: # ShapeError, or numpy rejecting negative sizes
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.mode == "single_run":
        return run_single(A, B, C, args)
    return run_timing(A, B, C, args)


if __name__ == "__main__":
    sys.exit(main())
