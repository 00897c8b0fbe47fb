"""Benchmark batched vector operations: Numba CPU vs PyTorch, and vs per-value loops."""

import time

import numpy as np

from splmath import (
    Matrix4,
    Vector3d,
    cross_batch,
    normalize_batch,
    square_batch,
    transform_batch,
)


def create_test_points(n):
    """Create random float32 points [N, 3]."""
    np.random.seed(42)
    return np.random.randn(n, 3).astype(np.float32)


def timed(fn, *args, repeats=5, sync=None):
    """Best-of-N wall time in milliseconds."""
    fn(*args)  # warmup (JIT compile)
    best = float("inf")
    for _ in range(repeats):
        start = time.perf_counter()
        fn(*args)
        if sync is not None:
            sync()
        best = min(best, time.perf_counter() - start)
    return best * 1000


def benchmark_cpu():
    """Benchmark the Numba kernels."""
    print("\nCPU (Numba) PERFORMANCE")
    print("=" * 60)

    m = Matrix4.rotation((0, 1, 0), 0.3)
    for n in [10_000, 100_000, 1_000_000]:
        points = create_test_points(n)
        other = points[::-1].copy()
        print(f"\n{n:,} vectors:")
        print(f"  square:    {timed(square_batch, points):.2f} ms")
        print(f"  cross:     {timed(cross_batch, points, other):.2f} ms")
        print(f"  normalize: {timed(normalize_batch, points):.2f} ms")
        print(f"  transform: {timed(transform_batch, m, points):.2f} ms")


def benchmark_scalar_loop(n=10_000):
    """Compare against normalizing one Vector3 at a time."""
    print("\nPER-VALUE LOOP vs BATCH")
    print("=" * 60)

    points = create_test_points(n).astype(np.float64)

    def loop():
        for row in points:
            Vector3d(row).normalize()

    loop_ms = timed(loop, repeats=1)
    batch_ms = timed(normalize_batch, points)
    print(f"  loop:  {loop_ms:.1f} ms")
    print(f"  batch: {batch_ms:.2f} ms ({loop_ms / batch_ms:.0f}x)")


def benchmark_gpu():
    """Benchmark the PyTorch path if available."""
    try:
        import torch
    except ImportError:
        print("\nPyTorch not installed, skipping GPU benchmark")
        return

    device = "cuda" if torch.cuda.is_available() else "cpu"
    sync = torch.cuda.synchronize if device == "cuda" else None
    print(f"\nPYTORCH PERFORMANCE ({device})")
    print("=" * 60)

    m = Matrix4.rotation((0, 1, 0), 0.3)
    for n in [100_000, 1_000_000]:
        points = torch.from_numpy(create_test_points(n)).to(device)
        print(f"\n{n:,} vectors:")
        print(f"  normalize: {timed(normalize_batch, points, sync=sync):.2f} ms")
        print(f"  transform: {timed(transform_batch, m, points, sync=sync):.2f} ms")


if __name__ == "__main__":
    benchmark_cpu()
    benchmark_scalar_loop()
    benchmark_gpu()
