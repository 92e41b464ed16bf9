"""Session orchestration: requests, scanner and benchmark."""

from .benchmark import BenchmarkIteration, BenchmarkResult, run_benchmark
from .request import ScanRequest
from .scanner import Scanner, run_scan

__all__ = [
    "BenchmarkIteration",
    "BenchmarkResult",
    "ScanRequest",
    "Scanner",
    "run_benchmark",
    "run_scan",
]
