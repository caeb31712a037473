"""Timing helpers and per-combination summary statistics."""

import numpy as np
from typing import Dict, List
from time import perf_counter


class ScopedTimer:
    """
    Context manager measuring wall time in milliseconds.
    
    Usage:
        with ScopedTimer() as timer:
            detector.detect(img, keypoints)
        elapsed = timer.elapsed_ms
    """
    
    def __init__(self):
        self.start = None
        self.elapsed_ms = 0.0
    
    def __enter__(self):
        self.start = perf_counter()
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed_ms = (perf_counter() - self.start) * 1000
        return False


def summarize_values(values: List[float]) -> Dict[str, float]:
    """Mean/std/min/max of a list of measurements."""
    if not values:
        return {'mean': 0.0, 'std': 0.0, 'min': 0.0, 'max': 0.0}
    data = np.asarray(values, dtype=np.float64)
    return {
        'mean': float(np.mean(data)),
        'std': float(np.std(data)),
        'min': float(np.min(data)),
        'max': float(np.max(data))
    }
