"""
featurebench - keypoint detector/descriptor benchmarking

Sweeps detector x descriptor combinations over an image sequence and
reports detection time, description time and match counts.
"""

from .core import SweepHarness, SweepResult
from .pipeline import FeaturePipeline, ResultRow

__all__ = ['SweepHarness', 'SweepResult', 'FeaturePipeline', 'ResultRow']
__version__ = '1.0.0'
