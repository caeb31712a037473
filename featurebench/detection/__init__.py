from .keypoint_detector import KeypointDetector
from .corner_detector import HarrisDetector, ShiTomasiDetector, suppress_overlap
from .modern_detector import ModernDetector
from .roi_filter import RegionOfInterest, filter_keypoints
from .detector_factory import create_detector, limit_keypoints

__all__ = [
    'KeypointDetector', 'HarrisDetector', 'ShiTomasiDetector', 'suppress_overlap',
    'ModernDetector', 'RegionOfInterest', 'filter_keypoints',
    'create_detector', 'limit_keypoints'
]
