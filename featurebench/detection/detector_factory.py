"""Resolve a detector family to a configured strategy."""

import cv2
from typing import Any, Dict, List, Optional

from featurebench.config import DEFAULT_CONFIG
from featurebench.detection.corner_detector import HarrisDetector, ShiTomasiDetector
from featurebench.detection.keypoint_detector import KeypointDetector
from featurebench.detection.modern_detector import ModernDetector
from featurebench.families import DetectorType, parse_enum


def create_detector(detector_type, config: Optional[Dict[str, Any]] = None) -> KeypointDetector:
    """
    Build the detector strategy for a family.
    
    Args:
        detector_type: DetectorType or its name
        config: Full configuration (defaults when omitted)
        
    Returns:
        Detector ready for `detect(image)`
    """
    detector_type = parse_enum(DetectorType, detector_type)
    detection_config = (config or DEFAULT_CONFIG)['detection']
    
    if detector_type == DetectorType.SHITOMASI:
        return ShiTomasiDetector(**detection_config['shi_tomasi'])
    if detector_type == DetectorType.HARRIS:
        return HarrisDetector(**detection_config['harris'])
    return ModernDetector(detector_type)


def limit_keypoints(keypoints: List[cv2.KeyPoint], max_keypoints: Optional[int],
                    quality_ordered: bool = False) -> List[cv2.KeyPoint]:
    """
    Cap the keypoint count.
    
    Args:
        keypoints: Detected keypoints
        max_keypoints: Upper bound, None disables the limit
        quality_ordered: Keypoints are already sorted best-first, keep the head
        
    Returns:
        At most `max_keypoints` keypoints with the strongest responses
    """
    if max_keypoints is None or len(keypoints) <= max_keypoints:
        return list(keypoints)
    
    if quality_ordered:
        return list(keypoints[:max_keypoints])
    
    return sorted(keypoints, key=lambda kp: kp.response, reverse=True)[:max_keypoints]
