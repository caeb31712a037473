"""Detectors delegated to OpenCV feature factories."""

import cv2
import numpy as np
from typing import List, Optional

from featurebench.detection.keypoint_detector import KeypointDetector
from featurebench.exceptions import FatalPipelineError
from featurebench.families import DetectorType


MODERN_DETECTORS = {
    DetectorType.FAST: cv2.FastFeatureDetector_create,
    DetectorType.BRISK: cv2.BRISK_create,
    DetectorType.ORB: cv2.ORB_create,
    DetectorType.AKAZE: cv2.AKAZE_create,
    DetectorType.SIFT: cv2.SIFT_create,
}


class ModernDetector(KeypointDetector):
    """Wraps FAST, BRISK, ORB, AKAZE and SIFT behind the detector interface."""
    
    def __init__(self, detector_type: DetectorType, backend: Optional[object] = None):
        """
        Args:
            detector_type: One of the delegated detector families
            backend: Object exposing `detect(image, mask)`; built from
                the OpenCV factory when omitted
        """
        if detector_type not in MODERN_DETECTORS:
            raise FatalPipelineError(
                f"{detector_type.value} is not a delegated detector family"
            )
        self.detector_type = detector_type
        self.name = detector_type.value
        self.backend = backend if backend is not None else MODERN_DETECTORS[detector_type]()
    
    def _detect(self, image: np.ndarray) -> List[cv2.KeyPoint]:
        return list(self.backend.detect(image, None))
