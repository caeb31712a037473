"""Common interface for keypoint detection strategies."""

import cv2
import numpy as np
from typing import List, Tuple

from featurebench.utils.metrics import ScopedTimer


class KeypointDetector:
    """
    Base class for detectors.
    
    Subclasses implement `_detect`; `detect` times that call alone so
    the reported figure excludes loading and visualization.
    """
    
    name = "BASE"
    
    def detect(self, image: np.ndarray) -> Tuple[List[cv2.KeyPoint], float]:
        """
        Detect keypoints in a grayscale image.
        
        Args:
            image: Grayscale uint8 image
            
        Returns:
            Tuple of (keypoints, elapsed time in ms)
        """
        with ScopedTimer() as timer:
            keypoints = self._detect(image)
        return keypoints, timer.elapsed_ms
    
    def _detect(self, image: np.ndarray) -> List[cv2.KeyPoint]:
        raise NotImplementedError
    
    def __repr__(self):
        return f"{self.__class__.__name__}({self.name})"
