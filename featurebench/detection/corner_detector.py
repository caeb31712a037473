"""Corner detectors: Shi-Tomasi and Harris with overlap suppression."""

import cv2
import numpy as np
from typing import List

from featurebench.detection.keypoint_detector import KeypointDetector


def suppress_overlap(keypoints: List[cv2.KeyPoint], candidate: cv2.KeyPoint,
                     max_overlap: float = 0.0) -> bool:
    """
    Insert a candidate unless it duplicates an accepted keypoint.
    
    The first accepted keypoint overlapping the candidate by more than
    `max_overlap` settles it: whichever of the two has the higher response
    keeps that slot and the scan stops. Later keypoints are never looked
    at, even if they overlap more.
    
    Args:
        keypoints: Accepted keypoints, modified in place
        candidate: New keypoint
        max_overlap: Permitted overlap ratio between two keypoints
        
    Returns:
        True if the candidate ended up in `keypoints`
    """
    for idx, existing in enumerate(keypoints):
        if cv2.KeyPoint.overlap(existing, candidate) > max_overlap:
            if existing.response < candidate.response:
                keypoints[idx] = candidate
                return True
            return False
    
    keypoints.append(candidate)
    return True


class ShiTomasiDetector(KeypointDetector):
    """Good-features-to-track corners on a minimum-distance grid."""
    
    name = "SHITOMASI"
    
    def __init__(self, block_size: int = 4, max_overlap: float = 0.0,
                 quality_level: float = 0.01, k: float = 0.04):
        """
        Initialize Shi-Tomasi detector.
        
        Args:
            block_size: Neighbourhood for the derivative covariation matrix
            max_overlap: Permissible overlap between two features
            quality_level: Minimal accepted corner quality relative to the best
            k: Free Harris parameter (unused when Harris scoring is off)
        """
        self.block_size = block_size
        self.max_overlap = max_overlap
        self.quality_level = quality_level
        self.k = k
    
    @property
    def min_distance(self) -> float:
        return (1.0 - self.max_overlap) * self.block_size
    
    def max_corners(self, image: np.ndarray) -> int:
        """Keypoint budget derived from image area."""
        rows, cols = image.shape[:2]
        return int(rows * cols / max(1.0, self.min_distance))
    
    def _detect(self, image: np.ndarray) -> List[cv2.KeyPoint]:
        corners = cv2.goodFeaturesToTrack(
            image,
            self.max_corners(image),
            self.quality_level,
            self.min_distance,
            mask=None,
            blockSize=self.block_size,
            useHarrisDetector=False,
            k=self.k
        )
        
        if corners is None:
            return []
        
        # Corners come back best-first; rank stands in for the missing response
        n_corners = len(corners)
        return [
            cv2.KeyPoint(float(x), float(y), float(self.block_size), 0.0, float(n_corners - rank))
            for rank, (x, y) in enumerate(corners.reshape(-1, 2))
        ]


class HarrisDetector(KeypointDetector):
    """Harris corner response with thresholding and overlap suppression."""
    
    name = "HARRIS"
    
    def __init__(self, block_size: int = 2, aperture_size: int = 3, 
                 k: float = 0.04, threshold: int = 100, max_overlap: float = 0.0):
        self.block_size = block_size
        self.aperture_size = aperture_size
        self.k = k
        self.threshold = threshold
        self.max_overlap = max_overlap
    
    def response_map(self, image: np.ndarray) -> np.ndarray:
        """Harris response scaled to 0..255 as uint8."""
        response = cv2.cornerHarris(image, self.block_size, self.aperture_size, self.k)
        normalized = cv2.normalize(response, None, 0, 255, cv2.NORM_MINMAX, cv2.CV_32FC1)
        return cv2.convertScaleAbs(normalized)
    
    def _detect(self, image: np.ndarray) -> List[cv2.KeyPoint]:
        response = self.response_map(image)
        keypoints = []
        
        # argwhere walks row-major, the same order as a pixel-by-pixel scan
        for row, col in np.argwhere(response > self.threshold):
            candidate = cv2.KeyPoint(
                float(col), float(row),
                float(2 * self.aperture_size), 0.0,
                float(response[row, col])
            )
            suppress_overlap(keypoints, candidate, self.max_overlap)
        
        return keypoints
