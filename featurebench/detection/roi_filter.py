"""Restrict keypoints to a rectangular region of interest."""

import cv2
from typing import Any, Dict, List, Tuple


class RegionOfInterest:
    """Half-open rectangle: x <= px < x + width, y <= py < y + height."""
    
    def __init__(self, x: int, y: int, width: int, height: int):
        if width < 0 or height < 0:
            raise ValueError(f"ROI size must be non-negative, got {width}x{height}")
        self.x = x
        self.y = y
        self.width = width
        self.height = height
    
    @classmethod
    def from_config(cls, roi_config: Dict[str, Any]) -> "RegionOfInterest":
        return cls(roi_config['x'], roi_config['y'], 
                   roi_config['width'], roi_config['height'])
    
    def contains(self, point: Tuple[float, float]) -> bool:
        px, py = point
        return (self.x <= px < self.x + self.width and 
                self.y <= py < self.y + self.height)
    
    def __repr__(self):
        return f"RegionOfInterest(x={self.x}, y={self.y}, width={self.width}, height={self.height})"


def filter_keypoints(keypoints: List[cv2.KeyPoint], 
                     roi: RegionOfInterest) -> List[cv2.KeyPoint]:
    """Return the keypoints lying inside the ROI, in their original order."""
    return [kp for kp in keypoints if roi.contains(kp.pt)]
