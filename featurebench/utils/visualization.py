"""Visualization utilities for debugging and display."""

import cv2
import numpy as np
from typing import List, Optional, Tuple


def _to_bgr(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    return image.copy()


def draw_keypoints(image: np.ndarray, keypoints: List[cv2.KeyPoint], 
                  color: Optional[Tuple[int, int, int]] = None) -> np.ndarray:
    """Draw keypoints with their size and orientation."""
    output = _to_bgr(image)
    draw_color = color if color is not None else (-1, -1, -1, -1)
    return cv2.drawKeypoints(output, keypoints, None, draw_color,
                             cv2.DRAW_MATCHES_FLAGS_DRAW_RICH_KEYPOINTS)


def draw_roi(image: np.ndarray, roi, 
            color: Tuple[int, int, int] = (0, 255, 0), 
            thickness: int = 2) -> np.ndarray:
    """Draw the region of interest rectangle."""
    output = _to_bgr(image)
    cv2.rectangle(output, (roi.x, roi.y), 
                  (roi.x + roi.width - 1, roi.y + roi.height - 1), color, thickness)
    return output


def draw_matches(prev_frame, curr_frame, matches: List[cv2.DMatch]) -> np.ndarray:
    """Side-by-side rendering of matches between two frames."""
    return cv2.drawMatches(prev_frame.image, prev_frame.keypoints,
                           curr_frame.image, curr_frame.keypoints,
                           matches, None,
                           flags=cv2.DRAW_MATCHES_FLAGS_DRAW_RICH_KEYPOINTS)


class MatchVisualizer:
    """Show matches between the previous and current frame in a window."""
    
    def __init__(self, window_name: str = "Matching keypoints between two camera images",
                 wait_for_key: bool = True):
        self.window_name = window_name
        self.wait_for_key = wait_for_key
    
    def __call__(self, prev_frame, curr_frame, matches: List[cv2.DMatch]):
        match_img = draw_matches(prev_frame, curr_frame, matches)
        cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)
        cv2.imshow(self.window_name, match_img)
        cv2.waitKey(0 if self.wait_for_key else 1)
        return match_img
    
    def close(self):
        cv2.destroyWindow(self.window_name)
