"""Fixed-capacity ring buffer of per-image pipeline state."""

import cv2
import numpy as np
from collections import deque
from typing import Iterator, List, Optional

from featurebench.exceptions import EmptyBufferError


class Frame:
    """Image plus the keypoints, descriptors and matches derived from it."""
    
    def __init__(self, image: np.ndarray, image_index: Optional[int] = None):
        self.image = image
        self.image_index = image_index
        self.keypoints: List[cv2.KeyPoint] = []
        self.descriptors: Optional[np.ndarray] = None
        self.descriptor_family = None
        self.matches: List[cv2.DMatch] = []
    
    def __repr__(self):
        return (f"Frame(index={self.image_index}, keypoints={len(self.keypoints)}, "
                f"matches={len(self.matches)})")


class FrameStore:
    """Keeps the most recent `capacity` frames, evicting the oldest first."""
    
    def __init__(self, capacity: int = 2):
        if capacity < 1:
            raise ValueError(f"Buffer capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._frames = deque()
    
    def push(self, frame: Frame) -> None:
        """Append a frame, evicting the oldest one first when full."""
        if len(self._frames) >= self.capacity:
            self._frames.popleft()
        self._frames.append(frame)
    
    def latest(self) -> Frame:
        """Most recently pushed frame."""
        if not self._frames:
            raise EmptyBufferError("No frames buffered")
        return self._frames[-1]
    
    def second_latest(self) -> Frame:
        """Frame pushed before the latest one."""
        if len(self._frames) < 2:
            raise EmptyBufferError(
                f"Need 2 buffered frames, have {len(self._frames)}"
            )
        return self._frames[-2]
    
    def has_pair(self) -> bool:
        """True once a previous and a current frame are both buffered."""
        return len(self._frames) >= 2
    
    def size(self) -> int:
        return len(self._frames)
    
    def clear(self) -> None:
        self._frames.clear()
    
    def __len__(self) -> int:
        return len(self._frames)
    
    def __iter__(self) -> Iterator[Frame]:
        return iter(self._frames)
