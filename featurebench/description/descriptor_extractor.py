"""Descriptor extraction for detected keypoints."""

import logging
import cv2
import numpy as np
from typing import Any, Dict, List, Optional, Tuple

from featurebench.config import DEFAULT_CONFIG
from featurebench.exceptions import FatalPipelineError
from featurebench.families import DescriptorFamily, DescriptorType, family_of, parse_enum
from featurebench.utils.metrics import ScopedTimer

logger = logging.getLogger(__name__)


def create_extractor_backend(descriptor_type: DescriptorType, 
                             config: Optional[Dict[str, Any]] = None):
    """Instantiate the OpenCV extractor for a descriptor family."""
    description_config = (config or DEFAULT_CONFIG)['description']
    
    if descriptor_type == DescriptorType.BRISK:
        brisk = description_config['brisk']
        return cv2.BRISK_create(brisk['threshold'], brisk['octaves'], brisk['pattern_scale'])
    if descriptor_type == DescriptorType.ORB:
        return cv2.ORB_create()
    if descriptor_type == DescriptorType.AKAZE:
        return cv2.AKAZE_create()
    if descriptor_type == DescriptorType.SIFT:
        return cv2.SIFT_create()
    
    # BRIEF and FREAK live in the contrib modules
    try:
        if descriptor_type == DescriptorType.BRIEF:
            return cv2.xfeatures2d.BriefDescriptorExtractor_create()
        if descriptor_type == DescriptorType.FREAK:
            return cv2.xfeatures2d.FREAK_create()
    except AttributeError as e:
        raise FatalPipelineError(
            f"{descriptor_type.value} needs OpenCV contrib (cv2.xfeatures2d): {e}"
        ) from e
    
    raise FatalPipelineError(f"No extractor for descriptor {descriptor_type}")


class DescriptorExtractor:
    """Compute one descriptor row per keypoint."""
    
    def __init__(self, descriptor_type, config: Optional[Dict[str, Any]] = None,
                 backend: Optional[object] = None):
        """
        Initialize extractor.
        
        Args:
            descriptor_type: DescriptorType or its name
            config: Full configuration (defaults when omitted)
            backend: Object exposing `compute(image, keypoints)`; built
                from the OpenCV factory when omitted
        """
        self.descriptor_type = parse_enum(DescriptorType, descriptor_type)
        self.name = self.descriptor_type.value
        self.backend = backend if backend is not None else \
            create_extractor_backend(self.descriptor_type, config)
    
    @property
    def family(self) -> DescriptorFamily:
        return family_of(self.descriptor_type)
    
    def extract(self, image: np.ndarray, 
               keypoints: List[cv2.KeyPoint]) -> Tuple[np.ndarray, float]:
        """
        Describe keypoints.
        
        Args:
            image: Grayscale image the keypoints were detected on
            keypoints: Keypoints to describe
            
        Returns:
            Tuple of (descriptor matrix row-aligned with keypoints, elapsed ms)
        """
        with ScopedTimer() as timer:
            described, descriptors = self.backend.compute(image, list(keypoints))
        
        if descriptors is None:
            dtype = np.float32 if self.family == DescriptorFamily.HOG else np.uint8
            descriptors = np.empty((0, 0), dtype=dtype)
        
        n_keypoints = len(keypoints)
        if descriptors.shape[0] != n_keypoints or len(described) != n_keypoints:
            raise FatalPipelineError(
                f"{self.name} returned {descriptors.shape[0]} descriptors for "
                f"{n_keypoints} keypoints"
            )
        
        logger.debug(f"{self.name} descriptor extraction in {timer.elapsed_ms:.3f} ms")
        return descriptors, timer.elapsed_ms
