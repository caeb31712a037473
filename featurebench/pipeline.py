"""
Feature Pipeline
Runs one detector/descriptor combination over an image sequence
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional

from featurebench.config import DEFAULT_CONFIG
from featurebench.description.descriptor_extractor import DescriptorExtractor
from featurebench.detection.corner_detector import ShiTomasiDetector
from featurebench.detection.detector_factory import limit_keypoints
from featurebench.detection.keypoint_detector import KeypointDetector
from featurebench.detection.roi_filter import RegionOfInterest, filter_keypoints
from featurebench.frames.frame_store import Frame, FrameStore
from featurebench.matching.descriptor_matcher import DescriptorMatcher, check_same_family

logger = logging.getLogger(__name__)


class ResultRow(NamedTuple):
    """One processed frame transition of a combination."""
    detector: str
    keypoint_count: int
    detection_ms: float
    descriptor: str
    description_ms: float
    match_count: int
    image_index: int


class FeaturePipeline:
    """Detect, filter, describe and match keypoints frame by frame"""

    def __init__(self, detector: KeypointDetector, extractor: DescriptorExtractor,
                 matcher: DescriptorMatcher, image_source,
                 roi: Optional[RegionOfInterest] = None, buffer_capacity: int = 2,
                 max_keypoints: Optional[int] = None,
                 visualizer: Optional[Callable] = None):
        """
        Initialize pipeline

        Args:
            detector: Keypoint detection strategy
            extractor: Descriptor extractor
            matcher: Descriptor matcher
            image_source: Object exposing `load(image_index)` returning grayscale images
            roi: Keep only keypoints inside this rectangle (None keeps all)
            buffer_capacity: Number of frames held at the same time
            max_keypoints: Optional cap on keypoints per frame
            visualizer: Called with (prev_frame, curr_frame, matches) after matching
        """
        self.detector = detector
        self.extractor = extractor
        self.matcher = matcher
        self.image_source = image_source
        self.roi = roi
        self.buffer_capacity = buffer_capacity
        self.max_keypoints = max_keypoints
        self.visualizer = visualizer

    @classmethod
    def from_config(cls, detector: KeypointDetector, extractor: DescriptorExtractor,
                    image_source, config: Optional[Dict[str, Any]] = None,
                    matcher: Optional[DescriptorMatcher] = None,
                    visualizer: Optional[Callable] = None) -> "FeaturePipeline":
        config = config or DEFAULT_CONFIG
        roi = RegionOfInterest.from_config(config['roi']) if config['roi'].get('enabled', True) else None
        return cls(
            detector=detector,
            extractor=extractor,
            matcher=matcher or DescriptorMatcher.from_config(config['matching']),
            image_source=image_source,
            roi=roi,
            buffer_capacity=config['buffer']['capacity'],
            max_keypoints=config['detection'].get('max_keypoints'),
            visualizer=visualizer
        )

    def process_image(self, image_index: int, frames: FrameStore) -> Optional[ResultRow]:
        """
        Push one image through the pipeline.

        Returns:
            Result row, or None for the first frame of a run (nothing to match yet)
        """
        frame = Frame(self.image_source.load(image_index), image_index)
        frames.push(frame)
        logger.debug(f"#1 : LOAD IMAGE INTO BUFFER done, size: {frames.size()}")

        keypoints, detection_ms = self.detector.detect(frame.image)
        logger.debug(f"{self.detector.name} detection with n={len(keypoints)} "
                     f"keypoints in {detection_ms:.3f} ms")

        if self.roi is not None:
            keypoints = filter_keypoints(keypoints, self.roi)
            logger.debug(f"Keypoints inside ROI: {len(keypoints)}")

        if self.max_keypoints is not None:
            keypoints = limit_keypoints(keypoints, self.max_keypoints,
                                        quality_ordered=isinstance(self.detector, ShiTomasiDetector))

        frame.keypoints = keypoints
        frame.descriptors, description_ms = self.extractor.extract(frame.image, keypoints)
        frame.descriptor_family = self.extractor.family

        if not frames.has_pair():
            return None

        prev_frame = frames.second_latest()
        check_same_family(prev_frame.descriptor_family, frame.descriptor_family)
        matches = self.matcher.match(prev_frame.descriptors, frame.descriptors,
                                     frame.descriptor_family)
        frame.matches = matches
        logger.debug(f"#4 : MATCH KEYPOINT DESCRIPTORS done, {len(matches)} matches")

        if self.visualizer is not None:
            self.visualizer(prev_frame, frame, matches)

        return ResultRow(
            detector=self.detector.name,
            keypoint_count=len(keypoints),
            detection_ms=detection_ms,
            descriptor=self.extractor.name,
            description_ms=description_ms,
            match_count=len(matches),
            image_index=image_index
        )

    def run(self, image_indices: Iterable[int]) -> List[ResultRow]:
        """
        Process a whole image sequence with a fresh frame buffer.

        Any error propagates before rows are returned, so a failed run
        yields no partial results.
        """
        frames = FrameStore(self.buffer_capacity)
        rows = []
        for image_index in image_indices:
            row = self.process_image(image_index, frames)
            if row is not None:
                rows.append(row)
        return rows
