"""
Sweep Harness
Main entry point for benchmarking detector/descriptor combinations
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import cv2

from featurebench.config import DEFAULT_CONFIG
from featurebench.description.descriptor_extractor import DescriptorExtractor
from featurebench.detection.detector_factory import create_detector
from featurebench.exceptions import FatalPipelineError, InvalidCombinationError
from featurebench.families import DescriptorType, DetectorType, parse_enum
from featurebench.matching.descriptor_matcher import DescriptorMatcher
from featurebench.pipeline import FeaturePipeline, ResultRow
from featurebench.utils.io_handler import ImageSequence
from featurebench.utils.metrics import summarize_values

logger = logging.getLogger(__name__)


# (rule, reason) pairs; extend when further invalid pairs turn up
INCOMPATIBLE_PAIRS = [
    (lambda det, desc: desc == DescriptorType.AKAZE and det != DetectorType.AKAZE,
     "AKAZE descriptors need keypoints from the AKAZE detector"),
    (lambda det, desc: det == DetectorType.SIFT and desc == DescriptorType.ORB,
     "ORB cannot describe SIFT keypoints"),
]


def validate_combination(detector: DetectorType, descriptor: DescriptorType):
    """Raise InvalidCombinationError for known-incompatible pairs."""
    for rule, reason in INCOMPATIBLE_PAIRS:
        if rule(detector, descriptor):
            raise InvalidCombinationError(detector.value, descriptor.value, reason)


class SweepResult:
    """Rows, skipped pairs and failed pairs of a sweep."""

    def __init__(self):
        self.rows: List[ResultRow] = []
        self.skipped: List[Tuple[str, str, str]] = []
        self.failed: List[Tuple[str, str, str]] = []

    def rows_for(self, detector: str, descriptor: str) -> List[ResultRow]:
        return [row for row in self.rows
                if row.detector == detector and row.descriptor == descriptor]

    def summary(self) -> List[Dict[str, Any]]:
        """Per-combination averages, in sweep order."""
        pairs = []
        for row in self.rows:
            if (row.detector, row.descriptor) not in pairs:
                pairs.append((row.detector, row.descriptor))

        summary = []
        for detector, descriptor in pairs:
            rows = self.rows_for(detector, descriptor)
            summary.append({
                'detector': detector,
                'descriptor': descriptor,
                'frame_pairs': len(rows),
                'keypoints': summarize_values([r.keypoint_count for r in rows]),
                'detection_ms': summarize_values([r.detection_ms for r in rows]),
                'description_ms': summarize_values([r.description_ms for r in rows]),
                'matches': summarize_values([r.match_count for r in rows]),
                'total_matches': sum(r.match_count for r in rows)
            })
        return summary

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': self.summary(),
            'skipped': [{'detector': d, 'descriptor': s, 'reason': r} for d, s, r in self.skipped],
            'failed': [{'detector': d, 'descriptor': s, 'error': e} for d, s, e in self.failed]
        }


class SweepHarness:
    """Run the feature pipeline for every valid detector x descriptor pair"""

    def __init__(self, config: Dict[str, Any] = None, image_source=None,
                 report_sink=None,
                 detector_factory: Callable = create_detector,
                 extractor_factory: Callable = DescriptorExtractor,
                 visualizer: Optional[Callable] = None):
        """
        Initialize sweep harness

        Args:
            config: Configuration dictionary (optional)
            image_source: Object exposing `load(image_index)`; defaults to
                the configured image sequence on disk
            report_sink: Object exposing `write_row(row)` (optional)
            detector_factory: Builds a detector from (detector_type, config)
            extractor_factory: Builds an extractor from (descriptor_type, config)
            visualizer: Called with (prev_frame, curr_frame, matches)
        """
        self.config = config or DEFAULT_CONFIG
        if image_source is None:
            image_source = ImageSequence.from_config(self.config['images'])
        self.image_source = image_source
        self.report_sink = report_sink
        self.detector_factory = detector_factory
        self.extractor_factory = extractor_factory
        self.visualizer = visualizer

        images = self.config['images']
        self.image_indices = range(images['start_index'], images['end_index'] + 1)
        self.matcher = DescriptorMatcher.from_config(self.config['matching'])

    def combinations(self) -> Iterator[Tuple[str, str]]:
        """Detector-major cross product of the configured names."""
        for detector_name in self.config['sweep']['detectors']:
            for descriptor_name in self.config['sweep']['descriptors']:
                yield detector_name, descriptor_name

    def run_combination(self, detector_name: str, descriptor_name: str) -> List[ResultRow]:
        """
        Run one pair over the image range.

        Raises:
            InvalidCombinationError: pair is in the incompatibility set
            FatalPipelineError: the run could not complete
        """
        detector_type = parse_enum(DetectorType, detector_name)
        descriptor_type = parse_enum(DescriptorType, descriptor_name)
        validate_combination(detector_type, descriptor_type)

        logger.info(f"Using detector {detector_type.value} with descriptor {descriptor_type.value}")

        pipeline = FeaturePipeline.from_config(
            detector=self.detector_factory(detector_type, self.config),
            extractor=self.extractor_factory(descriptor_type, self.config),
            image_source=self.image_source,
            config=self.config,
            matcher=self.matcher,
            visualizer=self.visualizer
        )
        return pipeline.run(self.image_indices)

    def run(self) -> SweepResult:
        """Sweep all combinations; per-pair failures do not stop the sweep."""
        result = SweepResult()

        for detector_name, descriptor_name in self.combinations():
            try:
                rows = self.run_combination(detector_name, descriptor_name)
            except InvalidCombinationError as e:
                logger.warning(str(e))
                result.skipped.append((str(detector_name), str(descriptor_name), e.reason))
                continue
            except (FatalPipelineError, cv2.error) as e:
                logger.error(f"Run {detector_name}/{descriptor_name} failed: {e}")
                result.failed.append((str(detector_name), str(descriptor_name), str(e)))
                continue

            result.rows.extend(rows)
            if self.report_sink is not None:
                for row in rows:
                    self.report_sink.write_row(row)

        logger.info(f"Sweep finished: {len(result.rows)} rows, "
                    f"{len(result.skipped)} skipped, {len(result.failed)} failed")
        return result
