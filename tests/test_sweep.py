"""Tests for the sweep harness and per-run pipeline."""

import pytest
import numpy as np
import cv2
from featurebench.config import load_config, merge_config
from featurebench.core import INCOMPATIBLE_PAIRS, SweepHarness, validate_combination
from featurebench.description.descriptor_extractor import DescriptorExtractor
from featurebench.detection.keypoint_detector import KeypointDetector
from featurebench.exceptions import EmptyBufferError, FatalPipelineError, InvalidCombinationError
from featurebench.families import DescriptorType, DetectorType
from featurebench.frames.frame_store import FrameStore
from featurebench.matching.descriptor_matcher import DescriptorMatcher
from featurebench.pipeline import FeaturePipeline
from featurebench.utils.io_handler import ImageListSource


class FixedDetector(KeypointDetector):
    """Emits the same keypoints for every image."""

    def __init__(self, name="SHITOMASI", count=6):
        self.name = name
        self.count = count
        self.calls = 0

    def _detect(self, image):
        self.calls += 1
        return [cv2.KeyPoint(float(10 + 7 * i), float(10 + 5 * i), 4.0) for i in range(self.count)]


class CoordinateBackend:
    """Binary descriptor built from the keypoint position."""

    def __init__(self, fail_on_call=None):
        self.calls = 0
        self.fail_on_call = fail_on_call

    def compute(self, image, keypoints):
        self.calls += 1
        if self.fail_on_call is not None and self.calls >= self.fail_on_call:
            return keypoints[:-1], np.zeros((max(len(keypoints) - 1, 0), 32), dtype=np.uint8)
        descriptors = np.zeros((len(keypoints), 32), dtype=np.uint8)
        for i, k in enumerate(keypoints):
            descriptors[i, 0] = int(k.pt[0]) % 256
            descriptors[i, 1] = int(k.pt[1]) % 256
        return keypoints, descriptors


class ListSink:
    def __init__(self):
        self.rows = []

    def write_row(self, row):
        self.rows.append(row)


class FactorySpy:
    """Records every call and builds fakes."""

    def __init__(self, build):
        self.build = build
        self.calls = []

    def __call__(self, kind, config):
        self.calls.append(kind)
        return self.build(kind, config)


def sweep_config(detectors, descriptors, n_images=3):
    return merge_config(load_config(), {
        'images': {'start_index': 0, 'end_index': n_images - 1},
        'roi': {'enabled': False},
        'sweep': {'detectors': detectors, 'descriptors': descriptors}
    })


def images(n=3):
    return ImageListSource([np.full((60, 80), 40 * i, dtype=np.uint8) for i in range(n)])


def fake_factories(fail_on_call=None):
    detector_factory = FactorySpy(lambda kind, config: FixedDetector(kind.value))
    extractor_factory = FactorySpy(
        lambda kind, config: DescriptorExtractor(kind, backend=CoordinateBackend(fail_on_call))
    )
    return detector_factory, extractor_factory


class TestCombinationRules:
    """Test the incompatibility set."""

    def test_akaze_descriptor_needs_akaze_detector(self):
        """Test non-AKAZE detectors are rejected for AKAZE descriptors."""
        for detector in DetectorType:
            if detector == DetectorType.AKAZE:
                validate_combination(detector, DescriptorType.AKAZE)
            else:
                with pytest.raises(InvalidCombinationError):
                    validate_combination(detector, DescriptorType.AKAZE)

    def test_sift_orb(self):
        """Test SIFT keypoints with ORB descriptors are rejected."""
        with pytest.raises(InvalidCombinationError) as excinfo:
            validate_combination(DetectorType.SIFT, DescriptorType.ORB)
        assert excinfo.value.detector == "SIFT"
        assert excinfo.value.descriptor == "ORB"

    def test_valid_pairs(self):
        """Test a few accepted pairs."""
        validate_combination(DetectorType.SIFT, DescriptorType.SIFT)
        validate_combination(DetectorType.ORB, DescriptorType.ORB)
        validate_combination(DetectorType.HARRIS, DescriptorType.BRISK)

    def test_default_sweep_skip_count(self):
        """Test 7 x 6 defaults leave 35 runnable pairs."""
        invalid = sum(
            1 for det in DetectorType for desc in DescriptorType
            if any(rule(det, desc) for rule, _ in INCOMPATIBLE_PAIRS)
        )
        assert invalid == 7


class TestFeaturePipeline:
    """Test a single detector/descriptor run."""

    def build(self, n_images=3, fail_on_call=None, visualizer=None):
        detector = FixedDetector()
        extractor = DescriptorExtractor("ORB", backend=CoordinateBackend(fail_on_call))
        return FeaturePipeline(detector, extractor, DescriptorMatcher(), images(n_images),
                               visualizer=visualizer)

    def test_first_frame_has_no_row(self):
        """Test the first image only fills the buffer."""
        pipeline = self.build()
        frames = FrameStore(2)
        assert pipeline.process_image(0, frames) is None
        with pytest.raises(EmptyBufferError):
            frames.second_latest()

    def test_one_row_per_transition(self):
        """Test rows for every image after the first."""
        rows = self.build(n_images=4).run(range(4))
        assert [row.image_index for row in rows] == [1, 2, 3]
        for row in rows:
            assert row.detector == "SHITOMASI"
            assert row.descriptor == "ORB"
            assert row.keypoint_count == 6
            assert row.match_count == 6

    def test_matches_stored_on_current_frame(self):
        """Test matches land on the newest frame and reference live keypoints."""
        pipeline = self.build()
        frames = FrameStore(2)
        pipeline.process_image(0, frames)
        pipeline.process_image(1, frames)
        prev, curr = frames.second_latest(), frames.latest()
        assert len(curr.matches) == 6
        for m in curr.matches:
            assert m.queryIdx < len(prev.keypoints)
            assert m.trainIdx < len(curr.keypoints)
        assert curr.descriptors.shape[0] == len(curr.keypoints)

    def test_roi_applied_before_description(self):
        """Test only ROI keypoints are described and counted."""
        from featurebench.detection.roi_filter import RegionOfInterest
        pipeline = self.build()
        pipeline.roi = RegionOfInterest(0, 0, 30, 30)
        rows = pipeline.run(range(3))
        # keypoints at (10,10), (17,15), (24,20) are inside
        assert all(row.keypoint_count == 3 for row in rows)

    def test_max_keypoints(self):
        """Test the optional keypoint cap."""
        pipeline = self.build()
        pipeline.max_keypoints = 2
        rows = pipeline.run(range(3))
        assert all(row.keypoint_count == 2 for row in rows)

    def test_failed_run_returns_nothing(self):
        """Test an alignment failure aborts the run without partial rows."""
        pipeline = self.build(fail_on_call=3)
        with pytest.raises(FatalPipelineError):
            pipeline.run(range(3))

    def test_missing_image(self):
        """Test a missing image aborts the run."""
        with pytest.raises(FatalPipelineError):
            self.build(n_images=2).run(range(3))

    def test_visualizer_called_per_pair(self):
        """Test the visualizer receives each frame pair."""
        seen = []
        pipeline = self.build(visualizer=lambda prev, curr, matches: seen.append(
            (prev.image_index, curr.image_index, len(matches))))
        pipeline.run(range(3))
        assert seen == [(0, 1, 6), (1, 2, 6)]


class TestSweepHarness:
    """Test the combinatorial sweep."""

    def test_incompatible_pairs_never_run(self):
        """Test skipped pairs do not touch detector or extractor."""
        detector_factory, extractor_factory = fake_factories()
        config = sweep_config(["SHITOMASI", "SIFT"], ["AKAZE", "ORB"])
        harness = SweepHarness(config, images(), detector_factory=detector_factory,
                               extractor_factory=extractor_factory)
        result = harness.run()

        assert detector_factory.calls == [DetectorType.SHITOMASI]
        assert extractor_factory.calls == [DescriptorType.ORB]
        assert [(d, s) for d, s, _ in result.skipped] == [
            ("SHITOMASI", "AKAZE"), ("SIFT", "AKAZE"), ("SIFT", "ORB")
        ]
        assert len(result.rows) == 2

    def test_row_order(self):
        """Test detector-major, descriptor, then image ordering."""
        detector_factory, extractor_factory = fake_factories()
        config = sweep_config(["HARRIS", "FAST"], ["BRISK", "BRIEF"])
        sink = ListSink()
        result = SweepHarness(config, images(), report_sink=sink,
                              detector_factory=detector_factory,
                              extractor_factory=extractor_factory).run()

        expected = [(det, desc, idx) for det in ("HARRIS", "FAST")
                    for desc in ("BRISK", "BRIEF") for idx in (1, 2)]
        assert [(r.detector, r.descriptor, r.image_index) for r in result.rows] == expected
        assert sink.rows == result.rows

    def test_failure_isolated_to_pair(self):
        """Test a failing run is recorded and the sweep continues."""
        config = sweep_config(["HARRIS", "FAST"], ["BRISK"])

        def build_detector(kind, config):
            if kind == DetectorType.HARRIS:
                raise FatalPipelineError("detector unavailable")
            return FixedDetector(kind.value)

        sink = ListSink()
        result = SweepHarness(
            config, images(), report_sink=sink,
            detector_factory=build_detector,
            extractor_factory=lambda kind, config: DescriptorExtractor(kind, backend=CoordinateBackend())
        ).run()

        assert [(d, s) for d, s, _ in result.failed] == [("HARRIS", "BRISK")]
        assert {r.detector for r in result.rows} == {"FAST"}
        assert len(sink.rows) == 2

    def test_partial_run_writes_no_rows(self):
        """Test rows of an aborted run never reach the sink."""
        detector_factory, extractor_factory = fake_factories(fail_on_call=3)
        config = sweep_config(["ORB"], ["BRISK"])
        sink = ListSink()
        result = SweepHarness(config, images(), report_sink=sink,
                              detector_factory=detector_factory,
                              extractor_factory=extractor_factory).run()
        assert result.rows == []
        assert sink.rows == []
        assert len(result.failed) == 1

    def test_unknown_name_fails_only_that_pair(self):
        """Test a typo in the detector list."""
        detector_factory, extractor_factory = fake_factories()
        config = sweep_config(["SURF", "ORB"], ["BRISK"])
        result = SweepHarness(config, images(), detector_factory=detector_factory,
                              extractor_factory=extractor_factory).run()
        assert [d for d, _, _ in result.failed] == ["SURF"]
        assert len(result.rows) == 2

    def test_fresh_buffer_per_run(self):
        """Test the first image of every run produces no row."""
        detector_factory, extractor_factory = fake_factories()
        config = sweep_config(["ORB"], ["BRISK", "ORB", "FREAK"])
        result = SweepHarness(config, images(), detector_factory=detector_factory,
                              extractor_factory=extractor_factory).run()
        assert [r.image_index for r in result.rows] == [1, 2] * 3

    def test_summary(self):
        """Test per-pair aggregation."""
        detector_factory, extractor_factory = fake_factories()
        config = sweep_config(["ORB"], ["BRISK", "ORB"], n_images=4)
        result = SweepHarness(config, images(4), detector_factory=detector_factory,
                              extractor_factory=extractor_factory).run()

        summary = result.summary()
        assert [(s['detector'], s['descriptor']) for s in summary] == [("ORB", "BRISK"), ("ORB", "ORB")]
        assert summary[0]['frame_pairs'] == 3
        assert summary[0]['total_matches'] == 18
        assert summary[0]['keypoints']['mean'] == 6.0

        as_dict = result.to_dict()
        assert as_dict['skipped'] == []
        assert len(as_dict['summary']) == 2
