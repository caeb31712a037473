"""Descriptor matching between the previous and the current frame."""

import logging
import cv2
import numpy as np
from typing import Any, Dict, List, Sequence

from featurebench.exceptions import FatalPipelineError
from featurebench.families import DescriptorFamily, MatcherType, SelectorType, parse_enum

logger = logging.getLogger(__name__)


def ratio_test(knn_matches: Sequence[Sequence[cv2.DMatch]],
               ratio: float = 0.8) -> List[cv2.DMatch]:
    """
    Lowe's distance ratio test over k=2 neighbour lists.

    A source row keeps its best match only when that match is clearly
    closer than the runner-up: d1 < ratio * d2. Rows with fewer than two
    neighbours are dropped.
    """
    good_matches = []
    for neighbours in knn_matches:
        if len(neighbours) < 2:
            continue
        best, second = neighbours[0], neighbours[1]
        if best.distance < ratio * second.distance:
            good_matches.append(best)
    return good_matches


def check_same_family(prev_family: DescriptorFamily, curr_family: DescriptorFamily):
    """Descriptors from different families have no common metric."""
    if prev_family != curr_family:
        raise FatalPipelineError(
            f"Cannot match {prev_family.value} descriptors against {curr_family.value}"
        )


class DescriptorMatcher:
    """Pair descriptors by nearest neighbour or k-NN with a ratio test."""

    def __init__(self, matcher_type=MatcherType.BRUTE_FORCE,
                 selector_type=SelectorType.K_NEAREST_NEIGHBOR,
                 ratio_threshold: float = 0.8, cross_check: bool = False):
        """
        Initialize matcher.

        Args:
            matcher_type: MAT_BF (exhaustive) or MAT_FLANN (indexed search)
            selector_type: SEL_NN (best match) or SEL_KNN (k=2 plus ratio test)
            ratio_threshold: Maximum d1/d2 ratio accepted by the ratio test
            cross_check: Mutual-best filtering, brute force with SEL_NN only.
                Off by default. When on, rows without a mutual best match are
                dropped, so SEL_NN may emit fewer matches than source rows.
        """
        self.matcher_type = parse_enum(MatcherType, matcher_type)
        self.selector_type = parse_enum(SelectorType, selector_type)
        self.ratio_threshold = ratio_threshold
        self.cross_check = cross_check

        if cross_check and self.selector_type == SelectorType.K_NEAREST_NEIGHBOR:
            raise ValueError("cross_check cannot be combined with SEL_KNN")

    @classmethod
    def from_config(cls, matching_config: Dict[str, Any]) -> "DescriptorMatcher":
        return cls(
            matcher_type=matching_config.get('matcher_type', 'MAT_BF'),
            selector_type=matching_config.get('selector_type', 'SEL_KNN'),
            ratio_threshold=matching_config.get('ratio_threshold', 0.8),
            cross_check=matching_config.get('cross_check', False)
        )

    def validate(self, prev_descriptors: np.ndarray, curr_descriptors: np.ndarray,
                 family: DescriptorFamily):
        """Reject inputs whose element type does not fit the metric."""
        if prev_descriptors is None or curr_descriptors is None:
            raise FatalPipelineError("Descriptors missing for one of the frames")

        for descriptors in (prev_descriptors, curr_descriptors):
            if descriptors.size == 0:
                continue
            if family == DescriptorFamily.BINARY and descriptors.dtype != np.uint8:
                raise FatalPipelineError(
                    f"Binary metric needs uint8 descriptors, got {descriptors.dtype}"
                )
            if family == DescriptorFamily.HOG and not np.issubdtype(descriptors.dtype, np.floating):
                raise FatalPipelineError(
                    f"L2 metric needs floating point descriptors, got {descriptors.dtype}"
                )

        if prev_descriptors.size and curr_descriptors.size:
            if prev_descriptors.dtype != curr_descriptors.dtype:
                raise FatalPipelineError(
                    f"Descriptor types differ: {prev_descriptors.dtype} vs {curr_descriptors.dtype}"
                )
            if prev_descriptors.shape[1] != curr_descriptors.shape[1]:
                raise FatalPipelineError(
                    f"Descriptor widths differ: {prev_descriptors.shape[1]} vs "
                    f"{curr_descriptors.shape[1]}"
                )

    def create_backend(self, family: DescriptorFamily):
        """OpenCV matcher for the configured search strategy and metric."""
        if self.matcher_type == MatcherType.FLANN:
            return cv2.FlannBasedMatcher()

        norm_type = cv2.NORM_L2 if family == DescriptorFamily.HOG else cv2.NORM_HAMMING
        return cv2.BFMatcher(norm_type, crossCheck=self.cross_check)

    def match(self, prev_descriptors: np.ndarray, curr_descriptors: np.ndarray,
              family: DescriptorFamily) -> List[cv2.DMatch]:
        """
        Match previous-frame descriptors against current-frame descriptors.

        Args:
            prev_descriptors: Source matrix (queryIdx indexes its rows)
            curr_descriptors: Reference matrix (trainIdx indexes its rows)
            family: Descriptor family that produced both matrices

        Returns:
            List of cv2.DMatch
        """
        family = parse_enum(DescriptorFamily, family)
        self.validate(prev_descriptors, curr_descriptors, family)

        if len(prev_descriptors) == 0 or len(curr_descriptors) == 0:
            return []

        if self.matcher_type == MatcherType.FLANN:
            # FLANN indexes only work on float data
            prev_descriptors = prev_descriptors.astype(np.float32)
            curr_descriptors = curr_descriptors.astype(np.float32)

        matcher = self.create_backend(family)

        if self.selector_type == SelectorType.NEAREST_NEIGHBOR:
            matches = list(matcher.match(prev_descriptors, curr_descriptors))
        else:
            if len(curr_descriptors) < 2:
                # no runner-up exists, so the ratio test rejects every row
                return []
            knn_matches = matcher.knnMatch(prev_descriptors, curr_descriptors, k=2)
            matches = ratio_test(knn_matches, self.ratio_threshold)

        logger.debug(f"{self.selector_type.value} found {len(matches)} matches")
        return matches
