"""Enumerations naming the detector, descriptor and matcher families."""

from enum import Enum
from typing import Type, TypeVar, Union

from featurebench.exceptions import FatalPipelineError


class DetectorType(str, Enum):
    SHITOMASI = "SHITOMASI"
    HARRIS = "HARRIS"
    FAST = "FAST"
    BRISK = "BRISK"
    ORB = "ORB"
    AKAZE = "AKAZE"
    SIFT = "SIFT"


class DescriptorType(str, Enum):
    BRISK = "BRISK"
    BRIEF = "BRIEF"
    ORB = "ORB"
    FREAK = "FREAK"
    AKAZE = "AKAZE"
    SIFT = "SIFT"


class DescriptorFamily(str, Enum):
    """Distance metric family: bit strings vs. gradient histograms."""
    BINARY = "DES_BINARY"
    HOG = "DES_HOG"


class MatcherType(str, Enum):
    BRUTE_FORCE = "MAT_BF"
    FLANN = "MAT_FLANN"


class SelectorType(str, Enum):
    NEAREST_NEIGHBOR = "SEL_NN"
    K_NEAREST_NEIGHBOR = "SEL_KNN"


E = TypeVar('E', bound=Enum)


def parse_enum(enum_cls: Type[E], name: Union[str, E]) -> E:
    """Resolve a configured name to an enum member."""
    if isinstance(name, enum_cls):
        return name
    try:
        return enum_cls(str(name).upper())
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        raise FatalPipelineError(
            f"Unknown {enum_cls.__name__} '{name}'. Use one of: {valid}"
        ) from None


def family_of(descriptor_type: DescriptorType) -> DescriptorFamily:
    """SIFT produces gradient histograms; every other family is binary."""
    if descriptor_type == DescriptorType.SIFT:
        return DescriptorFamily.HOG
    return DescriptorFamily.BINARY
