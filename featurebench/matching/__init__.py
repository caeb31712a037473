from .descriptor_matcher import DescriptorMatcher, ratio_test, check_same_family

__all__ = ['DescriptorMatcher', 'ratio_test', 'check_same_family']
