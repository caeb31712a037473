from .descriptor_extractor import DescriptorExtractor, create_extractor_backend

__all__ = ['DescriptorExtractor', 'create_extractor_backend']
