"""Basic usage example: one detector/descriptor pair on the KITTI sequence."""

from featurebench.config import load_config
from featurebench.description.descriptor_extractor import DescriptorExtractor
from featurebench.detection.detector_factory import create_detector
from featurebench.pipeline import FeaturePipeline
from featurebench.utils.io_handler import ImageSequence


def main():
    """Run the Harris detector with BRISK descriptors."""
    config = load_config()
    images = ImageSequence.from_config(config['images'])
    
    pipeline = FeaturePipeline.from_config(
        detector=create_detector("HARRIS", config),
        extractor=DescriptorExtractor("BRISK", config),
        image_source=images,
        config=config
    )
    
    print("Processing images...")
    rows = pipeline.run(images.indices())
    
    for row in rows:
        print(f"Image {row.image_index}: {row.keypoint_count} keypoints, "
              f"{row.detection_ms:.1f}ms detection, {row.description_ms:.1f}ms description, "
              f"{row.match_count} matches")


if __name__ == "__main__":
    main()
