"""I/O handling for image sequences, CSV reports and JSON summaries."""

import cv2
import csv
import json
import numpy as np
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from featurebench.exceptions import FatalPipelineError


REPORT_HEADER = [
    "Detector", "# Keypoints", "Time for detection (ms)",
    "Descriptor", "Time for description (ms)", "#matches"
]


class ImageSequence:
    """Load numbered grayscale images from disk."""
    
    def __init__(self, base_path: str = "images/", prefix: str = "",
                 file_type: str = ".png", start_index: int = 0,
                 end_index: int = 9, fill_width: int = 4):
        self.base_path = base_path
        self.prefix = prefix
        self.file_type = file_type
        self.start_index = start_index
        self.end_index = end_index
        self.fill_width = fill_width
    
    @classmethod
    def from_config(cls, images_config: Dict[str, Any]) -> "ImageSequence":
        return cls(**images_config)
    
    def indices(self) -> range:
        """Image indices covered by the sequence, inclusive of end_index."""
        return range(self.start_index, self.end_index + 1)
    
    def filename(self, image_index: int) -> str:
        """Assemble the file name for an image index."""
        number = str(image_index).zfill(self.fill_width)
        return f"{self.base_path}{self.prefix}{number}{self.file_type}"
    
    def load(self, image_index: int) -> np.ndarray:
        """
        Load an image and convert it to grayscale.
        
        Args:
            image_index: Absolute index of the image
            
        Returns:
            Grayscale uint8 image
        """
        path = self.filename(image_index)
        image = cv2.imread(path)
        if image is None:
            raise FatalPipelineError(f"Failed to load image from {path}")
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


class ImageListSource:
    """Serve in-memory images by position."""
    
    def __init__(self, images: Sequence[np.ndarray], start_index: int = 0):
        self.images = list(images)
        self.start_index = start_index
    
    def indices(self) -> range:
        return range(self.start_index, self.start_index + len(self.images))
    
    def load(self, image_index: int) -> np.ndarray:
        position = image_index - self.start_index
        if position < 0 or position >= len(self.images):
            raise FatalPipelineError(f"No image at index {image_index}")
        image = self.images[position]
        if image.ndim == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        return image


class CSVReportWriter:
    """Append-only CSV sink for sweep result rows."""
    
    def __init__(self, output_path: str, title: Optional[str] = None):
        self.output_path = output_path
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        self.file = open(output_path, 'w', newline='')
        self.writer = csv.writer(self.file)
        if title:
            self.writer.writerow([title])
        self.writer.writerow(REPORT_HEADER)
        self.rows_written = 0
    
    def write_row(self, row) -> None:
        """Write one (detector, keypoints, det ms, descriptor, desc ms, matches) row."""
        self.writer.writerow([
            row.detector,
            row.keypoint_count,
            f"{row.detection_ms:.4f}",
            row.descriptor,
            f"{row.description_ms:.4f}",
            row.match_count
        ])
        self.rows_written += 1
    
    def close(self):
        """Flush and close the report file."""
        if not self.file.closed:
            self.file.close()
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class JSONWriter:
    """Write sweep summaries to JSON."""
    
    @staticmethod
    def save_results(output: Any, output_path: str, indent: int = 2):
        """Save results to JSON file."""
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(output, f, indent=indent)


def read_report(report_path: str) -> List[List[str]]:
    """Read a CSV report back as rows of strings, header included."""
    with open(report_path, 'r', newline='') as f:
        return [row for row in csv.reader(f)]
