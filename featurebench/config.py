"""
Configuration management for featurebench
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG = {
    "images": {
        "base_path": "images/",
        "prefix": "KITTI/2011_09_26/image_00/data/000000",
        "file_type": ".png",
        "start_index": 0,
        "end_index": 9,
        "fill_width": 4
    },
    "buffer": {
        "capacity": 2
    },
    "roi": {
        "enabled": True,
        "x": 535,
        "y": 180,
        "width": 180,
        "height": 150
    },
    "detection": {
        "shi_tomasi": {
            "block_size": 4,
            "max_overlap": 0.0,
            "quality_level": 0.01,
            "k": 0.04
        },
        "harris": {
            "block_size": 2,
            "aperture_size": 3,
            "k": 0.04,
            "threshold": 100,
            "max_overlap": 0.0
        },
        "max_keypoints": None
    },
    "description": {
        "brisk": {
            "threshold": 30,
            "octaves": 3,
            "pattern_scale": 1.0
        }
    },
    "matching": {
        "matcher_type": "MAT_BF",
        "selector_type": "SEL_KNN",
        "ratio_threshold": 0.8,
        "cross_check": False
    },
    "sweep": {
        "detectors": ["SHITOMASI", "HARRIS", "FAST", "BRISK", "ORB", "AKAZE", "SIFT"],
        "descriptors": ["BRISK", "BRIEF", "ORB", "FREAK", "AKAZE", "SIFT"]
    },
    "output": {
        "report_path": "results.csv",
        "summary_path": None,
        "visualize": False
    }
}


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overrides into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration, layering a YAML file over the defaults.
    
    Args:
        config_path: Optional path to a YAML file
        
    Returns:
        Complete configuration dictionary
    """
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    with open(path, 'r') as f:
        overrides = yaml.safe_load(f) or {}
    
    if not isinstance(overrides, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    
    return merge_config(DEFAULT_CONFIG, overrides)
