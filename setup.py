from setuptools import setup, find_packages

setup(
    name="featurebench",
    version="1.0.0",
    description="Keypoint detector and descriptor benchmarking for feature tracking",
    author="featurebench",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    install_requires=[
        "opencv-contrib-python>=4.8.0,<5",
        "numpy>=1.24.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.9",
)
