"""Error types raised by the feature pipeline and sweep harness."""


class FeatureBenchError(Exception):
    """Base class for featurebench errors."""


class InvalidCombinationError(FeatureBenchError):
    """Detector/descriptor pair is known to be incompatible."""
    
    def __init__(self, detector: str, descriptor: str, reason: str = ""):
        self.detector = detector
        self.descriptor = descriptor
        self.reason = reason
        message = f"invalid combination: detector: {detector} descriptor: {descriptor}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class EmptyBufferError(FeatureBenchError, LookupError):
    """Fewer frames are buffered than were requested."""


class FatalPipelineError(FeatureBenchError):
    """Aborts the current detector/descriptor run."""
