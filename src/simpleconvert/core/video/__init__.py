"""Video analysis: probing, crop detection, quality and HDR handling."""

from .errors import (
    VideoError,
    ProbeError,
    CropDetectionError,
    ConversionError,
    ConfigurationError,
)
from .types import CropInfo, EncodeProfile, MasteringDisplay, Route, VideoMetadata, WindowResult
from .video import Video

__all__ = [
    'VideoError',
    'ProbeError',
    'CropDetectionError',
    'ConversionError',
    'ConfigurationError',
    'CropInfo',
    'EncodeProfile',
    'MasteringDisplay',
    'Route',
    'VideoMetadata',
    'WindowResult',
    'Video',
]
