"""Encoding route implementations."""

from .base import EncodingContext, BaseEncoder
from .dolby_vision import DolbyVisionEncoder
from .factory import EncoderFactory, factory
from .standard import X265Encoder

__all__ = [
    'EncodingContext',
    'BaseEncoder',
    'DolbyVisionEncoder',
    'EncoderFactory',
    'X265Encoder',
    'factory'
]
