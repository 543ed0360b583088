"""simpleconvert - HEVC re-encoding with crop detection and HDR preservation."""

__version__ = "1.1.0"
