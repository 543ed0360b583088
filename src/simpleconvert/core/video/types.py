"""Common video conversion types."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

CROP_TOKEN = re.compile(r"crop=(\d+):(\d+):(\d+):(\d+)")


class Route(Enum):
    """Encoding route chosen for one conversion."""
    SDR = "sdr"
    HDR10 = "hdr10"
    DOLBY_VISION = "dolby_vision"


@dataclass(frozen=True)
class MasteringDisplay:
    """Mastering display side data as reported by ffprobe.

    All values are the raw ``N/D`` strings, e.g. ``"34000/50000"``.
    """
    red_x: str
    red_y: str
    green_x: str
    green_y: str
    blue_x: str
    blue_y: str
    white_point_x: str
    white_point_y: str
    min_luminance: str
    max_luminance: str


@dataclass(frozen=True)
class VideoMetadata:
    """Probed properties of the first video frame and the container.

    Attributes:
        width: Frame width in pixels
        height: Frame height in pixels
        pix_fmt: Pixel format (e.g. yuv420p, yuv420p10le)
        duration: Container duration string as reported (e.g. "5400.021000")
        color_primaries: Color primaries (e.g. bt2020)
        color_space: Color space / matrix (e.g. bt2020nc)
        color_transfer: Transfer characteristics (e.g. smpte2084)
        mastering_display: Mastering display side data, if present
    """
    width: int
    height: int
    pix_fmt: str
    duration: str
    color_primaries: Optional[str] = None
    color_space: Optional[str] = None
    color_transfer: Optional[str] = None
    mastering_display: Optional[MasteringDisplay] = None

    @property
    def duration_seconds(self) -> int:
        """Whole seconds of the container duration."""
        return int(float(self.duration))


@dataclass(frozen=True)
class CropInfo:
    """A crop rectangle.

    Used for a single cropdetect result as well as the aggregated crop of a
    whole file. An all-zero crop means no crop was detected.
    """
    width: int = 0
    height: int = 0
    x: int = 0
    y: int = 0

    @property
    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0 and self.x == 0 and self.y == 0

    def is_tighter_or_equal(self, other: "CropInfo") -> bool:
        """True if this crop is not larger and not more permissive than ``other``."""
        return (
            self.width <= other.width and
            self.height <= other.height and
            self.x >= other.x and
            self.y >= other.y
        )

    def fits(self, width: int, height: int) -> bool:
        """Check the rectangle lies inside a frame of the given size."""
        return self.x + self.width <= width and self.y + self.height <= height

    def to_ffmpeg_filter(self) -> str:
        return f"crop={self.width}:{self.height}:{self.x}:{self.y}"


@dataclass(frozen=True)
class WindowResult:
    """Outcome of one crop detection window.

    Attributes:
        index: Window position, 0-based
        start: Window start in seconds
        crop: Last crop reported in the window, None if nothing usable
        error: Failure description when the window failed
    """
    index: int
    start: int
    crop: Optional[CropInfo] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class EncodeProfile:
    """Rate control settings for one encode.

    Attributes:
        crf: Constant Rate Factor
        preset: x265 speed preset (e.g. superfast, medium)
    """
    crf: int
    preset: str
