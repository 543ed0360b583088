"""Video entity aggregating probed metadata and the applied crop."""

from pathlib import Path
from typing import Optional, Union

from loguru import logger

from .errors import ConversionError
from .probe import probe_metadata
from .types import CropInfo, VideoMetadata


class Video:
    """A source video file.

    Metadata is probed once, by :meth:`open`, and never changes. The
    effective geometry starts as the full frame and is narrowed at most once
    by :meth:`apply_crop`.
    """

    def __init__(self, path: Union[str, Path], metadata: VideoMetadata):
        """Initialize video.

        Args:
            path: Path to the video file
            metadata: Probed metadata of the file
        """
        self.path = Path(path)
        self.metadata = metadata
        self.width = self.metadata.width
        self.height = self.metadata.height
        self.crop_x = 0
        self.crop_y = 0
        self._crop: Optional[CropInfo] = None
        self._crop_applied = False

    @classmethod
    async def open(cls, path: Union[str, Path], ffprobe: str = "ffprobe",
                   timeout: Optional[float] = None) -> "Video":
        """Probe a file and wrap its metadata.

        Raises:
            ProbeError: If the file cannot be probed
        """
        path = Path(path)
        return cls(path, await probe_metadata(path, ffprobe, timeout))

    @property
    def pixel_count(self) -> int:
        """Pixels per encoded frame."""
        return self.width * self.height

    @property
    def pix_fmt(self) -> str:
        return self.metadata.pix_fmt

    @property
    def crop(self) -> Optional[CropInfo]:
        """Crop to apply when encoding, None when the full frame is kept."""
        return self._crop

    @property
    def is_cropped(self) -> bool:
        return self._crop is not None

    def apply_crop(self, crop: CropInfo) -> None:
        """Narrow the effective geometry to a detected crop.

        An empty crop, or one covering the full frame, leaves the geometry
        untouched.

        Raises:
            ConversionError: If a crop was already applied or does not fit the frame
        """
        if self._crop_applied:
            raise ConversionError(f"Crop already applied to {self.path.name}")
        self._crop_applied = True

        if crop.is_empty:
            logger.info("No crop detected, keeping full frame")
            return
        if not crop.fits(self.metadata.width, self.metadata.height):
            raise ConversionError(
                f"Crop {crop.to_ffmpeg_filter()} exceeds frame "
                f"{self.metadata.width}x{self.metadata.height}"
            )
        if crop.width == self.metadata.width and crop.height == self.metadata.height:
            logger.info("Detected crop covers the full frame, nothing to remove")
            return

        self._crop = crop
        self.width = crop.width
        self.height = crop.height
        self.crop_x = crop.x
        self.crop_y = crop.y
        logger.info(
            f"Cropping {self.metadata.width}x{self.metadata.height} "
            f"to {crop.width}x{crop.height} at ({crop.x}, {crop.y})"
        )

    def __repr__(self) -> str:
        return f"Video({self.path.name!r}, {self.width}x{self.height}, {self.pix_fmt})"
