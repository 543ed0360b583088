"""Configuration module for conversion settings."""

from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, Field, ConfigDict, field_validator

from . import default_config as defaults


class ConversionConfig(BaseModel):
    """Configuration for video conversion."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_default=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )

    # External tools
    ffmpeg: str = Field(defaults.FFMPEG, description="FFmpeg binary")
    ffprobe: str = Field(defaults.FFPROBE, description="FFprobe binary")
    x265: str = Field(defaults.X265, description="x265 encoder binary")
    dovi_tool: str = Field(defaults.DOVI_TOOL, description="dovi_tool binary")

    # Probing
    probe_timeout: Optional[float] = Field(
        defaults.PROBE_TIMEOUT,
        gt=0,
        description="ffprobe timeout in seconds (None waits forever)"
    )

    # Crop detection
    crop_skip_seconds: int = Field(
        defaults.CROP_SKIP_SECONDS,
        ge=0,
        description="Seconds skipped at the start before crop sampling"
    )
    crop_window_count: int = Field(
        defaults.CROP_WINDOW_COUNT,
        ge=1,
        description="Number of concurrent crop detection windows"
    )
    crop_sample_seconds: int = Field(
        defaults.CROP_SAMPLE_SECONDS,
        ge=1,
        description="Maximum length of each crop detection pass"
    )
    crop_timeout: Optional[float] = Field(
        defaults.CROP_TIMEOUT,
        gt=0,
        description="Per-window timeout in seconds (None waits forever)"
    )

    # Content classification
    hdr_pix_fmt: str = Field(
        defaults.HDR_PIX_FMT,
        description="Pixel format that marks content as HDR10"
    )

    # Dolby Vision
    dv_profile: str = Field(defaults.DV_PROFILE, description="Target Dolby Vision profile")
    dv_conversion_mode: int = Field(
        defaults.DV_CONVERSION_MODE,
        ge=0,
        description="dovi_tool conversion mode used during RPU extraction"
    )
    vbv_bufsize: int = Field(defaults.VBV_BUFSIZE, gt=0, description="x265 VBV buffer size (kbit)")
    vbv_maxrate: int = Field(defaults.VBV_MAXRATE, gt=0, description="x265 VBV max rate (kbit/s)")

    # Batch mode
    supported_extensions: Tuple[str, ...] = Field(
        defaults.SUPPORTED_EXTENSIONS,
        description="Input extensions converted in directory mode"
    )

    # Pre-flight checks
    min_disk_gb: float = Field(
        defaults.MIN_DISK_GB,
        ge=0,
        description="Minimum free disk space in GB at the output location"
    )

    # Output
    overwrite: bool = Field(defaults.OVERWRITE, description="Overwrite existing outputs")
    show_progress: bool = Field(defaults.SHOW_PROGRESS, description="Show tqdm progress bars")

    # Logging
    log_level: str = Field(defaults.LOG_LEVEL, description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Log file path")

    @field_validator("supported_extensions")
    @classmethod
    def _normalize_extensions(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        """Lower-case extensions and make sure they start with a dot."""
        return tuple(
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in value
        )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    def is_supported(self, path: Path) -> bool:
        """Check whether a file has an extension handled in batch mode."""
        return path.suffix.lower() in self.supported_extensions
