"""Quality settings selection.

CRF and preset are chosen from the number of pixels that will actually be
encoded (after cropping). The two tables are independent: their band edges do
not line up.
"""

import math
from typing import Optional

from loguru import logger

from .errors import ConfigurationError
from .types import EncodeProfile

# Pixel count boundaries
UHD_MIN_PIXELS = 6_144_000  # 3840x1600 (21:9 UHD)
INTERPOLATED_MIN_PIXELS = 2_211_841  # just above 2048x1080
INTERPOLATED_MAX_PIXELS = 6_143_999
INTERPOLATED_STEPS = 4
FHD_MIN_PIXELS = 2_073_600  # 1920x1080
FHD_MAX_PIXELS = 2_211_840  # 2048x1080
WIDE_FHD_MIN_PIXELS = 1_536_000  # 1920x800 (21:9 FHD)
PRESET_FASTEST_MIN_PIXELS = 8_294_400  # 3840x2160

CRF_UHD = 13
CRF_INTERPOLATED_START = 18
CRF_INTERPOLATED_FLOOR = 14
CRF_FHD = 18
CRF_WIDE_FHD = 19
CRF_SD = 20

PRESETS = ("ultrafast", "superfast", "veryfast", "faster", "fast", "medium",
           "slow", "slower", "veryslow", "placebo")


def select_crf(pixel_count: int) -> int:
    """Get CRF for a frame size.

    Between 2K and 21:9 UHD the CRF drops by one for each of four equal
    pixel-count sub-bands, from 18 towards 14.
    """
    if pixel_count >= UHD_MIN_PIXELS:
        return CRF_UHD
    if pixel_count >= INTERPOLATED_MIN_PIXELS:
        step = (INTERPOLATED_MAX_PIXELS - INTERPOLATED_MIN_PIXELS) // INTERPOLATED_STEPS
        steps = math.ceil((pixel_count - INTERPOLATED_MIN_PIXELS) / step)
        return max(CRF_INTERPOLATED_START - steps, CRF_INTERPOLATED_FLOOR)
    if pixel_count >= FHD_MIN_PIXELS:
        return CRF_FHD
    if pixel_count >= WIDE_FHD_MIN_PIXELS:
        return CRF_WIDE_FHD
    return CRF_SD


def select_preset(pixel_count: int) -> str:
    """Get x265 preset for a frame size; larger frames get faster presets."""
    if pixel_count >= PRESET_FASTEST_MIN_PIXELS:
        return "superfast"
    if pixel_count >= INTERPOLATED_MIN_PIXELS:
        return "veryfast"
    if pixel_count >= FHD_MIN_PIXELS:
        return "faster"
    if pixel_count >= WIDE_FHD_MIN_PIXELS:
        return "fast"
    return "medium"


def validate_crf(crf: object) -> int:
    """Validate a caller supplied CRF.

    Raises:
        ConfigurationError: If the value is not a non-negative integer
    """
    if isinstance(crf, bool):
        raise ConfigurationError(f"Invalid CRF value: {crf!r}")
    if isinstance(crf, str):
        if not crf.strip().isdecimal():
            raise ConfigurationError(f"Invalid CRF value: {crf!r}")
        return int(crf)
    if not isinstance(crf, int) or crf < 0:
        raise ConfigurationError(f"Invalid CRF value: {crf!r}")
    return crf


def get_encode_profile(pixel_count: int, crf: Optional[object] = None,
                       preset: Optional[str] = None) -> EncodeProfile:
    """Get CRF and preset for an encode.

    Args:
        pixel_count: Encoded width times height
        crf: Optional CRF override, used as-is once validated
        preset: Optional preset override, passed through unchecked

    Returns:
        Encode profile for the conversion
    """
    profile = EncodeProfile(
        crf=validate_crf(crf) if crf is not None else select_crf(pixel_count),
        preset=preset if preset else select_preset(pixel_count),
    )
    logger.info(
        f"Encode profile for {pixel_count} px: crf={profile.crf} preset={profile.preset}"
        f"{' (override)' if crf is not None or preset else ''}"
    )
    return profile
