"""Default configuration values."""

import os
import shutil


def _tool(name: str) -> str:
    """Resolve an external tool from the environment, then PATH."""
    return os.getenv(f"SIMPLECONVERT_{name.upper()}", shutil.which(name) or name)


# External tools
FFMPEG = _tool("ffmpeg")
FFPROBE = _tool("ffprobe")
X265 = _tool("x265")
DOVI_TOOL = _tool("dovi_tool")

# Probing
PROBE_TIMEOUT = 120.0  # Seconds before ffprobe is killed

# Crop detection
CROP_SKIP_SECONDS = 60  # Warm-up skipped before the first window
CROP_WINDOW_COUNT = 10  # Concurrent cropdetect passes
CROP_SAMPLE_SECONDS = 60  # Upper bound on each pass
CROP_TIMEOUT = 600.0  # Seconds before a pass counts as failed

# Content classification
HDR_PIX_FMT = "yuv420p10le"

# Dolby Vision (profile 8.1)
DV_PROFILE = "8.1"
DV_CONVERSION_MODE = 2  # dovi_tool -m 2: convert to profile 8.1
VBV_BUFSIZE = 160000
VBV_MAXRATE = 160000

# Batch mode
SUPPORTED_EXTENSIONS = (".mkv", ".mp4")

# Pre-flight checks
MIN_DISK_GB = 10.0

# Output
OVERWRITE = False
SHOW_PROGRESS = True

# Logging
LOG_LEVEL = "INFO"
