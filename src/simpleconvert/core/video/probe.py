"""Stream metadata probing.

Reads the geometry and color tags of the first video frame plus the container
duration with a single ffprobe call. Only one frame is decoded so probing
stays cheap even for very long files.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from simpleconvert.core.process import run_command
from .errors import ProbeError
from .types import MasteringDisplay, VideoMetadata

FRAME_ENTRIES = "color_space,color_primaries,color_transfer,side_data_list,pix_fmt,width,height"
MASTERING_DISPLAY_TYPE = "Mastering display metadata"
MASTERING_FIELDS = (
    "red_x", "red_y",
    "green_x", "green_y",
    "blue_x", "blue_y",
    "white_point_x", "white_point_y",
    "min_luminance", "max_luminance",
)


def normalize_fraction(value: str) -> str:
    """Return the part of an ``N/D`` value before the first slash.

    No division is performed: ``"120/255"`` becomes ``"120"`` and values
    without a slash are returned unchanged.
    """
    return value.split("/", 1)[0]


def build_probe_command(ffprobe: str, input_path: Path) -> List[str]:
    """Build the ffprobe command for one frame plus container duration."""
    return [
        ffprobe,
        "-hide_banner",
        "-loglevel", "warning",
        "-select_streams", "v:0",
        "-print_format", "json",
        "-show_frames",
        "-read_intervals", "%+#1",
        "-show_entries", f"frame={FRAME_ENTRIES}",
        "-show_entries", "format=duration",
        "-i", str(input_path),
    ]


def _find_mastering_display(side_data: List[Dict[str, Any]]) -> Optional[MasteringDisplay]:
    """Pick the mastering display entry out of a frame's side data."""
    entry = next(
        (d for d in side_data if d.get("side_data_type") == MASTERING_DISPLAY_TYPE),
        None
    )
    if entry is None:
        entry = next((d for d in side_data if "red_x" in d), None)
    if entry is None:
        return None
    if any(field not in entry for field in MASTERING_FIELDS):
        logger.warning("Incomplete mastering display metadata, ignoring it")
        return None
    return MasteringDisplay(**{field: str(entry[field]) for field in MASTERING_FIELDS})


def parse_probe_output(data: Dict[str, Any]) -> VideoMetadata:
    """Convert ffprobe's JSON document into VideoMetadata.

    Raises:
        ProbeError: If a required field is missing
    """
    frames = data.get("frames") or []
    if not frames:
        raise ProbeError("No video frame in probe output")
    frame = frames[0]

    missing = [key for key in ("width", "height", "pix_fmt") if key not in frame]
    duration = (data.get("format") or {}).get("duration")
    if duration is None:
        missing.append("duration")
    if missing:
        raise ProbeError(f"Probe output is missing required fields: {', '.join(missing)}")

    try:
        float(duration)
    except (TypeError, ValueError) as e:
        raise ProbeError(f"Invalid duration value from FFprobe: {duration!r}") from e

    return VideoMetadata(
        width=int(frame["width"]),
        height=int(frame["height"]),
        pix_fmt=frame["pix_fmt"],
        duration=str(duration),
        color_primaries=frame.get("color_primaries"),
        color_space=frame.get("color_space"),
        color_transfer=frame.get("color_transfer"),
        mastering_display=_find_mastering_display(frame.get("side_data_list") or []),
    )


async def probe_metadata(input_path: Path, ffprobe: str = "ffprobe",
                         timeout: Optional[float] = None) -> VideoMetadata:
    """Probe a video file.

    Args:
        input_path: Path to input video file
        ffprobe: FFprobe binary
        timeout: Optional timeout in seconds, ffprobe is killed when it expires

    Returns:
        Metadata of the first video frame and the container

    Raises:
        ProbeError: If ffprobe cannot start, fails, times out, or returns
            incomplete data
    """
    cmd = build_probe_command(ffprobe, input_path)
    try:
        result = await run_command(cmd, timeout=timeout, check=False)
    except OSError as e:
        raise ProbeError(f"FFprobe could not be started: {e}", cmd=cmd) from e
    except asyncio.TimeoutError as e:
        raise ProbeError(f"FFprobe timed out after {timeout}s", cmd=cmd) from e

    if result.returncode != 0:
        raise ProbeError(
            f"FFprobe exited with code {result.returncode}",
            cmd=cmd,
            stderr=result.stderr
        )

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise ProbeError(f"Failed to parse FFprobe output: {e}", cmd=cmd) from e

    metadata = parse_probe_output(data)
    logger.debug(f"Probed {input_path.name}: {metadata}")
    return metadata
