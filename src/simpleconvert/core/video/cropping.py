"""Black bar detection utilities."""

import asyncio
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import ffmpeg
from loguru import logger
from tqdm import tqdm

from simpleconvert.config import ConversionConfig
from simpleconvert.core.process import run_command
from .errors import CropDetectionError
from .types import CROP_TOKEN, CropInfo, WindowResult
from .video import Video


@dataclass(frozen=True)
class CropWindow:
    """Time range analysed by one cropdetect pass."""
    index: int
    start: int
    length: int


def plan_windows(duration: int, skip: int, count: int, sample: int) -> List[CropWindow]:
    """Split the analysable duration into equal consecutive windows.

    Args:
        duration: Container duration in whole seconds
        skip: Seconds to skip at the start
        count: Number of windows
        sample: Maximum seconds analysed per window

    Returns:
        Windows in chronological order, empty if there is nothing to analyse
    """
    if duration <= 0:
        return []
    start = skip if duration > skip else 0
    remaining = duration - start
    segment = remaining // count
    if segment == 0:
        # Too short to split, analyse what is left in one pass
        return [CropWindow(0, start, min(remaining, sample))]
    length = min(segment, sample)
    return [CropWindow(i, start + segment * i, length) for i in range(count)]


def build_cropdetect_command(ffmpeg_bin: str, input_path: Path, window: CropWindow) -> List[str]:
    """Build the ffmpeg cropdetect command for one window."""
    stream = ffmpeg.input(str(input_path), ss=window.start, t=window.length)
    stream = ffmpeg.filter(stream, "cropdetect")
    return (
        ffmpeg.output(stream, "-", format="null")
        .global_args("-hide_banner", "-nostdin")
        .compile(cmd=ffmpeg_bin)
    )


def parse_crop_output(output: str, width: int, height: int) -> Optional[CropInfo]:
    """Get the last valid crop reported in cropdetect output.

    cropdetect refines its estimate as it sees more frames, so later tokens
    supersede earlier ones. Tokens larger than the frame are ignored.
    """
    crop = None
    invalid = 0
    for match in CROP_TOKEN.finditer(output):
        candidate = CropInfo(*(int(value) for value in match.groups()))
        if candidate.width <= width and candidate.height <= height:
            crop = candidate
        else:
            invalid += 1
    if invalid:
        logger.debug(f"Ignored {invalid} crop values larger than {width}x{height}")
    return crop


def reduce_crops(candidates: Iterable[Optional[CropInfo]]) -> CropInfo:
    """Reduce window candidates to the tightest crop.

    A candidate replaces the current best only if it is not larger in width
    or height and its offsets are greater than or equal. Equal candidates keep
    the first one found. A candidate that is tighter on one axis and looser on
    another is merged componentwise, so the result is never larger or more
    permissive than any single candidate.

    Returns:
        Aggregated crop, all zero if there were no candidates
    """
    best = None
    for candidate in candidates:
        if candidate is None:
            continue
        if best is None or candidate == best:
            best = best or candidate
        elif candidate.is_tighter_or_equal(best):
            best = candidate
        elif not best.is_tighter_or_equal(candidate):
            best = CropInfo(
                width=min(best.width, candidate.width),
                height=min(best.height, candidate.height),
                x=max(best.x, candidate.x),
                y=max(best.y, candidate.y),
            )
    return best or CropInfo()


class CropDetector:
    """Detects letterbox borders by sampling a video at several offsets."""

    def __init__(self, config: ConversionConfig):
        self.config = config

    async def detect(self, video: Video) -> CropInfo:
        """Detect the crop of a video.

        One cropdetect pass runs per window, all of them concurrently. The
        results are reduced only after every window has reported. Failed
        windows are logged and skipped.

        Args:
            video: Video to analyse

        Returns:
            Aggregated crop, all zero if nothing was detected
        """
        windows = plan_windows(
            video.metadata.duration_seconds,
            self.config.crop_skip_seconds,
            self.config.crop_window_count,
            self.config.crop_sample_seconds,
        )
        if not windows:
            logger.warning(f"Nothing to analyse for crop detection in {video.path.name}")
            return CropInfo()

        logger.info(f"Detecting crop in {len(windows)} windows of {video.path.name}")
        with tqdm(total=len(windows), desc="Crop detection", unit="window",
                  disable=not self.config.show_progress, leave=False) as progress:
            tasks = [
                asyncio.ensure_future(self._detect_window(video, window, progress))
                for window in windows
            ]
            try:
                results = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        failed = [result for result in results if result.crop is None]
        if failed:
            logger.warning(f"{len(failed)} of {len(results)} crop windows contributed nothing")

        crop = reduce_crops(result.crop for result in results)
        logger.info(f"Final crop: {crop.to_ffmpeg_filter()}")
        return crop

    async def _detect_window(self, video: Video, window: CropWindow,
                             progress: tqdm) -> WindowResult:
        """Run cropdetect over one window."""
        cmd = build_cropdetect_command(self.config.ffmpeg, video.path, window)
        logger.debug(f"Start crop scan: window {window.index} at {window.start}s")
        try:
            result = await run_command(cmd, timeout=self.config.crop_timeout)
        except subprocess.CalledProcessError as e:
            return self._failed(window, f"ffmpeg exited with code {e.returncode}", e.stderr)
        except asyncio.TimeoutError:
            return self._failed(window, f"timed out after {self.config.crop_timeout}s")
        except OSError as e:
            return self._failed(window, f"ffmpeg could not be started: {e}")
        finally:
            progress.update(1)

        crop = parse_crop_output(result.stderr, video.metadata.width, video.metadata.height)
        if crop is None:
            return self._failed(window, "no crop reported")
        logger.debug(f"Window {window.index} crop: {crop.to_ffmpeg_filter()}")
        return WindowResult(window.index, window.start, crop=crop)

    @staticmethod
    def _failed(window: CropWindow, reason: str, details: Optional[str] = None) -> WindowResult:
        error = CropDetectionError(reason, window=window.index, details=details)
        logger.warning(f"Crop window {error.window} at {window.start}s failed: {error.message}")
        return WindowResult(window.index, window.start, error=error.message)
