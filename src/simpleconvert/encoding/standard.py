"""Single pass ffmpeg/libx265 encoder for SDR and HDR10 content."""

from pathlib import Path
from typing import Callable

from loguru import logger
from tqdm import tqdm

from simpleconvert.core.video.hdr import build_x265_hdr_params
from simpleconvert.core.video.types import Route
from .base import BaseEncoder, EncodingContext
from .commands import build_encode_command


def progress_updater(bar: tqdm) -> Callable[[str], None]:
    """Create a callback feeding ffmpeg ``-progress`` lines into a tqdm bar."""
    def update(line: str) -> None:
        key, _, value = line.partition("=")
        # out_time_us is N/A until the first frame is written
        if key != "out_time_us" or not value.isdigit():
            return
        seconds = int(value) / 1_000_000
        if bar.total:
            seconds = min(seconds, bar.total)
        if seconds > bar.n:
            bar.update(seconds - bar.n)
    return update


class X265Encoder(BaseEncoder):
    """Encoder running one ffmpeg invocation with libx265.

    Video is re-encoded at the source pixel format, audio and subtitles are
    copied. HDR10 content additionally gets the x265 HDR parameter block.
    """

    REQUIRED_DEPENDENCIES = ("ffmpeg",)
    ROUTES = (Route.SDR, Route.HDR10)

    async def _encode(self, context: EncodingContext) -> Path:
        x265_params = None
        if context.route is Route.HDR10:
            x265_params = build_x265_hdr_params(context.metadata)

        cmd = build_encode_command(
            self.config.ffmpeg,
            context.input_path,
            context.output_path,
            pix_fmt=context.metadata.pix_fmt,
            profile=context.profile,
            crop=context.crop,
            x265_params=x265_params,
            overwrite=self.config.overwrite,
            progress=self.config.show_progress,
        )

        with tqdm(total=context.metadata.duration_seconds, unit="s",
                  desc=context.input_path.name, disable=not self.config.show_progress,
                  bar_format="{l_bar}{bar}| {n:.0f}/{total_fmt}s [{elapsed}<{remaining}]") as bar:
            await self._run(cmd, f"{context.route.name} encode", on_stdout_line=progress_updater(bar))

        logger.info(f"Encoded {context.output_path}")
        return context.output_path
