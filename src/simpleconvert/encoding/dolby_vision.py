"""Dolby Vision encoder implementation."""

from pathlib import Path

from loguru import logger

from simpleconvert.core.video.errors import ConversionError
from simpleconvert.core.video.hdr import build_master_display, require_color_tags
from simpleconvert.core.video.types import Route
from .base import BaseEncoder, EncodingContext
from .commands import (
    build_dovi_extract_command,
    build_hevc_remux_command,
    build_x265_dv_command,
    build_y4m_command,
)

RPU_SUFFIX = ".rpu"
HEVC_SUFFIX = ".hevc"


def rpu_path(input_path: Path) -> Path:
    """Sidecar RPU file kept next to the source, e.g. ``movie.mkv.rpu``."""
    return Path(f"{input_path}{RPU_SUFFIX}")


class DolbyVisionEncoder(BaseEncoder):
    """Encoder for Dolby Vision content using ffmpeg, dovi_tool and x265.

    Stages:
    1. Extract the RPU from the source bitstream, reusing an existing sidecar
    2. Decode to Y4M with ffmpeg and encode with x265, injecting the RPU
    3. Leave the elementary HEVC stream for muxing
    """

    REQUIRED_DEPENDENCIES = ("ffmpeg", "x265", "dovi_tool")
    ROUTES = (Route.DOLBY_VISION,)

    def output_artifact(self, context: EncodingContext) -> Path:
        return Path(f"{context.output_path}{HEVC_SUFFIX}")

    async def _encode(self, context: EncodingContext) -> Path:
        # Fail on missing HDR metadata before spending time on extraction
        require_color_tags(context.metadata)
        build_master_display(context.metadata)

        rpu = await self.extract_rpu(context.input_path)
        output = self.output_artifact(context)

        producer = build_y4m_command(
            self.config.ffmpeg, context.input_path, context.metadata.pix_fmt, context.crop
        )
        consumer = build_x265_dv_command(
            self.config.x265,
            context.metadata,
            context.profile,
            rpu,
            output,
            dv_profile=self.config.dv_profile,
            vbv_bufsize=self.config.vbv_bufsize,
            vbv_maxrate=self.config.vbv_maxrate,
        )
        await self._run_piped(producer, consumer, "Dolby Vision encode")

        logger.info(f"Encoded Dolby Vision stream {output}")
        logger.warning(f"{output.name} is an elementary HEVC stream and still needs muxing")
        return output

    async def extract_rpu(self, input_path: Path) -> Path:
        """Extract the Dolby Vision RPU of a source into its sidecar file.

        An existing sidecar is reused untouched. The RPU is written to a
        temporary file first and only renamed once both processes succeeded.

        Args:
            input_path: Source video

        Returns:
            Path of the RPU sidecar

        Raises:
            ConversionError: If extraction fails
        """
        rpu = rpu_path(input_path)
        if rpu.exists():
            logger.info(f"Reusing existing RPU file {rpu.name}")
            return rpu

        tmp = rpu.with_name(rpu.name + ".tmp")
        producer = build_hevc_remux_command(self.config.ffmpeg, input_path)
        consumer = build_dovi_extract_command(
            self.config.dovi_tool, tmp, self.config.dv_conversion_mode
        )
        try:
            await self._run_piped(producer, consumer, "RPU extraction")
            if not tmp.exists():
                raise ConversionError(f"dovi_tool did not write {tmp.name}", cmd=consumer)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

        tmp.replace(rpu)
        logger.info(f"Extracted RPU to {rpu.name}")
        return rpu
