"""Main video processing module."""

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from loguru import logger

from .config import ConversionConfig
from .core.video.cropping import CropDetector
from .core.video.errors import ConfigurationError, VideoError
from .core.video.hdr import classify_route
from .core.video.quality import get_encode_profile, validate_crf
from .core.video.video import Video
from .encoding.base import EncodingContext
from .encoding.factory import EncoderFactory, factory as default_factory
from .utils.validation import validate_input_file, validate_output_path


@dataclass
class BatchResult:
    """Outcome of a directory conversion.

    Attributes:
        converted: Artifacts written, in processing order
        failed: Error message per input that failed
        skipped: Inputs ignored because of their extension
    """
    converted: List[Path] = field(default_factory=list)
    failed: Dict[Path, str] = field(default_factory=dict)
    skipped: List[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class VideoProcessor:
    """Runs the conversion pipeline for single files and directories."""

    def __init__(self, config: Optional[ConversionConfig] = None,
                 factory: Optional[EncoderFactory] = None):
        """Initialize video processor.

        Args:
            config: Conversion configuration, defaults if omitted
            factory: Encoder factory, the global one if omitted
        """
        self.config = config or ConversionConfig()
        self.factory = factory or default_factory
        self.crop_detector = CropDetector(self.config)

    async def convert(self, input_path: Union[str, Path], output_path: Union[str, Path],
                      crf: Optional[int] = None, preset: Optional[str] = None,
                      crop: bool = True, dolby_vision: bool = False) -> Path:
        """Convert one video file.

        Probes the source, optionally detects and applies a crop, selects the
        encode profile from the cropped geometry, classifies the content and
        runs the matching encoder.

        Args:
            input_path: Source video
            output_path: Destination file, or an existing directory
            crf: Optional CRF override
            preset: Optional preset override
            crop: Detect and remove black bars
            dolby_vision: Use the Dolby Vision route

        Returns:
            Path of the produced artifact

        Raises:
            ConfigurationError: If paths or overrides are invalid
            ProbeError: If the source cannot be probed
            ConversionError: If encoding fails
        """
        start_time = time.monotonic()
        input_path = validate_input_file(input_path)
        output_path = validate_output_path(input_path, output_path)
        if crf is not None:
            crf = validate_crf(crf)

        logger.info(f"Converting {input_path} -> {output_path}")
        video = await Video.open(input_path, self.config.ffprobe, self.config.probe_timeout)
        logger.info(f"Source: {video.width}x{video.height} {video.pix_fmt}, "
                    f"{video.metadata.duration_seconds}s")

        if crop:
            video.apply_crop(await self.crop_detector.detect(video))
        else:
            logger.info("Crop detection disabled")

        profile = get_encode_profile(video.pixel_count, crf, preset)
        route = classify_route(video.pix_fmt, dolby_vision, self.config.hdr_pix_fmt)

        context = EncodingContext(
            input_path=input_path,
            output_path=output_path,
            metadata=video.metadata,
            profile=profile,
            route=route,
            crop=video.crop,
        )
        encoder = self.factory.create(route, self.config)
        artifact = await encoder.encode_content(context)

        logger.success(f"Finished {input_path.name} in {time.monotonic() - start_time:.1f}s")
        return artifact

    async def convert_directory(self, input_dir: Union[str, Path], output_dir: Union[str, Path],
                                **options) -> BatchResult:
        """Convert every supported file of a directory, one after another.

        A failing file is logged and recorded; the remaining files are still
        converted.

        Args:
            input_dir: Directory of source videos
            output_dir: Existing directory receiving the outputs
            **options: Passed through to :meth:`convert`

        Returns:
            Per-file outcome

        Raises:
            ConfigurationError: If ``output_dir`` is not an existing directory
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        if not output_dir.is_dir():
            raise ConfigurationError(
                f"Output must be an existing directory for directory input: {output_dir}"
            )

        result = BatchResult()
        files = sorted(path for path in input_dir.iterdir() if path.is_file())
        for path in files:
            if not self.config.is_supported(path):
                logger.warning(f"Skipping unsupported file: {path.name}")
                result.skipped.append(path)
                continue
            try:
                result.converted.append(
                    await self.convert(path, output_dir / path.name, **options)
                )
            except VideoError as e:
                logger.error(f"Failed to convert {path.name}: {e}")
                details = getattr(e, "details", None)
                if details:
                    logger.debug(details)
                result.failed[path] = str(e)
            except Exception as e:
                logger.exception(f"Unexpected error converting {path.name}: {e}")
                result.failed[path] = f"{type(e).__name__}: {e}"

        logger.info(
            f"Batch finished: {len(result.converted)} converted, "
            f"{len(result.failed)} failed, {len(result.skipped)} skipped"
        )
        return result

    def process(self, input_path: Union[str, Path], output_path: Union[str, Path],
                **options) -> bool:
        """Convert a file or a directory.

        Returns:
            True if everything converted, False if any file in a batch failed

        Raises:
            VideoError: If a single file conversion fails
        """
        input_path = Path(input_path)
        if input_path.is_dir():
            result = asyncio.run(self.convert_directory(input_path, output_path, **options))
            return result.ok
        asyncio.run(self.convert(input_path, output_path, **options))
        return True
