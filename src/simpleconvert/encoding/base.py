"""Base classes for video encoding.

This module provides the abstractions shared by every encoding route:
- EncodingContext: everything one encoder invocation needs
- BaseEncoder: pre-flight checks and command execution with error translation
"""

import shutil
import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict

from simpleconvert.config import ConversionConfig
from simpleconvert.core.process import ProcessResult, run_command, run_piped
from simpleconvert.core.video.errors import ConversionError
from simpleconvert.core.video.types import CropInfo, EncodeProfile, Route, VideoMetadata
from simpleconvert.infrastructure.monitoring import ResourceMonitor
from simpleconvert.utils.validation import validate_input_file

STDERR_TAIL_LINES = 20


class EncodingContext(BaseModel):
    """Context for one encoding operation."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_default=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )

    input_path: Path
    output_path: Path
    metadata: VideoMetadata
    profile: EncodeProfile
    route: Route
    crop: Optional[CropInfo] = None


def _tail(text: Optional[str], lines: int = STDERR_TAIL_LINES) -> Optional[str]:
    if not text:
        return text
    return "\n".join(text.strip().splitlines()[-lines:])


class BaseEncoder:
    """Base class for route encoders.

    Provides common functionality for:
    - Dependency checking
    - Input, output and disk space validation
    - Command execution with failures raised as ConversionError

    Subclasses implement :meth:`_encode`.
    """

    # Config attributes naming the binaries a route needs
    REQUIRED_DEPENDENCIES: Tuple[str, ...] = ("ffmpeg",)
    ROUTES: Tuple[Route, ...] = ()

    def __init__(self, config: ConversionConfig):
        """Initialize encoder with config."""
        self.config = config
        self._monitor = ResourceMonitor(config)

    async def encode_content(self, context: EncodingContext) -> Path:
        """Encode content according to context.

        Args:
            context: The encoding context

        Returns:
            Path of the produced artifact

        Raises:
            ConfigurationError: If the input file is not usable
            ConversionError: If a pre-flight check or an encoding stage fails
        """
        if context.route not in self.ROUTES:
            raise ConversionError(
                f"{self.__class__.__name__} cannot encode {context.route.name} content"
            )
        self._check_dependencies()
        self._validate_input(context)
        return await self._encode(context)

    def output_artifact(self, context: EncodingContext) -> Path:
        """Path of the file this encoder writes."""
        return context.output_path

    async def _encode(self, context: EncodingContext) -> Path:
        raise NotImplementedError

    def _check_dependencies(self) -> None:
        """Check that every required tool resolves.

        Raises:
            ConversionError: If a tool cannot be found
        """
        for dep in self.REQUIRED_DEPENDENCIES:
            binary = getattr(self.config, dep)
            if not shutil.which(binary):
                raise ConversionError(f"Required dependency not found: {binary}")

    def _validate_input(self, context: EncodingContext) -> None:
        """Validate input file, output location and free disk space.

        Raises:
            ConfigurationError: If the input file is missing or unreadable
            ConversionError: If the output exists or the disk is too full
        """
        validate_input_file(context.input_path)

        artifact = self.output_artifact(context)
        if artifact.exists() and not self.config.overwrite:
            raise ConversionError(f"Output already exists: {artifact}")

        if not self._monitor.check_disk_space(artifact.parent):
            raise ConversionError(f"Insufficient disk space for {artifact}")
        artifact.parent.mkdir(parents=True, exist_ok=True)

    async def _run(self, cmd: Sequence[str], stage: str,
                   on_stdout_line: Optional[Callable[[str], None]] = None) -> ProcessResult:
        """Run one command, raising ConversionError if it fails."""
        logger.info(f"{stage}: starting {Path(cmd[0]).name}")
        try:
            return await run_command(cmd, on_stdout_line=on_stdout_line)
        except subprocess.CalledProcessError as e:
            raise ConversionError(
                f"{stage} failed with exit code {e.returncode}",
                cmd=e.cmd, stderr=_tail(e.stderr)
            ) from e
        except OSError as e:
            raise ConversionError(f"{stage} could not start {cmd[0]}: {e}", cmd=cmd) from e

    async def _run_piped(self, producer: Sequence[str], consumer: Sequence[str],
                         stage: str) -> Tuple[ProcessResult, ProcessResult]:
        """Run a two-process pipeline, raising ConversionError if either side fails."""
        logger.info(f"{stage}: {Path(producer[0]).name} | {Path(consumer[0]).name}")
        try:
            return await run_piped(producer, consumer)
        except subprocess.CalledProcessError as e:
            raise ConversionError(
                f"{stage} failed: {Path(e.cmd[0]).name} exited with code {e.returncode}",
                cmd=e.cmd, stderr=_tail(e.stderr)
            ) from e
        except OSError as e:
            raise ConversionError(f"{stage} could not start: {e}", cmd=producer) from e
