"""Video conversion error types."""

from typing import Optional, Sequence


class VideoError(Exception):
    """Base class for conversion errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        """Initialize error.

        Args:
            message: Error message
            details: Optional technical details
        """
        self.message = message
        self.details = details
        super().__init__(message)


class ProbeError(VideoError):
    """Error reading stream metadata with ffprobe."""

    def __init__(self, message: str, cmd: Optional[Sequence[str]] = None,
                 stderr: Optional[str] = None):
        """Initialize error.

        Args:
            message: Error message
            cmd: FFprobe command that failed
            stderr: FFprobe error output
        """
        details = f"Command: {' '.join(cmd)}\nError: {stderr}" if cmd else stderr
        super().__init__(message, details)
        self.cmd = list(cmd) if cmd else None
        self.stderr = stderr


class CropDetectionError(VideoError):
    """A crop detection window produced no usable candidate.

    Never fatal: the window is recorded as empty and the remaining windows
    still decide the crop.
    """

    def __init__(self, message: str, window: int, details: Optional[str] = None):
        super().__init__(message, details)
        self.window = window


class ConversionError(VideoError):
    """A pipeline stage failed for one file."""

    def __init__(self, message: str, cmd: Optional[Sequence[str]] = None,
                 stderr: Optional[str] = None):
        """Initialize error.

        Args:
            message: Error message
            cmd: Command that failed
            stderr: Error output of the failing process
        """
        details = f"Command: {' '.join(cmd)}\nError: {stderr}" if cmd else stderr
        super().__init__(message, details)
        self.cmd = list(cmd) if cmd else None
        self.stderr = stderr


class ConfigurationError(VideoError):
    """Invalid paths or options supplied by the caller."""
    pass
