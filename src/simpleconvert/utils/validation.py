"""Input validation utilities."""

import os
from pathlib import Path
from typing import Union

from simpleconvert.core.video.errors import ConfigurationError


def validate_input_file(path: Union[str, Path]) -> Path:
    """Validate that a file exists and is readable.

    Args:
        path: Path to file to validate

    Returns:
        Path object for the file

    Raises:
        ConfigurationError: If the path is missing, not a file or not readable
    """
    if isinstance(path, str):
        path = Path(path)

    if not path.exists():
        raise ConfigurationError(f"File does not exist: {path}")

    if not path.is_file():
        raise ConfigurationError(f"Path is not a file: {path}")

    if not os.access(path, os.R_OK):
        raise ConfigurationError(f"File is not readable: {path}")

    return path


def validate_output_path(input_path: Path, output_path: Union[str, Path]) -> Path:
    """Resolve where a single conversion writes its output.

    An existing directory receives a file named after the input.

    Raises:
        ConfigurationError: If the output would replace the input
    """
    output_path = Path(output_path)
    if output_path.is_dir():
        output_path = output_path / input_path.name
    if output_path.absolute() == input_path.absolute():
        raise ConfigurationError(f"Output would overwrite input: {input_path}")
    return output_path
