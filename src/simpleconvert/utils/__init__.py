"""Utility modules."""

from .logging import setup_logging
from .validation import validate_input_file, validate_output_path

__all__ = ['setup_logging', 'validate_input_file', 'validate_output_path']
