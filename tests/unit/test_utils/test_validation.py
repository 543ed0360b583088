"""Tests for validation utilities."""
import os

import pytest

from simpleconvert.core.video.errors import ConfigurationError
from simpleconvert.utils.validation import validate_input_file, validate_output_path


def test_validate_input_file_exists(mock_video_file):
    """Test validation of existing file."""
    assert validate_input_file(mock_video_file) == mock_video_file
    assert validate_input_file(str(mock_video_file)) == mock_video_file


def test_validate_input_file_not_exists(tmp_path):
    """Test validation of non-existent file."""
    with pytest.raises(ConfigurationError, match="does not exist"):
        validate_input_file(tmp_path / "nonexistent.mkv")


def test_validate_input_file_is_directory(tmp_path):
    with pytest.raises(ConfigurationError, match="not a file"):
        validate_input_file(tmp_path)


@pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0,
                    reason="permissions are not enforced")
def test_validate_input_file_not_readable(mock_video_file):
    mock_video_file.chmod(0o000)
    try:
        with pytest.raises(ConfigurationError, match="not readable"):
            validate_input_file(mock_video_file)
    finally:
        mock_video_file.chmod(0o644)


def test_validate_output_path_file(mock_video_file, tmp_path):
    assert validate_output_path(mock_video_file, tmp_path / "out.mkv") == tmp_path / "out.mkv"


def test_validate_output_path_directory(mock_video_file, tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    assert validate_output_path(mock_video_file, out) == out / mock_video_file.name


def test_validate_output_path_same_as_input(mock_video_file):
    with pytest.raises(ConfigurationError, match="overwrite input"):
        validate_output_path(mock_video_file, mock_video_file.parent)
