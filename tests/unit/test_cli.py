"""Unit tests for cli.py."""
import pytest
from click.testing import CliRunner

from simpleconvert.cli import main
from simpleconvert.core.video.errors import ConversionError


@pytest.fixture
def mock_processor(mocker):
    """Mock the VideoProcessor to avoid actual encoding."""
    mocker.patch("simpleconvert.cli.setup_logging")
    processor = mocker.patch("simpleconvert.cli.VideoProcessor")
    processor.return_value.process.return_value = True
    return processor


def test_cli_missing_input(tmp_path):
    """Test CLI with missing input file."""
    runner = CliRunner()
    result = runner.invoke(main, [str(tmp_path / "nonexistent.mp4"), "output.mp4"])
    assert result.exit_code == 2
    assert "does not exist" in result.output


def test_cli_with_valid_paths(mock_video_file, tmp_path, mock_processor):
    """Test CLI with valid input and output paths."""
    output_path = tmp_path / "output.mkv"
    result = CliRunner().invoke(main, [str(mock_video_file), str(output_path)])

    assert result.exit_code == 0
    mock_processor.return_value.process.assert_called_once_with(
        mock_video_file,
        output_path,
        crf=None,
        preset=None,
        crop=True,
        dolby_vision=False,
    )
    config = mock_processor.call_args[0][0]
    assert config.overwrite is False
    assert config.show_progress is True


def test_cli_options(mock_video_file, tmp_path, mock_processor):
    result = CliRunner().invoke(main, [
        str(mock_video_file), str(tmp_path / "output.mkv"),
        "--crf", "22", "-p", "slow", "--no-crop", "-d", "--overwrite", "--no-progress",
        "--log-level", "debug",
    ])

    assert result.exit_code == 0
    kwargs = mock_processor.return_value.process.call_args.kwargs
    assert kwargs == {"crf": 22, "preset": "slow", "crop": False, "dolby_vision": True}
    config = mock_processor.call_args[0][0]
    assert config.overwrite is True
    assert config.show_progress is False
    assert config.log_level == "DEBUG"


def test_cli_rejects_negative_crf(mock_video_file, tmp_path, mock_processor):
    result = CliRunner().invoke(main, [str(mock_video_file), str(tmp_path / "o.mkv"), "--crf", "-1"])
    assert result.exit_code == 2
    mock_processor.return_value.process.assert_not_called()


def test_cli_conversion_error(mock_video_file, tmp_path, mock_processor):
    mock_processor.return_value.process.side_effect = ConversionError(
        "HDR encode requires mastering display metadata"
    )
    result = CliRunner().invoke(main, [str(mock_video_file), str(tmp_path / "output.mkv")])
    assert result.exit_code == 1
    assert "mastering display" in result.output


def test_cli_batch_failure(tmp_path, mock_processor):
    """Test a batch with failed files exits non-zero."""
    source = tmp_path / "source"
    source.mkdir()
    mock_processor.return_value.process.return_value = False

    result = CliRunner().invoke(main, [str(source), str(tmp_path)])
    assert result.exit_code == 1


def test_cli_interrupted(mock_video_file, tmp_path, mock_processor):
    mock_processor.return_value.process.side_effect = KeyboardInterrupt
    result = CliRunner().invoke(main, [str(mock_video_file), str(tmp_path / "output.mkv")])
    assert result.exit_code == 130


def test_cli_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "simpleconvert" in result.output
