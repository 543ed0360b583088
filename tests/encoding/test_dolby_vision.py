"""Tests for Dolby Vision encoding path."""

import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from simpleconvert.core.process import ProcessResult
from simpleconvert.core.video.errors import ConversionError
from simpleconvert.core.video.types import Route
from simpleconvert.encoding.dolby_vision import DolbyVisionEncoder, rpu_path


def _rpu_out(consumer):
    return Path(consumer[consumer.index("--rpu-out") + 1])


@pytest.fixture
def encoder(config):
    """Create a DolbyVisionEncoder instance."""
    return DolbyVisionEncoder(config)


@pytest.fixture
def context(context_factory, hdr_metadata):
    """Create a Dolby Vision encoding context."""
    return context_factory(route=Route.DOLBY_VISION, metadata=hdr_metadata)


@pytest.fixture
def mock_piped():
    """Fake pipeline that writes the RPU file like dovi_tool would."""
    async def fake_piped(producer, consumer):
        if "extract-rpu" in consumer:
            _rpu_out(consumer).write_bytes(b"RPU")
        return (ProcessResult(list(producer), 0, "", ""),
                ProcessResult(list(consumer), 0, "", ""))

    with patch("simpleconvert.encoding.base.run_piped",
               AsyncMock(side_effect=fake_piped)) as mock:
        yield mock


def test_rpu_path():
    assert rpu_path(Path("/videos/movie.mkv")) == Path("/videos/movie.mkv.rpu")


def test_output_artifact(encoder, context):
    assert encoder.output_artifact(context) == Path(f"{context.output_path}.hevc")


@pytest.mark.asyncio
async def test_encode(encoder, context, tools_available, mock_piped, master_display_string):
    """Test RPU extraction followed by the x265 encode."""
    artifact = await encoder.encode_content(context)

    rpu = rpu_path(context.input_path)
    assert artifact == Path(f"{context.output_path}.hevc")
    assert rpu.read_bytes() == b"RPU"
    assert not Path(f"{rpu}.tmp").exists()
    assert mock_piped.await_count == 2

    (remux, extract), _ = mock_piped.await_args_list[0]
    assert remux[0] == "ffmpeg"
    assert "hevc_mp4toannexb" in remux
    assert extract[:4] == ["dovi_tool", "-m", "2", "extract-rpu"]
    assert _rpu_out(extract) == Path(f"{rpu}.tmp")

    (y4m, x265), _ = mock_piped.await_args_list[1]
    assert "yuv4mpegpipe" in y4m
    assert x265[0] == "x265"
    assert x265[x265.index("--dolby-vision-rpu") + 1] == str(rpu)
    assert x265[x265.index("--dolby-vision-profile") + 1] == "8.1"
    assert x265[x265.index("--master-display") + 1] == master_display_string
    assert x265[x265.index("--output") + 1] == str(artifact)


@pytest.mark.asyncio
async def test_existing_rpu_is_reused(encoder, context, tools_available, mock_piped):
    """Test an existing sidecar skips extraction and stays untouched."""
    rpu = rpu_path(context.input_path)
    rpu.write_bytes(b"EXISTING")
    mtime = rpu.stat().st_mtime_ns

    await encoder.encode_content(context)

    assert mock_piped.await_count == 1
    (_, x265), _ = mock_piped.await_args_list[0]
    assert x265[0] == "x265"
    assert rpu.read_bytes() == b"EXISTING"
    assert rpu.stat().st_mtime_ns == mtime


@pytest.mark.asyncio
async def test_failed_extraction_leaves_no_sidecar(encoder, context, tools_available):
    """Test a failing producer aborts without a partial RPU file."""
    async def fake_piped(producer, consumer):
        _rpu_out(consumer).write_bytes(b"PARTIAL")
        raise subprocess.CalledProcessError(1, list(producer), "", "Invalid data")

    with patch("simpleconvert.encoding.base.run_piped", AsyncMock(side_effect=fake_piped)):
        with pytest.raises(ConversionError, match="RPU extraction failed: ffmpeg"):
            await encoder.encode_content(context)

    rpu = rpu_path(context.input_path)
    assert not rpu.exists()
    assert not Path(f"{rpu}.tmp").exists()


@pytest.mark.asyncio
async def test_failed_encode(encoder, context, tools_available):
    async def fake_piped(producer, consumer):
        if "extract-rpu" in consumer:
            _rpu_out(consumer).write_bytes(b"RPU")
            return (ProcessResult(list(producer), 0, "", ""),
                    ProcessResult(list(consumer), 0, "", ""))
        raise subprocess.CalledProcessError(1, list(consumer), "", "x265 [error]")

    with patch("simpleconvert.encoding.base.run_piped", AsyncMock(side_effect=fake_piped)):
        with pytest.raises(ConversionError, match="x265 exited with code 1"):
            await encoder.encode_content(context)

    # The extracted RPU is kept for the next run
    assert rpu_path(context.input_path).exists()


@pytest.mark.asyncio
async def test_missing_dovi_tool(encoder, context, mocker, mock_piped):
    mocker.patch("simpleconvert.encoding.base.shutil.which",
                 side_effect=lambda name: None if name == "dovi_tool" else f"/usr/bin/{name}")
    with pytest.raises(ConversionError, match="dovi_tool"):
        await encoder.encode_content(context)
    mock_piped.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_hdr_metadata(encoder, context_factory, hdr_metadata_factory,
                                    tools_available, mock_piped):
    context = context_factory(route=Route.DOLBY_VISION,
                              metadata=hdr_metadata_factory(color_primaries=None))
    with pytest.raises(ConversionError, match="color_primaries"):
        await encoder.encode_content(context)
    mock_piped.assert_not_awaited()
