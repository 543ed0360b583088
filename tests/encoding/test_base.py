"""Tests for base encoder functionality."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from simpleconvert.core.video.errors import ConversionError
from simpleconvert.core.video.types import Route
from simpleconvert.encoding.base import BaseEncoder, EncodingContext


def test_context_converts_paths(sdr_metadata):
    context = EncodingContext(
        input_path="in.mkv",
        output_path="out.mkv",
        metadata=sdr_metadata,
        profile={"crf": 18, "preset": "faster"},
        route=Route.SDR,
    )
    assert context.input_path == Path("in.mkv")
    assert context.output_path == Path("out.mkv")
    assert context.profile.crf == 18
    assert context.crop is None


def test_context_validates_route(sdr_metadata):
    with pytest.raises(ValidationError):
        EncodingContext(
            input_path="in.mkv",
            output_path="out.mkv",
            metadata=sdr_metadata,
            profile={"crf": 18, "preset": "faster"},
            route="av1",
        )


@pytest.mark.asyncio
async def test_base_encoder_has_no_route(config, context_factory, tools_available):
    """Test the base class refuses to encode anything itself."""
    with pytest.raises(ConversionError, match="BaseEncoder cannot encode SDR"):
        await BaseEncoder(config).encode_content(context_factory())


def test_output_artifact_defaults_to_output_path(config, context_factory):
    context = context_factory()
    assert BaseEncoder(config).output_artifact(context) == context.output_path
