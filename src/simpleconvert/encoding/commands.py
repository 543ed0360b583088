"""Command line builders for the external encoding tools.

ffmpeg invocations are assembled with ffmpeg-python; x265 and dovi_tool take
plain argument lists. Nothing here is ever passed through a shell.
"""

from pathlib import Path
from typing import List, Optional

import ffmpeg

from simpleconvert.core.video.hdr import MAX_CLL_UNSET, build_master_display
from simpleconvert.core.video.probe import normalize_fraction
from simpleconvert.core.video.types import CropInfo, EncodeProfile, VideoMetadata

GLOBAL_ARGS = ("-hide_banner", "-nostdin")


def _video_stream(source, selector: str, crop: Optional[CropInfo]):
    stream = source[selector]
    if crop is not None:
        stream = stream.filter("crop", crop.width, crop.height, crop.x, crop.y)
    return stream


def build_encode_command(
    ffmpeg_bin: str,
    input_path: Path,
    output_path: Path,
    *,
    pix_fmt: str,
    profile: EncodeProfile,
    crop: Optional[CropInfo] = None,
    x265_params: Optional[str] = None,
    overwrite: bool = False,
    progress: bool = False
) -> List[str]:
    """Build the single ffmpeg/libx265 invocation used for SDR and HDR10.

    All video streams are encoded, audio and subtitle streams are copied when
    present. The crop is passed as ``-vf`` and applies to every mapped video
    stream.

    Args:
        ffmpeg_bin: FFmpeg binary
        input_path: Source file
        output_path: Destination file
        pix_fmt: Pixel format, kept from the source
        profile: CRF and preset
        crop: Optional crop applied to the video
        x265_params: Optional ``-x265-params`` value (HDR10 only)
        overwrite: Replace an existing output instead of failing
        progress: Report progress as key=value lines on stdout

    Returns:
        Command argument list
    """
    source = ffmpeg.input(str(input_path))
    options = {
        "c:v": "libx265",
        "c:a": "copy",
        "c:s": "copy",
        "pix_fmt": pix_fmt,
        "preset": profile.preset,
        "crf": profile.crf,
    }
    if crop is not None:
        options["vf"] = crop.to_ffmpeg_filter()
    if x265_params:
        options["x265-params"] = x265_params

    global_args = list(GLOBAL_ARGS)
    if progress:
        global_args += ["-progress", "pipe:1", "-nostats"]
    if not overwrite:
        global_args.append("-n")

    return (
        ffmpeg.output(source["v"], source["a?"], source["s?"], str(output_path), **options)
        .global_args(*global_args)
        .compile(cmd=ffmpeg_bin, overwrite_output=overwrite)
    )


def build_hevc_remux_command(ffmpeg_bin: str, input_path: Path) -> List[str]:
    """Build the ffmpeg command that writes the raw HEVC bitstream to stdout."""
    source = ffmpeg.input(str(input_path))
    return (
        ffmpeg.output(source["v:0"], "-", format="hevc",
                      **{"c:v": "copy", "bsf:v": "hevc_mp4toannexb"})
        .global_args(*GLOBAL_ARGS)
        .compile(cmd=ffmpeg_bin)
    )


def build_y4m_command(ffmpeg_bin: str, input_path: Path, pix_fmt: str,
                      crop: Optional[CropInfo] = None) -> List[str]:
    """Build the ffmpeg command that decodes to a YUV4MPEG stream on stdout."""
    source = ffmpeg.input(str(input_path))
    video = _video_stream(source, "v:0", crop)
    return (
        ffmpeg.output(video, "-", format="yuv4mpegpipe", pix_fmt=pix_fmt, strict=-1)
        .global_args(*GLOBAL_ARGS)
        .compile(cmd=ffmpeg_bin)
    )


def build_dovi_extract_command(dovi_tool: str, rpu_out: Path, mode: int = 2) -> List[str]:
    """Build the dovi_tool command extracting RPUs from an HEVC stream on stdin."""
    return [dovi_tool, "-m", str(mode), "extract-rpu", "--rpu-out", str(rpu_out), "-"]


def build_x265_dv_command(
    x265: str,
    metadata: VideoMetadata,
    profile: EncodeProfile,
    rpu_path: Path,
    output_path: Path,
    *,
    dv_profile: str,
    vbv_bufsize: int,
    vbv_maxrate: int
) -> List[str]:
    """Build the x265 command encoding a Y4M stream on stdin with Dolby Vision RPUs.

    Raises:
        ConversionError: If the source has no mastering display metadata
    """
    return [
        x265,
        "--input", "-",
        "--y4m",
        "--crf", str(profile.crf),
        "--preset", profile.preset,
        "--input-depth", "10",
        "--output-depth", "10",
        "--colorprim", normalize_fraction(metadata.color_primaries),
        "--transfer", normalize_fraction(metadata.color_transfer),
        "--colormatrix", normalize_fraction(metadata.color_space),
        "--master-display", build_master_display(metadata),
        "--max-cll", MAX_CLL_UNSET,
        "--hdr10",
        "--repeat-headers",
        "--vbv-bufsize", str(vbv_bufsize),
        "--vbv-maxrate", str(vbv_maxrate),
        "--dolby-vision-rpu", str(rpu_path),
        "--dolby-vision-profile", dv_profile,
        "--output", str(output_path),
    ]
