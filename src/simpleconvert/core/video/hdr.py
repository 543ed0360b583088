"""HDR classification and metadata utilities."""

from loguru import logger

from .errors import ConversionError
from .probe import normalize_fraction
from .types import Route, VideoMetadata

DEFAULT_HDR_PIX_FMT = "yuv420p10le"
MAX_CLL_UNSET = "0,0"


def classify_route(pix_fmt: str, dolby_vision: bool = False,
                   hdr_pix_fmt: str = DEFAULT_HDR_PIX_FMT) -> Route:
    """Pick the encoding route for a file.

    Dolby Vision is never detected automatically; the caller has to ask for
    it. Otherwise the pixel format alone decides between HDR10 and SDR, the
    color tags are not consulted.

    Args:
        pix_fmt: Pixel format of the source
        dolby_vision: Whether the caller requested the Dolby Vision route
        hdr_pix_fmt: Pixel format treated as HDR10

    Returns:
        Selected route
    """
    if dolby_vision:
        route = Route.DOLBY_VISION
    elif pix_fmt == hdr_pix_fmt:
        route = Route.HDR10
    else:
        route = Route.SDR
    logger.info(f"Content route: {route.name} (pix_fmt={pix_fmt})")
    return route


def require_color_tags(metadata: VideoMetadata) -> None:
    """Raise ConversionError unless primaries, transfer and matrix are all tagged."""
    missing = [
        name for name in ("color_primaries", "color_transfer", "color_space")
        if not getattr(metadata, name)
    ]
    if missing:
        raise ConversionError(f"HDR encode requires color tags, missing: {', '.join(missing)}")


def build_master_display(metadata: VideoMetadata) -> str:
    """Build the x265 ``master-display`` value.

    Every coordinate and luminance value keeps only its numerator.

    Raises:
        ConversionError: If the source carries no mastering display metadata
    """
    md = metadata.mastering_display
    if md is None:
        raise ConversionError("HDR encode requires mastering display metadata")
    n = normalize_fraction
    return (
        f"G({n(md.green_x)},{n(md.green_y)})"
        f"B({n(md.blue_x)},{n(md.blue_y)})"
        f"R({n(md.red_x)},{n(md.red_y)})"
        f"WP({n(md.white_point_x)},{n(md.white_point_y)})"
        f"L({n(md.max_luminance)},{n(md.min_luminance)})"
    )


def build_x265_hdr_params(metadata: VideoMetadata) -> str:
    """Build the ``-x265-params`` value for an HDR10 encode.

    max-cll is always written as unset.

    Raises:
        ConversionError: If color tags or mastering display are missing
    """
    require_color_tags(metadata)
    params = (
        "hdr-opt=1:repeat-headers=1:"
        f"colorprim={normalize_fraction(metadata.color_primaries)}:"
        f"transfer={normalize_fraction(metadata.color_transfer)}:"
        f"colormatrix={normalize_fraction(metadata.color_space)}:"
        f"master-display={build_master_display(metadata)}:"
        f"max-cll={MAX_CLL_UNSET}"
    )
    logger.debug(f"x265 HDR params: {params}")
    return params
