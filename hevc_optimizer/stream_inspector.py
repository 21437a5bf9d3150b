"""
Stream inspection: primary video stream, bitrate and frame rate resolution
"""

import logging
import math
from typing import Any, Dict, Optional

from .models import InspectedMedia, MediaFile, StreamInfo

logger = logging.getLogger(__name__)

DEFAULT_FPS = 30.0


def parse_number(value: Any) -> Optional[float]:
    """Parse a probe value as a finite float, None otherwise"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def find_video_stream(media_file: MediaFile) -> Optional[StreamInfo]:
    return next((s for s in media_file.streams if s.kind == 'video'), None)


def resolve_bitrate(stream: StreamInfo, container_bit_rate: Any = None) -> Optional[float]:
    """Stream bitrate, falling back to the container bitrate.

    Some containers (mkv in particular) carry no per-stream bitrate in
    ffprobe output, only the overall format bitrate.
    """
    bitrate = parse_number(stream.bit_rate)
    if bitrate is None:
        bitrate = parse_number(container_bit_rate)
    return bitrate


def resolve_frame_rate(media_info: Optional[Dict[str, Any]]) -> float:
    """Frame rate from the auxiliary (mediainfo) block, 30 when unknown"""
    tracks = (media_info or {}).get('track') or []
    first = tracks[0] if tracks and isinstance(tracks[0], dict) else {}
    fps = parse_number(first.get('FrameRate'))
    if fps is None or fps <= 0:
        return DEFAULT_FPS
    return fps


def inspect_media(media_file: MediaFile) -> Optional[InspectedMedia]:
    """Extract canonical video attributes, None when there is no video stream"""
    video = find_video_stream(media_file)
    if video is None:
        logger.debug("No video stream in %s", media_file.file_path or 'input')
        return None

    inspected = InspectedMedia(
        video=video,
        streams=media_file.streams,
        codec=video.codec,
        width=video.width,
        height=video.height,
        bitrate=resolve_bitrate(video, media_file.bit_rate),
        fps=resolve_frame_rate(media_file.media_info),
    )
    logger.debug("Inspected %s: %sx%s@%s codec=%s bitrate=%s", media_file.file_path or 'input',
                 inspected.width, inspected.height, inspected.fps, inspected.codec, inspected.bitrate)
    return inspected
