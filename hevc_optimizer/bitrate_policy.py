"""
Bitrate policy: optimal bitrate estimation and transcode gating
"""

import logging
import math
from typing import List, Optional

from .models import InspectedMedia, MediaFile, PolicyInputs, PolicyVerdict, Verdict

logger = logging.getLogger(__name__)


def calculate_optimal_bitrate(width, height, fps, compression) -> int:
    """Expected bitrate for the given frame size and rate.

    A linear heuristic: bits per second grow with pixels per second,
    scaled by an empirically tuned compression coefficient.
    """
    return math.floor(width * height * fps * compression)


def format_mbps(bitrate: Optional[float]) -> str:
    if bitrate is None:
        return 'unknown'
    return f'{bitrate / 1e6:.2f} Mbps'


def compression_gain(current_bitrate: Optional[float], optimal_bitrate: Optional[int]) -> Optional[float]:
    """Fractional bitrate reduction, None when it cannot be computed"""
    if optimal_bitrate is None or current_bitrate is None:
        return None
    if not math.isfinite(current_bitrate) or current_bitrate <= 0:
        return None
    return (current_bitrate - optimal_bitrate) / current_bitrate


def evaluate_policy(media_file: MediaFile, inspected: Optional[InspectedMedia],
                    inputs: PolicyInputs, log: List[str]) -> PolicyVerdict:
    """Decide whether the file is worth transcoding.

    Conditions are checked in order and the first match wins. Trace lines
    are appended to ``log``.
    """
    if media_file.file_medium != 'video':
        log.append('✘ Not a video')
        return PolicyVerdict(verdict=Verdict.SKIP_NOT_VIDEO)
    log.append('✔ Video detected')

    if inspected is None:
        log.append('✘ No video stream found')
        return PolicyVerdict(verdict=Verdict.SKIP_NO_VIDEO_STREAM)

    width, height = inspected.width, inspected.height
    size = f'{width}x{height}' if width and height else 'unknown size'
    log.append(f'Stream: {size}@{inspected.fps:g}fps')
    log.append(f'Bitrate: {format_mbps(inspected.bitrate)}')

    optimal = None
    if width and height:
        optimal = calculate_optimal_bitrate(width, height, inspected.fps,
                                            inputs.target_codec_compression)
    log.append(f'Optimal Bitrate: {format_mbps(optimal)}')

    gain = None
    if inspected.codec == 'hevc':
        if height is not None and height <= inputs.low_res_threshold:
            log.append(f'✔ HEVC & height ≤ {inputs.low_res_threshold}px - skipping')
            return PolicyVerdict(verdict=Verdict.SKIP_LOW_RES, optimal_bitrate=optimal)

        gain = compression_gain(inspected.bitrate, optimal)
        if gain is None:
            log.append('Expected Gain: unknown - transcoding anyway')
        else:
            log.append(f'Expected Gain: {gain * 100:.1f}%')
            if gain < inputs.min_compression_gain:
                log.append(f'✔ Gain < {inputs.min_compression_gain * 100:g}% - skipping')
                return PolicyVerdict(verdict=Verdict.SKIP_INSUFFICIENT_GAIN,
                                     optimal_bitrate=optimal, gain=gain)

    logger.debug("Transcode: codec=%s optimal=%s gain=%s", inspected.codec, optimal, gain)
    return PolicyVerdict(verdict=Verdict.TRANSCODE, optimal_bitrate=optimal, gain=gain)
