"""
NVENC HEVC transcode decision library

Inspects probed streams, gates on codec, resolution and bitrate, and builds
the ffmpeg arguments for a constant-quality hevc_nvenc encode.
"""

from .models import StreamInfo, MediaFile, PolicyInputs, InspectedMedia, Verdict, PolicyVerdict, Decision
from .config import merge_inputs, details
from .stream_inspector import inspect_media, resolve_bitrate, resolve_frame_rate
from .bitrate_policy import calculate_optimal_bitrate, evaluate_policy
from .ffmpeg_builder import STREAM_RULES, StreamRule, build_arguments, splice_io
from .nvenc_plugin import plugin

__all__ = [
    'StreamInfo', 'MediaFile', 'PolicyInputs', 'InspectedMedia', 'Verdict', 'PolicyVerdict', 'Decision',
    'merge_inputs', 'details',
    'inspect_media', 'resolve_bitrate', 'resolve_frame_rate',
    'calculate_optimal_bitrate', 'evaluate_policy',
    'STREAM_RULES', 'StreamRule', 'build_arguments', 'splice_io',
    'plugin',
]
