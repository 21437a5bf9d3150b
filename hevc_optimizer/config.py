"""
Policy input merging and plugin descriptor
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .models import PolicyInputs

logger = logging.getLogger(__name__)

# Host input names mapped to PolicyInputs fields
KEY_ALIASES = {
    'targetCodecCompression': 'target_codec_compression',
    'cqv': 'cqv',
    'bframe': 'bframe',
    'ten_bit': 'ten_bit',
    'tenBit': 'ten_bit',
    'ffmpeg_preset': 'ffmpeg_preset',
    'ffmpegPreset': 'ffmpeg_preset',
    'lowResThreshold': 'low_res_threshold',
    'minCompressionGain': 'min_compression_gain',
}

# Field name -> name shown to the host
HOST_NAMES = {
    'target_codec_compression': 'targetCodecCompression',
    'cqv': 'cqv',
    'bframe': 'bframe',
    'ten_bit': 'ten_bit',
    'ffmpeg_preset': 'ffmpeg_preset',
    'low_res_threshold': 'lowResThreshold',
    'min_compression_gain': 'minCompressionGain',
}

PLUGIN_ID = 'Tdarr_Plugin_Soggys_NVENC_HEVC_CQV_Optimised_Bitrate'
PLUGIN_VERSION = '1.1.0'

DESCRIPTION = """[Contains built-in filter] MEDIAINFO HAS TO BE ENABLED IN YOUR LIBRARY.
This plugin uses NVENC and transcodes based on specified CQ:V value.
Will transcode if bitrate is greater than "optimized bitrate". Optimal bitrate accounts for fps and resolution.
Optimized bitrate can be configured using targetCodecCompression. Smaller values target lower bitrates.
FFmpeg preset can be configured, defaults to medium.
Low-res files (height <= lowResThreshold) will not be transcoded.
If files are not in HEVC they will be transcoded.
The output container is MKV.
You may get an "infinite transcode loop" error if CQ:V and targetCodecCompression are misaligned.
Basically: increasing targetCodecCompression allows you to lower CQ:V for higher quality and vice versa.
"""


def _normalize_keys(raw: Mapping[str, Any], warnings: List[str]) -> Dict[str, Any]:
    """Map host keys to field names and drop unset values"""
    values = {}
    for key, value in raw.items():
        field = KEY_ALIASES.get(key, key if key in HOST_NAMES else None)
        if field is None:
            warnings.append(f'Unknown input "{key}" ignored')
            continue
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == '':
            continue
        values[field] = value
    return values


def merge_inputs(raw: Optional[Mapping[str, Any]] = None) -> Tuple[PolicyInputs, List[str]]:
    """Fill unset inputs with their defaults.

    Values that fail validation fall back to the default as well; one
    warning is returned for every key that was dropped.
    """
    if isinstance(raw, PolicyInputs):
        return raw, []

    warnings: List[str] = []
    values = _normalize_keys(raw or {}, warnings)

    while True:
        try:
            inputs = PolicyInputs(**values)
            break
        except ValidationError as e:
            bad_fields = {err['loc'][0] for err in e.errors() if err.get('loc')}
            bad_fields &= set(values)
            if not bad_fields:
                raise
            for field in sorted(bad_fields):
                default = PolicyInputs.model_fields[field].default
                warnings.append(
                    f'Invalid {HOST_NAMES[field]}={values.pop(field)!r}, using default {default!r}')

    for warning in warnings:
        logger.warning(warning)
    return inputs, warnings


def details() -> Dict[str, Any]:
    """Plugin descriptor with the seven tunable inputs"""
    inputs = []
    for field, info in PolicyInputs.model_fields.items():
        if info.annotation is bool:
            input_type, input_ui = 'boolean', {'type': 'dropdown', 'options': ['true', 'false']}
        elif info.annotation is str:
            input_type, input_ui = 'string', {'type': 'text'}
        else:
            input_type, input_ui = 'number', {'type': 'text'}
        inputs.append({
            'name': HOST_NAMES[field],
            'type': input_type,
            'defaultValue': info.default,
            'inputUI': input_ui,
            'tooltip': info.description,
        })

    return {
        'id': PLUGIN_ID,
        'Stage': 'Pre-processing',
        'Name': 'Soggys NVENC HEVC CQ:V Optimised Bitrate',
        'Type': 'Video',
        'Operation': 'Transcode',
        'Description': DESCRIPTION,
        'Version': PLUGIN_VERSION,
        'Tags': 'pre-processing,ffmpeg,video only,nvenc h265,configurable',
        'Inputs': inputs,
    }
