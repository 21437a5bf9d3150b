"""
pytest configuration and fixtures for the NVENC HEVC decision tests

Probe data is built in memory; no ffmpeg or video files are needed.
"""

import sys
from pathlib import Path

import pytest

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))
from hevc_optimizer import StreamInfo


def video_stream(codec='h264', width=1920, height=1080, bit_rate=None, index=0):
    stream = {'index': index, 'codec_type': 'video', 'codec_name': codec, 'width': width, 'height': height}
    if bit_rate is not None:
        stream['bit_rate'] = bit_rate
    return stream


def audio_stream(codec='aac', index=1):
    return {'index': index, 'codec_type': 'audio', 'codec_name': codec, 'channels': 2}


def subtitle_stream(codec='subrip', index=2):
    return {'index': index, 'codec_type': 'subtitle', 'codec_name': codec}


def host_file(streams, medium='video', bit_rate=None, fps=None):
    """File object in the shape the host pipeline passes in"""
    data = {
        'file': '/media/movie.mkv',
        'fileMedium': medium,
        'ffProbeData': {'streams': streams},
        'bit_rate': bit_rate,
    }
    if fps is not None:
        data['mediaInfo'] = {'track': [{'@type': 'General', 'FrameRate': fps}]}
    return data


def as_streams(raw_streams):
    return [StreamInfo(**s) for s in raw_streams]


@pytest.fixture
def h264_1080p():
    """1080p H.264 movie with AAC audio and SRT subtitles"""
    return host_file(
        [video_stream('h264', bit_rate='12000000'), audio_stream(), subtitle_stream()],
        fps='30',
    )


@pytest.fixture
def hevc_1080p_factory():
    """Build a 1080p30 HEVC movie with the given video bitrate"""
    def _make(bit_rate, container_bit_rate=None):
        return host_file(
            [video_stream('hevc', bit_rate=bit_rate), audio_stream()],
            bit_rate=container_bit_rate,
            fps='30',
        )
    return _make


@pytest.fixture
def ffprobe_output():
    """ffprobe -show_streams -show_format JSON for an MKV without stream bitrates"""
    return {
        'streams': [
            {'index': 0, 'codec_type': 'video', 'codec_name': 'h264', 'width': 1920, 'height': 1080,
             'avg_frame_rate': '24000/1001'},
            {'index': 1, 'codec_type': 'audio', 'codec_name': 'truehd', 'channels': 8},
            {'index': 2, 'codec_type': 'subtitle', 'codec_name': 'subrip'},
        ],
        'format': {'filename': 'movie.mkv', 'duration': '120.000000', 'bit_rate': '15000000'},
    }


@pytest.fixture
def mediainfo_output():
    return {'media': {'@ref': 'movie.mkv', 'track': [
        {'@type': 'General', 'FrameRate': '23.976'},
        {'@type': 'Video', 'FrameRate': '23.976'},
    ]}}
