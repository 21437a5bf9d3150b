"""
FFmpeg argument building for NVENC HEVC transcodes
"""

from typing import Callable, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .models import IMAGE_CODECS, IO_PLACEHOLDER, PolicyInputs, StreamInfo

# Subtitle codecs matroska cannot hold
TEXT_SUBTITLE_CODECS = {'mov_text'}
# High-bitrate audio that overflows the default muxing queue
LARGE_QUEUE_AUDIO_CODECS = {'truehd', 'dts'}

LOOKAHEAD = 32
MUXING_QUEUE_SIZE = 9999

DEFAULT_MAP = ('-map', '0')
DEFAULT_SUBTITLE = ('-c:s', 'copy')


class StreamRule(NamedTuple):
    """Per-stream override: when ``predicate`` holds, ``arguments`` fill ``slot``"""
    name: str
    slot: str
    predicate: Callable[[StreamInfo], bool]
    arguments: Callable[[Sequence[StreamInfo]], Tuple[str, ...]]


def is_image_video(stream: StreamInfo) -> bool:
    return stream.kind == 'video' and stream.codec in IMAGE_CODECS


def first_true_video_index(streams: Sequence[StreamInfo]) -> int:
    """Position among video streams of the first non-image track"""
    videos = [s for s in streams if s.kind == 'video']
    return next((i for i, s in enumerate(videos) if s.codec not in IMAGE_CODECS), 0)


def explicit_map(streams: Sequence[StreamInfo]) -> Tuple[str, ...]:
    return ('-map', f'0:v:{first_true_video_index(streams)}', '-map', '0:a', '-map', '0:s?')


STREAM_RULES = (
    StreamRule('text_subtitle', 'subtitle',
               lambda s: s.kind == 'subtitle' and s.codec in TEXT_SUBTITLE_CODECS,
               lambda streams: ('-c:s', 'srt')),
    StreamRule('large_muxing_queue', 'mux',
               lambda s: s.kind == 'audio' and s.codec in LARGE_QUEUE_AUDIO_CODECS,
               lambda streams: ('-max_muxing_queue_size', str(MUXING_QUEUE_SIZE))),
    StreamRule('image_video_track', 'map', is_image_video, explicit_map),
)


def select_overrides(streams: Sequence[StreamInfo], rules: Iterable[StreamRule] = STREAM_RULES) -> dict:
    """Evaluate every rule once per stream and collect slot overrides"""
    rules = list(rules)
    slots = {}
    for stream in streams:
        if not stream.codec_name:
            continue
        for rule in rules:
            if rule.slot not in slots and rule.predicate(stream):
                slots[rule.slot] = rule.arguments(streams)
    return slots


def _flatten(segments: Iterable[Optional[Sequence[str]]]) -> Tuple[str, ...]:
    return tuple(str(token) for segment in segments if segment for token in segment if token)


def build_arguments(streams: Sequence[StreamInfo], inputs: PolicyInputs) -> Tuple[str, ...]:
    """Build the ordered ffmpeg arguments around the host <io> placeholder"""
    slots = select_overrides(streams)

    segments: List[Optional[Sequence[str]]] = [
        ('-hwaccel', 'cuda'),
        ('-dn',),
        (IO_PLACEHOLDER,),
        slots.get('map', DEFAULT_MAP),
        ('-c:v', 'hevc_nvenc'),
        ('-preset', inputs.ffmpeg_preset),
        ('-cq', str(inputs.cqv)),
        ('-b:v', '0'),
        ('-rc-lookahead', str(LOOKAHEAD)),
        ('-bf', str(inputs.bframe)),
        ('-a53cc', '0'),
        ('-pix_fmt', 'p010le') if inputs.ten_bit else None,
        ('-c:a', 'copy'),
        slots.get('subtitle', DEFAULT_SUBTITLE),
        slots.get('mux'),
    ]
    return _flatten(segments)


def splice_io(arguments: Sequence[str], input_path, output_path, ffmpeg: str = 'ffmpeg') -> List[str]:
    """Replace the <io> placeholder with the input and append the output path"""
    args = list(arguments)
    if IO_PLACEHOLDER in args:
        pos = args.index(IO_PLACEHOLDER)
        before, after = args[:pos], args[pos + 1:]
    else:
        before, after = [], args
    return [ffmpeg, *before, '-i', str(input_path), *after, str(output_path)]
