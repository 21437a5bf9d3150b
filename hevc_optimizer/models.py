"""
Pydantic models for probed media, policy inputs and decisions
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Presets accepted by hevc_nvenc (legacy names and p1-p7)
NVENC_PRESETS = {
    'default', 'slow', 'medium', 'fast', 'hp', 'hq', 'bd', 'll', 'llhq', 'llhp',
    'lossless', 'losslesshp', 'p1', 'p2', 'p3', 'p4', 'p5', 'p6', 'p7',
}

IO_PLACEHOLDER = '<io>'

# Still-image codecs probes report as video (cover art, thumbnails)
IMAGE_CODECS = {'png', 'bmp', 'mjpeg'}


class StreamInfo(BaseModel):
    """Single probed stream as reported by ffprobe"""
    index: Optional[int] = None
    codec_type: Optional[str] = None
    codec_name: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    bit_rate: Any = None
    disposition: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('width', 'height', mode='before')
    @classmethod
    def parse_dimension(cls, v):
        # Probes occasionally report "N/A" or floats for dimensions
        try:
            return int(float(v))
        except (TypeError, ValueError, OverflowError):
            return None

    @field_validator('disposition', mode='before')
    @classmethod
    def parse_disposition(cls, v):
        return v if isinstance(v, dict) else {}

    @property
    def kind(self) -> str:
        return (self.codec_type or '').lower()

    @property
    def codec(self) -> str:
        return (self.codec_name or '').lower()

    @property
    def is_still_image(self) -> bool:
        """Attached picture or image-coded video track"""
        if self.kind != 'video':
            return False
        return bool(self.disposition.get('attached_pic')) or self.codec in IMAGE_CODECS


class MediaFile(BaseModel):
    """Media file as handed over by the host pipeline"""
    file_medium: str = 'other'
    streams: List[StreamInfo] = Field(default_factory=list)
    bit_rate: Any = None
    media_info: Optional[Dict[str, Any]] = None
    file_path: Optional[Path] = None

    @classmethod
    def from_host(cls, data: Dict[str, Any]) -> 'MediaFile':
        """Build from the host file object (fileMedium, ffProbeData, mediaInfo)"""
        probe = data.get('ffProbeData') or {}
        return cls(
            file_medium=data.get('fileMedium') or 'other',
            streams=probe.get('streams') or [],
            bit_rate=data.get('bit_rate'),
            media_info=data.get('mediaInfo'),
            file_path=data.get('file'),
        )

    @classmethod
    def from_probe(cls, probe: Dict[str, Any], mediainfo: Optional[Dict[str, Any]] = None,
                   file_path: Optional[Path] = None) -> 'MediaFile':
        """Build from ffprobe -show_streams -show_format JSON output"""
        streams = [StreamInfo(**s) for s in probe.get('streams') or []]
        # Cover art alone does not make an audio file a video
        types = {s.kind for s in streams if not s.is_still_image}
        if 'video' in types:
            medium = 'video'
        elif 'audio' in types:
            medium = 'audio'
        else:
            medium = 'other'

        # mediainfo --Output=JSON nests tracks under "media"
        media_info = None
        if mediainfo:
            media_info = mediainfo.get('media', mediainfo)

        return cls(
            file_medium=medium,
            streams=streams,
            bit_rate=(probe.get('format') or {}).get('bit_rate'),
            media_info=media_info,
            file_path=file_path,
        )


class PolicyInputs(BaseModel):
    """User-tunable thresholds for the transcode decision"""
    model_config = ConfigDict(frozen=True)

    target_codec_compression: float = Field(
        default=0.12, gt=0,
        description='A guessed compression ratio to compute optimal bitrate. e.g. 0.08')
    cqv: int = Field(
        default=28, ge=0, le=51,
        description='Constant Quality value for NVENC (lower = higher quality). e.g. 28')
    bframe: int = Field(
        default=0, ge=0, le=5,
        description='Number of B-frames (0-5). Set 0 to disable.')
    ten_bit: bool = Field(
        default=True,
        description='Enable 10-bit output (p010le) if supported.')
    ffmpeg_preset: str = Field(
        default='medium',
        description='FFmpeg preset for encoding (fast, medium, slow, p1-p7, etc.).')
    low_res_threshold: int = Field(
        default=720, ge=0,
        description='Skip HEVC files with height <= this value.')
    min_compression_gain: float = Field(
        default=0.10, ge=0, le=1,
        description='Minimum proportional bitrate reduction (e.g. 0.1 = 10%) to trigger transcode.')

    @field_validator('ffmpeg_preset')
    @classmethod
    def validate_preset(cls, v):
        v = v.strip().lower()
        if v not in NVENC_PRESETS:
            raise ValueError(f'Preset must be one of: {", ".join(sorted(NVENC_PRESETS))}')
        return v


class InspectedMedia(BaseModel):
    """Canonical attributes of the primary video stream"""
    video: StreamInfo
    streams: List[StreamInfo]
    codec: str
    width: Optional[int] = None
    height: Optional[int] = None
    bitrate: Optional[float] = None
    fps: float = 30.0


class Verdict(Enum):
    SKIP_NOT_VIDEO = "skip_not_video"
    SKIP_NO_VIDEO_STREAM = "skip_no_video_stream"
    SKIP_LOW_RES = "skip_low_res"  # hevc at or below the low-res threshold
    SKIP_INSUFFICIENT_GAIN = "skip_insufficient_gain"  # hevc already near optimal
    TRANSCODE = "transcode"


class PolicyVerdict(BaseModel):
    verdict: Verdict
    optimal_bitrate: Optional[int] = None
    gain: Optional[float] = None

    @property
    def should_process(self) -> bool:
        return self.verdict == Verdict.TRANSCODE


class Decision(BaseModel):
    """Outcome of one plugin invocation"""
    model_config = ConfigDict(frozen=True)

    should_process: bool = False
    container_extension: str = 'mkv'
    arguments: Tuple[str, ...] = ()
    log: Tuple[str, ...] = ()

    @property
    def preset(self) -> str:
        """Arguments as a single string, host placeholder included"""
        return ' '.join(self.arguments)

    def to_host_response(self) -> Dict[str, Any]:
        """Render the response object expected by the host pipeline"""
        return {
            'processFile': self.should_process,
            'preset': self.preset,
            'container': f'.{self.container_extension}',
            'handBrakeMode': False,
            'FFmpegMode': self.should_process,
            'reQueueAfter': True,
            'infoLog': ''.join(f'{line}\n' for line in self.log),
        }
