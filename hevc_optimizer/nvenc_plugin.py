"""
Transcode decision entry point called by the host pipeline
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .bitrate_policy import evaluate_policy
from .config import merge_inputs
from .ffmpeg_builder import build_arguments
from .models import Decision, MediaFile, PolicyInputs
from .stream_inspector import inspect_media

logger = logging.getLogger(__name__)


def plugin(file: Union[MediaFile, Dict[str, Any]],
           inputs: Optional[Union[PolicyInputs, Mapping[str, Any]]] = None) -> Decision:
    """Decide whether ``file`` should be re-encoded to NVENC HEVC.

    ``file`` is a MediaFile or the host's file object; ``inputs`` are the
    raw plugin inputs, unset ones take their defaults. Never raises for
    missing probe data: every path ends in either skip or transcode.
    """
    media_file = file if isinstance(file, MediaFile) else MediaFile.from_host(file)
    policy_inputs, warnings = merge_inputs(inputs)

    log: List[str] = [f'⚠ {w}' for w in warnings]
    inspected = inspect_media(media_file)
    verdict = evaluate_policy(media_file, inspected, policy_inputs, log)

    if not verdict.should_process:
        logger.info("Skipping %s (%s)", media_file.file_path or 'input', verdict.verdict.value)
        return Decision(should_process=False, log=tuple(log))

    arguments = build_arguments(media_file.streams, policy_inputs)
    log.append('✔ Transcoding with NVENC HEVC')
    logger.info("Transcoding %s", media_file.file_path or 'input')
    return Decision(should_process=True, arguments=arguments, log=tuple(log))
