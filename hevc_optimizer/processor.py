"""
Per-file host flow: probe, decide, optionally run ffmpeg
"""

import json
import logging
from pathlib import Path
from typing import Optional

from .ffmpeg_builder import splice_io
from .ffmpeg_runner import INTERRUPTED, ffprobe_json, get_duration, mediainfo_json, run
from .file_utils import output_paths
from .models import MediaFile, PolicyInputs
from .nvenc_plugin import plugin
from .rich_console import rich_output

logger = logging.getLogger(__name__)

# Container extension -> ffmpeg muxer name
MUXERS = {'mkv': 'matroska'}


def probe_media_file(src: Path):
    """Probe ``src`` with ffprobe (and mediainfo when available).

    Returns the MediaFile and the duration in seconds, if known.
    """
    probe = ffprobe_json(src)
    return MediaFile.from_probe(probe, mediainfo_json(src), file_path=src), get_duration(probe)


def execute_transcode(src: Path, arguments, out_dir: Path, extension: str,
                      duration: Optional[float] = None) -> str:
    """Run ffmpeg into a .convert file and rename it on success"""
    temp_path, final_path = output_paths(src, out_dir, extension)
    if final_path.exists() and final_path != src:
        rich_output.print_skipped(f"Output already exists: {final_path}")
        return 'skipped'

    out_dir.mkdir(parents=True, exist_ok=True)
    cmd = splice_io(arguments, src, temp_path)
    cmd[1:1] = ['-y', '-hide_banner', '-loglevel', 'error', '-progress', 'pipe:2']
    # ffmpeg cannot guess a muxer from the .convert suffix
    cmd[-1:-1] = ['-f', MUXERS.get(extension, extension)]

    progress = rich_output.create_progress_bar(duration)
    with progress:
        task_id = progress.add_task(f"Encoding {src.name}", total=duration)
        ret, err = run(cmd, lambda seconds: progress.update(task_id, completed=seconds))

    if ret != 0:
        if ret == INTERRUPTED:
            rich_output.print_interrupted()
        else:
            rich_output.print_error(f"FFmpeg failed (exit code {ret})", err.strip()[-2000:] or None)
        if temp_path.exists():
            temp_path.unlink()
            logger.info("Removed partial output %s", temp_path)
        return 'interrupted' if ret == INTERRUPTED else 'error'

    # A same-named source (already .mkv) is replaced by the new encode
    temp_path.replace(final_path)
    rich_output.print_success(f"Created {final_path.name}")
    return 'processed'


def process_file(src: Path, inputs: PolicyInputs, out_dir: Optional[Path] = None,
                 execute: bool = False, as_json: bool = False) -> str:
    """Decide (and with ``execute``, transcode) a single video file.

    Returns one of 'transcode', 'processed', 'skipped', 'interrupted', 'error'.
    """
    if not as_json:
        rich_output.print_file_path(src)
    try:
        media_file, duration = probe_media_file(src)
    except (RuntimeError, ValueError) as e:
        rich_output.print_error(f"Probe failed for {src}", str(e))
        return 'error'

    decision = plugin(media_file, inputs)
    target_dir = out_dir or src.parent
    _, final_path = output_paths(src, target_dir, decision.container_extension)

    if as_json:
        rich_output.console.print_json(json.dumps({'file': str(src), **decision.to_host_response()}))
    else:
        rich_output.print_decision(media_file, decision, final_path if decision.should_process else None)

    if not decision.should_process:
        return 'skipped'
    if not execute:
        return 'transcode'
    return execute_transcode(src, decision.arguments, target_dir,
                             decision.container_extension, duration)
