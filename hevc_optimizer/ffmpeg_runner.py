"""
FFmpeg/ffprobe/mediainfo execution
"""

import json
import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

INTERRUPTED = 130

_TIME_RE = re.compile(r'time=(\d{2}):(\d{2}):(\d{2})\.(\d{2})')


def parse_progress_time(line: str) -> Optional[float]:
    """Seconds encoded so far from an ffmpeg progress/stats line"""
    line = line.strip()
    if line.startswith('out_time_us='):
        try:
            return int(line.split('=', 1)[1]) / 1_000_000
        except ValueError:
            return None

    match = _TIME_RE.search(line)
    if match:
        hours, minutes, seconds, centis = (int(g) for g in match.groups())
        return hours * 3600 + minutes * 60 + seconds + centis / 100
    return None


def run_simple(cmd) -> Tuple[int, str, str]:
    cmd = [str(c) for c in cmd]
    logger.debug("Running: %s", ' '.join(cmd))
    p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    return p.returncode, p.stdout, p.stderr


def run(cmd, progress_callback: Optional[Callable[[float], None]] = None) -> Tuple[int, str]:
    """Run ffmpeg, reporting encoded seconds to ``progress_callback``.

    Returns the exit code and the collected stderr. Ctrl+C terminates the
    child and returns 130.
    """
    cmd = [str(c) for c in cmd]
    logger.debug("Running: %s", ' '.join(cmd))
    p = subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE, text=True)

    stderr_lines: List[str] = []
    try:
        for line in p.stderr:
            stderr_lines.append(line)
            seconds = parse_progress_time(line)
            if seconds is not None and progress_callback:
                progress_callback(seconds)
        p.wait()
    except KeyboardInterrupt:
        p.terminate()
        try:
            p.wait(timeout=5)
        except subprocess.TimeoutExpired:
            p.kill()
            p.wait()
        return INTERRUPTED, ''.join(stderr_lines)

    return p.returncode, ''.join(stderr_lines)


def ffprobe_json(path: Path) -> dict:
    """Streams and format of a media file"""
    cmd = ['ffprobe', '-v', 'error', '-show_streams', '-show_format', '-of', 'json', str(path)]
    code, out, err = run_simple(cmd)
    if code != 0:
        raise RuntimeError(f'ffprobe failed for {path}: {err.strip()}')
    return json.loads(out or '{}')


def mediainfo_json(path: Path) -> Optional[dict]:
    """mediainfo JSON output, None when mediainfo is unavailable or fails"""
    if shutil.which('mediainfo') is None:
        return None
    code, out, err = run_simple(['mediainfo', '--Output=JSON', str(path)])
    if code != 0:
        logger.warning("mediainfo failed for %s: %s", path, err.strip())
        return None
    try:
        return json.loads(out or '{}')
    except json.JSONDecodeError as e:
        logger.warning("Unreadable mediainfo output for %s: %s", path, e)
        return None


def get_duration(probe: dict) -> Optional[float]:
    try:
        return float((probe.get('format') or {}).get('duration'))
    except (TypeError, ValueError):
        return None


def has_hevc_nvenc() -> bool:
    """Check whether ffmpeg was built with the hevc_nvenc encoder"""
    code, out, err = run_simple(['ffmpeg', '-hide_banner', '-encoders'])
    if code != 0:
        logger.warning("Could not list ffmpeg encoders: %s", err.strip())
        return False
    return 'hevc_nvenc' in out.lower()
