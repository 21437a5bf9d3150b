"""
File handling utilities and path operations
"""

from pathlib import Path
from typing import List

VIDEO_EXTS = {'.mkv', '.mp4', '.m4v', '.mov', '.avi', '.wmv', '.flv', '.ts', '.m2ts', '.webm'}

CONVERT_SUFFIX = '.convert'


def format_file_size(size_bytes):
    """Convert bytes to human readable format"""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} TB"


def collect_video_files(root: Path) -> List[Path]:
    """Video files below ``root`` (or ``root`` itself), sorted by path"""
    if root.is_file():
        return [root] if root.suffix.lower() in VIDEO_EXTS else []
    return sorted(p for p in root.rglob('*') if p.is_file() and p.suffix.lower() in VIDEO_EXTS)


def output_paths(src: Path, out_dir: Path, extension: str):
    """Temporary and final output paths for a transcode of ``src``"""
    final_path = out_dir / f'{src.stem}.{extension}'
    temp_path = out_dir / f'{src.stem}.{extension}{CONVERT_SUFFIX}'
    return temp_path, final_path
