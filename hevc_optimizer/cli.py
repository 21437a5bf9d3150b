"""
Command line host for the NVENC HEVC transcode decision

Usage:
  hevc-optimizer /path/to/folder [options]
  hevc-optimizer /path/to/file.mkv --execute
  hevc-optimizer /path/to/folder --json --cqv 26 --target-codec-compression 0.1
  hevc-optimizer --describe

Requires: ffmpeg, ffprobe in PATH (mediainfo optional, used for frame rate)
"""

import argparse
import json
import shutil
import sys
from pathlib import Path

from .config import details, merge_inputs
from .ffmpeg_runner import has_hevc_nvenc
from .file_utils import collect_video_files
from .processor import process_file
from .rich_console import rich_output, setup_logging

# CLI destination -> host input name
INPUT_OPTIONS = {
    'target_codec_compression': 'targetCodecCompression',
    'cqv': 'cqv',
    'bframe': 'bframe',
    'ten_bit': 'ten_bit',
    'preset': 'ffmpeg_preset',
    'low_res_threshold': 'lowResThreshold',
    'min_compression_gain': 'minCompressionGain',
}


def parse_arguments(argv=None):
    ap = argparse.ArgumentParser(description='Decide and build NVENC HEVC transcodes from probed bitrate')
    ap.add_argument('root', type=Path, nargs='?', help='Root directory (recursive) or single file')
    ap.add_argument('--describe', action='store_true', help='Print the plugin descriptor as JSON and exit')

    # Policy inputs; unset options fall back to the plugin defaults
    ap.add_argument('--target-codec-compression', type=float,
                    help='Compression coefficient for the optimal bitrate (default: 0.12)')
    ap.add_argument('--cqv', type=int, help='NVENC constant quality value (default: 28)')
    ap.add_argument('--bframe', type=int, help='Number of B-frames, 0-5 (default: 0)')
    ap.add_argument('--ten-bit', dest='ten_bit', action=argparse.BooleanOptionalAction, default=None,
                    help='Request 10-bit p010le output (default: on)')
    ap.add_argument('--preset', type=str, help='NVENC preset (default: medium)')
    ap.add_argument('--low-res-threshold', type=int,
                    help='Skip HEVC files at or below this height (default: 720)')
    ap.add_argument('--min-compression-gain', type=float,
                    help='Minimum bitrate reduction for HEVC sources (default: 0.10)')

    # Operation modes
    ap.add_argument('--execute', action='store_true', help='Run ffmpeg for files that need a transcode')
    ap.add_argument('--out', type=Path, default=None, help='Output directory (default: beside the source)')
    ap.add_argument('--limit', type=int, help='Only look at the first N files')
    ap.add_argument('--json', action='store_true', help='Print host responses as JSON')
    ap.add_argument('--debug', action='store_true', help='Verbose logging')

    args = ap.parse_args(argv)
    if not args.describe and args.root is None:
        ap.error('root is required unless --describe is given')
    if args.limit is not None and args.limit <= 0:
        ap.error('--limit must be positive')
    return args


def collect_inputs(args) -> dict:
    """Host-style input mapping from the CLI options that were set"""
    return {host: getattr(args, dest) for dest, host in INPUT_OPTIONS.items()
            if getattr(args, dest) is not None}


def main(argv=None):
    args = parse_arguments(argv)
    setup_logging(args.debug)

    if args.describe:
        print(json.dumps(details(), indent=2))
        return 0

    required = ['ffprobe'] + (['ffmpeg'] if args.execute else [])
    missing = [tool for tool in required if shutil.which(tool) is None]
    if missing:
        print(f'Error: {", ".join(missing)} not found in PATH', file=sys.stderr)
        return 2
    if args.execute and not has_hevc_nvenc():
        print('Error: ffmpeg has no hevc_nvenc encoder', file=sys.stderr)
        return 2

    root: Path = args.root
    if not root.exists():
        print(f'Path does not exist: {root}', file=sys.stderr)
        return 2

    inputs, warnings = merge_inputs(collect_inputs(args))
    for warning in warnings:
        rich_output.print_warning(warning)

    files = collect_video_files(root)
    if args.limit:
        files = files[:args.limit]
    out_dir = args.out.resolve() if args.out else None

    counters = {'total': len(files), 'transcode': 0, 'skipped': 0, 'errors': 0}
    for path in files:
        result = process_file(path, inputs, out_dir, execute=args.execute, as_json=args.json)
        if result in ('transcode', 'processed'):
            counters['transcode'] += 1
        elif result == 'skipped':
            counters['skipped'] += 1
        elif result == 'interrupted':
            break
        else:
            counters['errors'] += 1

    if not args.json:
        rich_output.print_final_summary(counters)
    return 1 if counters['errors'] else 0


if __name__ == '__main__':
    sys.exit(main())
