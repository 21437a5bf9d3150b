#!/usr/bin/env python3
"""
NVENC HEVC CQ:V optimiser

Decides per video file whether a re-encode to HEVC (hevc_nvenc) is worth it:
- Non-HEVC video is always transcoded
- HEVC at or below the low-res threshold is left alone
- HEVC is only transcoded when its bitrate exceeds the optimal bitrate
  (width * height * fps * targetCodecCompression) by the minimum gain
- Output container: MKV

Usage:
  python main.py /path/to/folder [options]
  python main.py /path/to/file.mkv --execute

Requires: ffmpeg, ffprobe in PATH
"""

import sys

from hevc_optimizer.cli import main

if __name__ == '__main__':
    sys.exit(main())
