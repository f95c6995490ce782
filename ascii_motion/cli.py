#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Command Line
==========================================
argparse front-end: renders an image, or samples a video / animated GIF and
writes or plays the rendered frames.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import numpy as np
from PIL import Image

from .config import ConfigManager, Presets, RenderConfig
from .constants import CharacterSet, DEFAULT_FPS, DitherAlgorithm, EdgeMethod
from .errors import AsciiMotionError
from .logging_conf import setup_logging
from .pipeline import render
from .quantizer import TextFrame, character_distribution
from .session import PlaybackSession
from .video import frame_report, gif_frames, probe_video, recommended_frame_count, sample_frames

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = {'.mp4', '.mov', '.avi', '.mkv', '.webm', '.m4v', '.mpg', '.mpeg'}
FRAME_SEPARATOR = '\f\n'
CLEAR_SCREEN = '\033[H\033[2J'

# argparse dest -> RenderConfig field
OVERRIDES = {
    'width': 'ascii_width',
    'brightness': 'brightness',
    'contrast': 'contrast',
    'blur': 'blur',
    'invert': 'invert',
    'ignore_white': 'ignore_white',
    'ignore_green': 'ignore_green',
    'charset': 'charset',
    'manual_char': 'manual_char',
    'custom_charset': 'custom_gradient',
    'edge_method': 'edge_method',
    'threshold': 'edge_threshold',
    'dog_sigma1': 'dog_sigma1',
    'dog_sigma2': 'dog_sigma2',
    'dog_threshold': 'dog_threshold',
    'canny_low': 'canny_low',
    'canny_high': 'canny_high',
    'canny_sigma': 'canny_sigma',
    'clahe_tile_size': 'clahe_tile_size',
    'clahe_clip_limit': 'clahe_clip_limit',
    'lbp_radius': 'lbp_radius',
    'lbp_neighbors': 'lbp_neighbors',
    'lbp_threshold': 'lbp_threshold',
    'lbp_uniform': 'lbp_uniform',
}


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog='ascii-motion',
        description='Convert images, videos and animated GIFs to ASCII art',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s image.png                          # Basic conversion
  %(prog)s image.png -w 80 --charset standard # 80 columns, short gradient
  %(prog)s image.png --edge-method canny      # Directional line art
  %(prog)s image.png --dither ordered         # Bayer dithering
  %(prog)s clip.mp4 --frames 48 -o clip.txt   # Sample and render a video
  %(prog)s anim.gif --play --fps 15           # Play in the terminal
        """
    )

    # Input/Output
    parser.add_argument('input', help='Input image, video or animated GIF')
    parser.add_argument('-o', '--output', help='Output text file (frames separated by form feeds)')

    # Configuration sources
    parser.add_argument('--config', help='Load settings from a JSON config file')
    parser.add_argument('--preset', choices=Presets.NAMES, help='Start from a named preset')
    parser.add_argument('--save-config', help='Write the effective settings to a JSON file')

    # Size and luminance
    parser.add_argument('-w', '--width', type=int, help='Output width in characters')
    parser.add_argument('--brightness', type=float, help='Brightness offset')
    parser.add_argument('--contrast', type=float, help='Contrast (-255 to <259)')
    parser.add_argument('--blur', type=float, help='Gaussian blur radius applied while resizing')
    parser.add_argument('-i', '--invert', action='store_true', default=None, help='Invert brightness')
    parser.add_argument('--ignore-white', dest='ignore_white', action='store_true', default=None,
                        help='Render pure white as spaces')
    parser.add_argument('--keep-white', dest='ignore_white', action='store_false', default=None,
                        help='Render pure white with the gradient')
    parser.add_argument('--ignore-green', action='store_true', default=None,
                        help='Render green-screen pixels as spaces')

    # Character set
    parser.add_argument('--charset', choices=CharacterSet.names(), help='Character gradient')
    parser.add_argument('--manual-char', help="Glyph for the 'manual' charset")
    parser.add_argument('--custom-charset', help='Custom gradient string (overrides --charset)')

    # Dithering
    parser.add_argument('--dither', choices=[a.value for a in DitherAlgorithm] + ['none'],
                        help='Dithering algorithm, or none')

    # Edge / texture methods
    parser.add_argument('--edge-method', choices=[m.value for m in EdgeMethod],
                        help='Edge or texture method')
    parser.add_argument('-t', '--threshold', type=float, help='Sobel threshold (0-255)')
    parser.add_argument('--dog-sigma1', type=float, help='DoG inner sigma')
    parser.add_argument('--dog-sigma2', type=float, help='DoG outer sigma')
    parser.add_argument('--dog-threshold', type=float, help='DoG contour threshold')
    parser.add_argument('--canny-low', type=float, help='Canny weak edge threshold')
    parser.add_argument('--canny-high', type=float, help='Canny strong edge threshold')
    parser.add_argument('--canny-sigma', type=float, help='Canny blur sigma')
    parser.add_argument('--clahe-tile-size', type=int, help='CLAHE tile size')
    parser.add_argument('--clahe-clip-limit', type=float, help='CLAHE clip limit')
    parser.add_argument('--lbp-radius', type=int, help='LBP sampling radius')
    parser.add_argument('--lbp-neighbors', type=int, help='LBP sample count')
    parser.add_argument('--lbp-threshold', type=float, help='LBP comparison margin')
    parser.add_argument('--lbp-uniform', action='store_true', default=None,
                        help='Collapse non-uniform LBP codes')

    # Animation
    parser.add_argument('--frames', type=int, help='Frames to sample from a video (default: recommended)')
    parser.add_argument('--fps', type=float, default=DEFAULT_FPS, help='Playback rate')
    parser.add_argument('--play', action='store_true', help='Play frames in the terminal')
    parser.add_argument('--loops', type=int, default=0, help='Loops to play (0 = until Ctrl-C)')
    parser.add_argument('--seed', type=int, help='Seed for noise dithering')

    # Other options
    parser.add_argument('--analyze', action='store_true', help='Show character distribution')
    parser.add_argument('--log-file', help='Also write logs to a rotating file')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Verbose output (-vv for debug)')

    return parser


def build_config(args: argparse.Namespace) -> RenderConfig:
    """Effective configuration: file or preset, then command line overrides."""
    if args.config:
        config = ConfigManager(Path(args.config)).load()
    elif args.preset:
        config = Presets.get(args.preset)
    else:
        config = RenderConfig()

    changes = {}
    for dest, field_name in OVERRIDES.items():
        value = getattr(args, dest, None)
        if value is not None:
            changes[field_name] = value
    if args.dither is not None:
        if args.dither == 'none':
            changes['dithering'] = False
        else:
            changes['dithering'] = True
            changes['dither_algorithm'] = args.dither
    return config.replace(**changes)


def load_source(path: str, frame_count: Optional[int], fps: float = DEFAULT_FPS) -> List[Image.Image]:
    """Frames of the input file: one for a still image, several for video/GIF."""
    suffix = Path(path).suffix.lower()
    if suffix in VIDEO_EXTENSIONS:
        info = probe_video(path)
        count = frame_count or max(1, recommended_frame_count(info.duration))
        logger.info(frame_report(count, info.duration, fps).describe())
        return sample_frames(path, count)
    if suffix == '.gif':
        frames = gif_frames(path)
        if frames:
            return frames

    with Image.open(path) as image:
        return [image.convert('RGBA')]


def _print_progress(index: int, total: int) -> None:
    percent = round((index + 1) / total * 100)
    print(f"\rConverting frames to ASCII: {percent}% ({index + 1}/{total})",
          end='' if index + 1 < total else '\n', file=sys.stderr, flush=True)


def play_in_terminal(session: PlaybackSession, loops: int = 0) -> None:
    """Play the session's frames until interrupted or `loops` loops are shown."""
    session.play()
    remaining = loops * len(session.frames) if loops > 0 else None
    frame = session.current_frame
    try:
        while remaining is None or remaining > 0:
            sys.stdout.write(CLEAR_SCREEN + frame.text)
            sys.stdout.flush()
            time.sleep(session.frame_delay)
            frame = session.tick()
            if remaining is not None:
                remaining -= 1
    except KeyboardInterrupt:
        print("\nAnimation stopped.")
    finally:
        session.pause()


def write_frames(frames: List[TextFrame], output: Optional[str]) -> None:
    text = FRAME_SEPARATOR.join(frame.text for frame in frames)
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(text)
        print(f"Saved {len(frames)} frame(s) to {output}", file=sys.stderr)
    else:
        sys.stdout.write(text)


def print_analysis(frames: List[TextFrame]) -> None:
    print("\n" + "=" * 50)
    print("Analysis:")
    print("=" * 50)

    totals = {}
    for frame in frames:
        for char, count in character_distribution(frame).items():
            totals[char] = totals.get(char, 0) + count
    dist = dict(sorted(totals.items(), key=lambda x: -x[1]))

    print("\nCharacter Distribution (top 10):")
    for char, count in list(dist.items())[:10]:
        char_display = repr(char) if char in ' \t\n' else char
        print(f"  {char_display}: {count}")


def run(args: argparse.Namespace) -> int:
    config = build_config(args)
    if args.save_config:
        ConfigManager(Path(args.save_config)).save(config)

    rng = np.random.default_rng(args.seed)
    images = load_source(args.input, args.frames, args.fps)
    logger.info("Loaded %d frame(s) from %s", len(images), args.input)

    if len(images) == 1 and not args.play:
        frames = [render(images[0], config, rng=rng)]
    else:
        session = PlaybackSession(config, rng=rng, fps=args.fps)
        session.load_frames(images)
        frames = session.process_all(progress=_print_progress)
        if args.play:
            play_in_terminal(session, args.loops)
            return 0

    write_frames(frames, args.output)
    if args.analyze:
        print_analysis(frames)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for command line usage."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    level = 'DEBUG' if args.verbose > 1 else 'INFO' if args.verbose else 'WARNING'
    setup_logging(level, args.log_file)

    try:
        return run(args)
    except (AsciiMotionError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
