"""Command-line entry point: pick a frame source and run the sequencer.

Usage::

    bgsub -vid video.avi
    bgsub -img /data/images/1.png
    bgsub -img /data/images/001.png --config bgsub.yaml --algorithm KNN
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

import yaml
from pydantic import ValidationError

from bgsub import __version__
from bgsub.core import BgsubError, ExitReason, SequencerResult
from bgsub.display import DisplaySink, create_display
from bgsub.sequencer import FrameSequencer
from bgsub.sources import FrameSource, ImageSequenceSource, VideoFileSource
from bgsub.subtractors import BackgroundModel, Subtractor
from bgsub.utils.config import BgsubConfig, SequenceConfig, load_config

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

_DESCRIPTION = """\
This program shows how to use background subtraction methods provided by
OpenCV. You can process both videos (-vid) and images (-img).

For an image sequence, give the first file; following files are found by
incrementing the number in its name (1.png, 2.png, ...).

Press ESC or 'q' in a window to quit."""

_EPILOG = """\
examples:
  bgsub -vid video.avi
  bgsub -img /data/images/1.png"""


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    ap = _Parser(
        prog="bgsub",
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    mode = ap.add_mutually_exclusive_group(required=True)
    mode.add_argument("-vid", dest="video", metavar="VIDEO", help="Video file to process")
    mode.add_argument(
        "-img", dest="image", metavar="IMAGE",
        help="First image of a numbered sequence, e.g. /data/images/1.png",
    )
    ap.add_argument("--config", help="YAML configuration file")
    ap.add_argument(
        "--algorithm", type=str.upper, choices=["MOG2", "KNN"],
        help="Background subtractor (overrides config)",
    )
    ap.add_argument(
        "--log-level", type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (overrides config)",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def make_source(args: argparse.Namespace, config: BgsubConfig) -> FrameSource:
    """Build the frame source selected on the command line (unopened)."""
    if args.video is not None:
        return VideoFileSource(args.video)
    return ImageSequenceSource(
        args.image, preserve_padding=config.sequence.preserve_padding
    )


def process(
    source: FrameSource,
    config: BgsubConfig,
    model: Optional[Subtractor] = None,
    display: Optional[DisplaySink] = None,
) -> SequencerResult:
    """Open *source*, run it through the background model, release everything.

    Raises:
        SourceOpenError: If the source cannot be opened.  No model or
            window is created in that case.
    """
    with source:
        model = model or BackgroundModel(config.subtractor)
        display = display or create_display(config.display)
        try:
            return FrameSequencer(source, model, display, config.display).run()
        finally:
            display.close()


def exit_code(result: SequencerResult, policy: SequenceConfig) -> int:
    """Map a sequencer result to a process exit status."""
    if result.exit_reason is ExitReason.USER_QUIT:
        return EXIT_SUCCESS
    if result.exit_reason is ExitReason.END_OF_SEQUENCE and not policy.end_of_input_is_error:
        return EXIT_SUCCESS
    return EXIT_FAILURE


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the bgsub command."""
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.algorithm:
        overrides["subtractor.algorithm"] = args.algorithm
    if args.log_level:
        overrides["logging.level"] = args.log_level

    try:
        config = load_config(args.config, overrides)
    except (ValidationError, yaml.YAMLError, TypeError, OSError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_FAILURE
    config.setup_logging()

    try:
        source = make_source(args, config)
        result = process(source, config)
    except BgsubError as e:
        logger.debug("Aborting: %s", e, exc_info=True)
        print(e, file=sys.stderr)
        print("Exiting...", file=sys.stderr)
        return EXIT_FAILURE

    code = exit_code(result, config.sequence)
    if code != EXIT_SUCCESS:
        print(result.detail, file=sys.stderr)
        print("Exiting...", file=sys.stderr)
    return code


if __name__ == "__main__":
    sys.exit(main())
