"""
Command-line entry point.

Usage::

    recap Hero=input/user1.flac GameMaster=input/user2.flac --output-dir out/

Each positional argument maps a speaker name to that speaker's own audio
track.  Settings not covered by options are read from the environment (see
:mod:`recap.config`).
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import pipeline
from .config import RecapConfig
from .errors import ConfigurationError, NothingToSummarizeError, SummarizationError
from .transcription import SpeakerAudio

logger = logging.getLogger(__name__)


def parse_speaker(value: str) -> SpeakerAudio:
    speaker, sep, path = value.partition("=")
    if not sep or not speaker.strip() or not path.strip():
        raise argparse.ArgumentTypeError(f"expected SPEAKER=PATH, got {value!r}")
    return SpeakerAudio(speaker.strip(), path.strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recap",
        description="Transcribe per-speaker recordings into one conversation and summarise it.",
    )
    parser.add_argument("speakers", nargs="+", type=parse_speaker, metavar="SPEAKER=PATH")
    parser.add_argument("--output-dir", help="directory for transcription.txt and summary.txt")
    parser.add_argument("--silence-threshold", type=float, help="seconds of silence that end a turn")
    parser.add_argument("--transcript-only", action="store_true", help="stop after writing the transcript")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    try:
        config = RecapConfig.from_env()
        overrides = {}
        if args.output_dir:
            overrides["output_dir"] = args.output_dir
        if args.silence_threshold is not None:
            overrides["silence_threshold"] = args.silence_threshold
        config = config.with_overrides(**overrides)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    try:
        result = pipeline.run(args.speakers, config, summarise=not args.transcript_only)
    except NothingToSummarizeError:
        logger.error("No conversation detected, nothing to summarise")
        return 1
    except (ConfigurationError, SummarizationError) as exc:
        logger.error("Could not create summary: %s", exc)
        return 1

    print(f"This is the full conversation:\n\n{result.transcript}\n")
    if result.summary is not None:
        print(f"This is the summary:\n\n{result.summary}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
