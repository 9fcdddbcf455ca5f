"""
Audio normalisation.

Every speaker recording is converted to a 16-bit mono WAV file at a fixed
sample rate before it is uploaded, so the recogniser can be configured with a
single ``LINEAR16`` encoding regardless of what the users recorded with.
Decoding is done by `pydub`, which delegates to ``ffmpeg``.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".flac", ".wav", ".mp3", ".m4a", ".ogg", ".mp4"}

# LINEAR16 means signed 16-bit samples.
SAMPLE_WIDTH_BYTES = 2


def is_supported_audio(path: str) -> bool:
    """Check whether ``path`` has an extension the pipeline can decode."""
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def normalise_audio(path: str, *, sample_rate: int = 16_000) -> str:
    """Write a 16-bit mono WAV copy of ``path`` resampled to ``sample_rate``.

    Returns:
        Path of the temporary WAV file.  The caller removes it with
        :func:`discard` once it has been uploaded.

    Raises:
        ValueError: If the extension is not in :data:`SUPPORTED_EXTENSIONS`
            or ffmpeg cannot decode the file.
    """
    suffix = Path(path).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported audio type: {suffix}")
    try:
        source = AudioSegment.from_file(path)
    except CouldntDecodeError as exc:
        raise ValueError(f"Could not decode {path}") from exc
    logger.info(
        "Decoded %s: %d channel(s), %d Hz, %.1f s",
        path,
        source.channels,
        source.frame_rate,
        source.duration_seconds,
    )
    track = source.set_channels(1).set_frame_rate(sample_rate).set_sample_width(SAMPLE_WIDTH_BYTES)
    with tempfile.NamedTemporaryFile(prefix="recap-", suffix=".wav", delete=False) as handle:
        track.export(handle, format="wav")
    return handle.name


def discard(path: Optional[str]) -> None:
    """Remove a temporary file, ignoring files that are already gone."""
    if not path:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Could not remove temporary file %s", path)
