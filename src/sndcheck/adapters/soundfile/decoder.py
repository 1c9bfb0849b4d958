"""Block-wise audio decoding for the loudness analyzer.

Decoders expose the channel count, sample rate and frame count of a file and
yield its frames as 2-D float32 ``(frames, channels)`` blocks in file order.
The analyzer never assumes the whole file arrives in one call.

Design notes:
- soundfile (native C via libsndfile) for WAV/FLAC/OGG, read block by block
- pydub (ffmpeg subprocess) for M4A/MP3 or when soundfile rejects a file;
  pydub decodes the whole file, which is then handed out in blocks
- Channels are never mixed here; downmixing is the extractor's job
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Tuple, Union

import numpy as np

from sndcheck.core.exceptions import InvalidConfigurationError, InvalidInputError
from sndcheck.core.mono import MonoSampleExtractor

logger = logging.getLogger(__name__)

# 1K frames per read
DEFAULT_BLOCK_FRAMES = 1024
NATIVE_EXTENSIONS = {".wav", ".flac", ".ogg", ".aiff"}

# Everything the decoders can open; non-native formats need ffmpeg
SUPPORTED_AUDIO_EXTENSIONS: List[str] = [
    ".wav",
    ".flac",
    ".ogg",
    ".aiff",
    ".mp3",
    ".m4a",
    ".aac",
    ".wma",
]


@dataclass
class AudioInfo:
    """Stream properties reported by a decoder."""

    path: str
    sample_rate: int
    channels: int
    frames: int
    backend: str = ""


class AudioDecoder:
    """Base decoder: context manager that yields blocks of frames."""

    backend = ""

    def __init__(self, info: AudioInfo, block_frames: int = DEFAULT_BLOCK_FRAMES) -> None:
        if info.channels <= 0:
            raise InvalidInputError(
                f"Decoder reported {info.channels} channels.", path=info.path
            )
        self.info = info
        self.block_frames = block_frames

    @property
    def channels(self) -> int:
        return self.info.channels

    @property
    def sample_rate(self) -> int:
        return self.info.sample_rate

    @property
    def frames(self) -> int:
        return self.info.frames

    def blocks(self) -> Iterator[np.ndarray]:
        """Yield 2-D float32 blocks of at most ``block_frames`` frames."""
        raise NotImplementedError

    def close(self) -> None:
        """Release the underlying file."""

    def __enter__(self) -> "AudioDecoder":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class SoundfileDecoder(AudioDecoder):
    """Streams a file through libsndfile without loading it whole."""

    backend = "soundfile"

    def __init__(self, filepath: str, block_frames: int = DEFAULT_BLOCK_FRAMES) -> None:
        import soundfile as sf

        self._file = sf.SoundFile(filepath)
        info = AudioInfo(
            path=filepath,
            sample_rate=self._file.samplerate,
            channels=self._file.channels,
            frames=self._file.frames,
            backend=self.backend,
        )
        try:
            super().__init__(info, block_frames)
        except InvalidInputError:
            self._file.close()
            raise

    def blocks(self) -> Iterator[np.ndarray]:
        yield from self._file.blocks(
            blocksize=self.block_frames, dtype="float32", always_2d=True
        )

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


class PydubDecoder(AudioDecoder):
    """Decodes a file via pydub/ffmpeg and hands it out in blocks."""

    backend = "pydub"

    def __init__(self, filepath: str, block_frames: int = DEFAULT_BLOCK_FRAMES) -> None:
        from pydub import AudioSegment

        segment = AudioSegment.from_file(filepath)
        self._audio = _segment_to_frames(segment)
        info = AudioInfo(
            path=filepath,
            sample_rate=segment.frame_rate,
            channels=segment.channels,
            frames=int(self._audio.shape[0]),
            backend=self.backend,
        )
        super().__init__(info, block_frames)

    def blocks(self) -> Iterator[np.ndarray]:
        for start in range(0, self._audio.shape[0], self.block_frames):
            yield self._audio[start : start + self.block_frames]


def _segment_to_frames(segment) -> np.ndarray:
    """Convert a pydub AudioSegment to a float32 ``(frames, channels)`` array.

    pydub hands out signed integer samples; they are scaled to [-1.0, 1.0).
    """
    channels = segment.channels
    if channels <= 0:
        raise InvalidInputError(f"Decoder reported {channels} channels.")

    sample_width = segment.sample_width
    if sample_width not in (1, 2, 3, 4):
        raise InvalidInputError(
            f"Unsupported sample width: {sample_width} bytes. "
            f"Expected 1 (8-bit), 2 (16-bit), 3 (24-bit), or 4 (32-bit)."
        )

    array = np.array(segment.get_array_of_samples())
    scale = float(1 << (8 * sample_width - 1))
    audio = (array.astype(np.float64) / scale).astype(np.float32)
    return audio.reshape(-1, channels)


def open_audio(
    filepath: Union[str, Path],
    block_frames: int = DEFAULT_BLOCK_FRAMES,
) -> AudioDecoder:
    """Open an audio file using the fastest available backend.

    Routes to optimal decoder:
    - soundfile (native C via libsndfile) for WAV/FLAC/OGG/AIFF
    - pydub (ffmpeg subprocess) for M4A/MP3, or if soundfile failed

    Args:
        filepath: Path to audio file.
        block_frames: Maximum frames per yielded block.

    Returns:
        An AudioDecoder; use it as a context manager.

    Raises:
        InvalidConfigurationError: If block_frames is not positive.
        InvalidInputError: If the file is missing or cannot be decoded.
    """
    if isinstance(block_frames, bool) or not isinstance(block_frames, int) or block_frames <= 0:
        raise InvalidConfigurationError(
            f"block_frames must be a positive integer, got {block_frames!r}.",
            key="block_frames",
        )

    path = Path(filepath)
    if not path.is_file():
        raise InvalidInputError("Audio file not found.", path=str(filepath))

    ext = path.suffix.lower()

    # Fast path: soundfile for native formats
    if ext in NATIVE_EXTENSIONS:
        try:
            decoder = SoundfileDecoder(str(path), block_frames)
            logger.debug(
                f"Opened {ext} file via soundfile: {path.name} "
                f"({decoder.sample_rate}Hz, {decoder.channels}ch, {decoder.frames} frames)"
            )
            return decoder
        except InvalidInputError:
            raise
        except Exception as e:
            logger.debug(f"soundfile failed for {filepath}, using pydub fallback: {e}")

    # Slow path: pydub for M4A, MP3, or if soundfile failed
    logger.debug(f"Opening {ext} file via pydub: {path.name}")
    try:
        return PydubDecoder(str(path), block_frames)
    except InvalidInputError:
        raise
    except Exception as e:
        raise InvalidInputError(f"Error opening audio file: {e}", path=str(filepath)) from e


def decode_mono(
    filepath: Union[str, Path],
    block_frames: int = DEFAULT_BLOCK_FRAMES,
) -> Tuple[np.ndarray, AudioInfo]:
    """Decode a file block by block into a mono sample stream.

    Args:
        filepath: Path to audio file.
        block_frames: Maximum frames per decoder read.

    Returns:
        Tuple of (samples, info) where samples is a read-only float64 array.

    Raises:
        InvalidInputError: If the file cannot be decoded.
    """
    with open_audio(filepath, block_frames) as decoder:
        extractor = MonoSampleExtractor(decoder.channels)

        try:
            for block in decoder.blocks():
                extractor.append(block)
        except InvalidInputError:
            raise
        except Exception as e:
            raise InvalidInputError(f"Error decoding audio file: {e}", path=str(filepath)) from e

        info = decoder.info

    logger.debug(
        f"Decoded {extractor.frame_count} frames from {Path(filepath).name} via {info.backend}"
    )
    return extractor.samples(), info
