"""
Mono Sample Extraction
======================

Collapse decoded multi-channel PCM into a single mono sample stream.

Every frame becomes the arithmetic mean of its channel values, all channels
weighted equally. This is a lossy, intentionally simple downmix meant to feed
the loudness analyzer; it is not a general audio-engineering downmix (no
pan law, no LFE handling, no phase compensation).

Decoders deliver audio in blocks of arbitrary size, so the extractor is
incrementally appendable: call ``append`` once per block and read the
finished stream with ``samples()``.

Example:
    >>> extractor = MonoSampleExtractor(channels=2)
    >>> extractor.append(np.array([[1.0, -1.0], [0.5, 0.5]]))
    2
    >>> extractor.samples()
    array([0. , 0.5])
"""

import logging
from typing import Iterable, List

import numpy as np

from sndcheck.core.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def _validate_channels(channels: int) -> int:
    if isinstance(channels, bool) or not isinstance(channels, (int, np.integer)):
        raise InvalidInputError(f"Channel count must be an integer, got {channels!r}.")
    if channels <= 0:
        raise InvalidInputError(f"Channel count must be positive, got {channels}.")
    return int(channels)


def downmix(block: np.ndarray, channels: int) -> np.ndarray:
    """
    Average the channels of one block of frames.

    Args:
        block: Either a 2-D ``(frames, channels)`` array or a flat array of
            interleaved channel samples.
        channels: Number of channels per frame.

    Returns:
        1-D float64 array with one mono sample per frame.

    Raises:
        InvalidInputError: If the channel count is not positive or the block
            does not line up with it.
    """
    channels = _validate_channels(channels)
    data = np.asarray(block, dtype=np.float64)

    if data.ndim == 1:
        if data.size % channels != 0:
            raise InvalidInputError(
                f"Interleaved block of {data.size} samples is not a whole number "
                f"of {channels}-channel frames."
            )
        data = data.reshape(-1, channels)
    elif data.ndim == 2:
        if data.shape[1] != channels:
            raise InvalidInputError(
                f"Block has {data.shape[1]} channels, expected {channels}."
            )
    else:
        raise InvalidInputError(f"Expected a 1-D or 2-D block, got shape {data.shape}.")

    if channels == 1:
        return data[:, 0].copy()
    return data.mean(axis=1)


class MonoSampleExtractor:
    """
    Accumulates a mono sample stream from blocks of multi-channel frames.

    Frame order is preserved across calls. The extractor owns its buffer;
    nothing is shared between instances, so each run builds its own.

    Attributes:
        channels: Number of channels per incoming frame
    """

    def __init__(self, channels: int) -> None:
        """
        Initialize the extractor.

        Args:
            channels: Channel count reported by the decoder.

        Raises:
            InvalidInputError: If channels is zero or negative.
        """
        self.channels = _validate_channels(channels)
        self._chunks: List[np.ndarray] = []
        self._frame_count = 0

    @property
    def frame_count(self) -> int:
        """Number of frames appended so far."""
        return self._frame_count

    def append(self, block: np.ndarray) -> int:
        """
        Downmix a block and append it to the stream.

        Args:
            block: Frames to append (see ``downmix`` for accepted shapes).

        Returns:
            Number of frames appended.
        """
        mono = downmix(block, self.channels)
        if mono.size:
            self._chunks.append(mono)
            self._frame_count += mono.size
        return int(mono.size)

    def extend(self, blocks: Iterable[np.ndarray]) -> int:
        """Append every block from an iterable. Returns the frames appended."""
        return sum(self.append(block) for block in blocks)

    def samples(self) -> np.ndarray:
        """
        Return the accumulated sample stream.

        Returns:
            Read-only 1-D float64 array, empty if nothing was appended.
        """
        if not self._chunks:
            stream = np.zeros(0, dtype=np.float64)
        elif len(self._chunks) == 1:
            stream = self._chunks[0].copy()
        else:
            stream = np.concatenate(self._chunks)
        stream.setflags(write=False)
        return stream


def extract_mono(blocks: Iterable[np.ndarray], channels: int) -> np.ndarray:
    """
    Build a mono sample stream from an iterable of blocks.

    Args:
        blocks: Blocks of frames in file order.
        channels: Channel count reported by the decoder.

    Returns:
        Read-only 1-D float64 sample stream.
    """
    extractor = MonoSampleExtractor(channels)
    extractor.extend(blocks)
    logger.debug(
        f"Extracted {extractor.frame_count} mono samples from {channels}-channel audio"
    )
    return extractor.samples()
