"""Soundfile adapter for block-wise audio decoding.

This adapter opens audio files with soundfile (libsndfile) and falls back to
pydub/ffmpeg for formats libsndfile cannot read. It yields multi-channel
blocks; callers downmix them with ``sndcheck.core.mono``.

Only the services layer should import from this module - core code should
not depend on it.
"""

from sndcheck.adapters.soundfile.decoder import (
    DEFAULT_BLOCK_FRAMES,
    NATIVE_EXTENSIONS,
    SUPPORTED_AUDIO_EXTENSIONS,
    AudioDecoder,
    AudioInfo,
    PydubDecoder,
    SoundfileDecoder,
    decode_mono,
    open_audio,
)

__all__ = [
    "DEFAULT_BLOCK_FRAMES",
    "NATIVE_EXTENSIONS",
    "SUPPORTED_AUDIO_EXTENSIONS",
    "AudioDecoder",
    "AudioInfo",
    "PydubDecoder",
    "SoundfileDecoder",
    "decode_mono",
    "open_audio",
]
