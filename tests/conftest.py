# tests/conftest.py
"""
Global pytest fixtures for sndcheck tests.
"""

import shutil
import tempfile
from pathlib import Path

import numpy as np
import pytest

SAMPLE_RATE = 44100


def _write_wav(path: Path, samples: np.ndarray, sample_rate: int = SAMPLE_RATE) -> str:
    """Write float samples losslessly so tests can assert exact RMS values."""
    import soundfile as sf

    sf.write(str(path), samples, sample_rate, subtype="FLOAT")
    return str(path)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def half_loud_wav(tmp_path):
    """Mono WAV: 100 samples at +/-0.5 then 100 silent samples.

    With bucket_size=100 this is two buckets, RMS 0.5 and 0.0.
    """
    loud = np.tile(np.array([0.5, -0.5], dtype=np.float32), 50)
    quiet = np.zeros(100, dtype=np.float32)
    return _write_wav(tmp_path / "half_loud.wav", np.concatenate([loud, quiet]))


@pytest.fixture
def stereo_wav(tmp_path):
    """Stereo WAV of 300 frames: left 0.6, right 0.2, mono mean 0.4."""
    frames = np.column_stack(
        [np.full(300, 0.6, dtype=np.float32), np.full(300, 0.2, dtype=np.float32)]
    )
    return _write_wav(tmp_path / "stereo.wav", frames)


@pytest.fixture
def silent_wav(tmp_path):
    """One second of silence."""
    return _write_wav(tmp_path / "silent.wav", np.zeros(SAMPLE_RATE, dtype=np.float32))


@pytest.fixture
def short_wav(tmp_path):
    """Three samples, far shorter than the default bucket."""
    return _write_wav(tmp_path / "short.wav", np.array([0.5, -0.5, 0.5], dtype=np.float32))


@pytest.fixture
def audio_dir(tmp_path):
    """Directory with two loud files, one quiet file and a nested loud file."""
    root = tmp_path / "takes"
    nested = root / "day2"
    nested.mkdir(parents=True)

    loud = np.tile(np.array([0.5, -0.5], dtype=np.float32), 100)
    _write_wav(root / "a_loud.wav", loud)
    _write_wav(root / "b_loud.wav", loud)
    _write_wav(root / "c_quiet.wav", np.zeros(200, dtype=np.float32))
    _write_wav(nested / "d_loud.wav", loud)
    (root / "notes.txt").write_text("not audio")
    return root


@pytest.fixture(scope="session", autouse=True)
def package_logger():
    """Configure the package logger once, outside any CliRunner stream swap."""
    from sndcheck.core.logger import get_logger

    return get_logger("sndcheck")
