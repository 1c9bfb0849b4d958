# services/loudness.py
"""
Service for loudness quality analysis.
"""

import csv
import logging
from io import StringIO
from pathlib import Path
from typing import List, Optional

import numpy as np

from sndcheck.adapters.soundfile import DEFAULT_BLOCK_FRAMES, decode_mono
from sndcheck.core.exceptions import InvalidInputError, SndcheckError
from sndcheck.core.loudness import LoudnessAnalysis, LoudnessConfig, analyze_loudness
from sndcheck.models.loudness import SUMMARY_FIELDS, BatchLoudnessResult, LoudnessReport
from sndcheck.repository.protocol import FileRepositoryProtocol

from .base import BaseService, ServiceResult

logger = logging.getLogger(__name__)

# Batch CSV columns: the per-file summary plus the failure message
BATCH_CSV_FIELDS = SUMMARY_FIELDS + ["error"]


class LoudnessService(BaseService):
    """
    Service for bucketed loudness analysis.

    Decodes audio through the soundfile adapter, downmixes it to mono and
    scores it:
    - Fraction of buckets whose RMS exceeds the threshold
    - Min/max/mean/stddev/variance/skewness/kurtosis of the bucket RMS values

    Example:
        from sndcheck.repository.local import LocalFileRepository

        svc = LoudnessService(LocalFileRepository())
        result = svc.analyze_file("track.wav", LoudnessConfig(threshold=0.13))
        if result.success:
            print(result.data.pct_good)
    """

    def __init__(self, file_repository: FileRepositoryProtocol) -> None:
        super().__init__(file_repository)

    # =========================================================================
    # Single Source Operations
    # =========================================================================

    def analyze_samples(
        self,
        samples: np.ndarray,
        config: Optional[LoudnessConfig] = None,
    ) -> ServiceResult[LoudnessAnalysis]:
        """
        Analyze an in-memory mono sample stream.

        Args:
            samples: Mono samples, typically in [-1.0, 1.0]
            config: Analysis parameters (default: LoudnessConfig())

        Returns:
            ServiceResult containing LoudnessAnalysis
        """
        try:
            analysis = analyze_loudness(samples, config or LoudnessConfig())
        except SndcheckError as e:
            return ServiceResult.from_error(e)
        except Exception as e:
            return ServiceResult.fail(f"Loudness analysis failed: {e}")

        return ServiceResult.ok(
            data=analysis,
            message=f"Analyzed {analysis.bucket_count} buckets",
            warnings=self._degenerate_warnings(analysis),
        )

    def analyze_file(
        self,
        filepath: str,
        config: Optional[LoudnessConfig] = None,
        block_frames: int = DEFAULT_BLOCK_FRAMES,
    ) -> ServiceResult[LoudnessReport]:
        """
        Decode an audio file and analyze its loudness.

        Args:
            filepath: Path to the audio file
            config: Analysis parameters (default: LoudnessConfig())
            block_frames: Frames per decoder read

        Returns:
            ServiceResult containing LoudnessReport on success
        """
        if not self.file_repository.exists(filepath):
            return self._missing(filepath)

        try:
            report = self._analyze_path(Path(filepath), config or LoudnessConfig(), block_frames)
        except SndcheckError as e:
            return ServiceResult.from_error(e)
        except Exception as e:
            return ServiceResult.fail(f"Failed to analyze audio file: {e}")

        return ServiceResult.ok(
            data=report,
            message=f"Analyzed {filepath}",
            warnings=self._degenerate_warnings(report.analysis),
            pct_good=report.pct_good,
        )

    def write_report(self, output_path: str, content: str) -> ServiceResult[str]:
        """
        Write rendered report text through the repository.

        Returns:
            ServiceResult containing the output path on success
        """
        try:
            self.file_repository.write_text(output_path, content)
        except OSError as e:
            return ServiceResult.fail(f"Cannot write {output_path}: {e}")
        return ServiceResult.ok(data=str(output_path), message=f"Wrote {output_path}")

    # =========================================================================
    # Batch Operations
    # =========================================================================

    def analyze_batch(
        self,
        path: str,
        config: Optional[LoudnessConfig] = None,
        recursive: bool = True,
        output_path: Optional[str] = None,
        min_pct_good: float = 0.0,
        block_frames: int = DEFAULT_BLOCK_FRAMES,
    ) -> ServiceResult[BatchLoudnessResult]:
        """
        Analyze every audio file under a path.

        Files are independent: a file that fails to decode is recorded and
        the batch continues.

        Args:
            path: Audio file or directory
            config: Analysis parameters shared by all files
            recursive: Search subdirectories
            output_path: Optional CSV file for the per-file summary
            min_pct_good: Quality bar; files under it are counted in below_threshold
            block_frames: Frames per decoder read

        Returns:
            ServiceResult containing BatchLoudnessResult
        """
        if not self.file_repository.exists(path):
            return self._missing(path)

        config = config or LoudnessConfig()
        files = self._get_audio_files(path, recursive=recursive)
        if not files:
            return ServiceResult.fail(
                f"No audio files found in {path}", exit_code=InvalidInputError.exit_code
            )

        logger.info(f"Analyzing {len(files)} files from {path}")
        batch = BatchLoudnessResult()

        for filepath, report, file_error in self._process_batch(
            files, lambda p: self._analyze_path(p, config, block_frames)
        ):
            if file_error is not None:
                logger.warning(f"Skipping {filepath}: {file_error}")
                batch.failed += 1
                row = dict.fromkeys(SUMMARY_FIELDS)
                row["filepath"] = str(filepath)
                row["error"] = file_error
                batch.rows.append(row)
                continue

            batch.successful += 1
            if not report.passes(min_pct_good):
                batch.below_threshold += 1
            batch.rows.append({**report.summary_row(), "error": None})

        if output_path:
            written = self.write_report(output_path, self._summary_csv(batch.rows))
            if not written.success:
                return ServiceResult.fail(f"Failed to write batch summary: {written.error}")
            batch.output_path = written.data

        return ServiceResult.ok(
            data=batch,
            message=f"Analyzed {batch.successful} of {batch.total} files",
            failed=batch.failed,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _analyze_path(
        self,
        filepath: Path,
        config: LoudnessConfig,
        block_frames: int,
    ) -> LoudnessReport:
        """Decode and analyze one file; exceptions propagate."""
        samples, info = decode_mono(str(filepath), block_frames)
        analysis = analyze_loudness(samples, config)
        return LoudnessReport(
            analysis=analysis,
            source_path=str(self.file_repository.resolve(filepath)),
            sample_rate=info.sample_rate,
            channels=info.channels,
            frames=info.frames,
        )

    @staticmethod
    def _missing(path: str) -> ServiceResult:
        return ServiceResult.fail(
            f"Path does not exist: {path}", exit_code=InvalidInputError.exit_code
        )

    @staticmethod
    def _summary_csv(rows: List[dict]) -> str:
        buffer = StringIO()
        writer = csv.DictWriter(buffer, fieldnames=BATCH_CSV_FIELDS)
        writer.writeheader()
        writer.writerows(rows)
        return buffer.getvalue()

    @staticmethod
    def _degenerate_warnings(analysis: LoudnessAnalysis) -> List[str]:
        if not analysis.has_data:
            # legacy buckets consume one sample more than bucket_size
            return [
                f"No complete buckets: input shorter than {analysis.config.bucket_stride} samples"
            ]
        if analysis.unavailable:
            return [f"Statistics unavailable: {', '.join(analysis.unavailable)}"]
        return []
