"""
Exception Classes for Loudness Analysis

This module defines the exceptions raised by the sndcheck core and adapters.
Each exception carries the process exit status the CLI reports for it, so
that callers further up (services, CLI) can map a failure to a distinct
non-zero status without inspecting the message.

Degenerate statistics (no buckets, a single bucket, zero spread) are not
errors; they are reported as unavailable fields on the analysis result.
"""

from typing import Optional


class SndcheckError(Exception):
    """
    Base class for fatal sndcheck errors.

    Attributes:
        message (str): Explanation of the error
        exit_code (int): Process exit status for this class of error
    """

    exit_code = 1

    def __init__(self, message: str = "sndcheck failed.") -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(SndcheckError):
    """
    Raised when the audio source cannot be used.

    Covers missing or unreadable files, a channel count that is zero or
    negative, and sample blocks that do not line up with the channel count.

    Attributes:
        message (str): Explanation of the error
        path (Optional[str]): The offending input, when known
    """

    exit_code = 3

    def __init__(
        self,
        message: str = "Audio input is not readable.",
        path: Optional[str] = None,
    ) -> None:
        if path:
            full_message = f"{message} Path: {path}"
        else:
            full_message = message

        super().__init__(full_message)
        self.message = message
        self.path = path


class InvalidConfigurationError(SndcheckError):
    """
    Raised when analysis parameters are invalid.

    This is detected at the configuration-validation boundary, before any
    audio is decoded or analyzed.

    Attributes:
        message (str): Explanation of the error
        key (Optional[str]): Name of the offending setting
    """

    exit_code = 2

    def __init__(
        self,
        message: str = "Invalid configuration.",
        key: Optional[str] = None,
    ) -> None:
        if key:
            full_message = f"{message} Setting: {key}"
        else:
            full_message = message

        super().__init__(full_message)
        self.message = message
        self.key = key
