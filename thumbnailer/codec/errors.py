"""
Codec engine failures.

Kept apart from the HTTP exceptions: the codec layer knows nothing about
status codes, and the controller maps every ``CodecError`` to a single
processing-error response.
"""
from __future__ import annotations


class CodecError(Exception):
    """Base class for everything that can go wrong while invoking the codec."""


class CodecUnavailable(CodecError):
    """The codec executable could not be located, fetched, or started."""


class CodecExecutionError(CodecError):
    def __init__(self, returncode: int, stderr: str) -> None:
        self.returncode = returncode
        self.stderr = stderr
        message = stderr.strip() or "no diagnostic output"
        super().__init__(f"codec exited with status {returncode}: {message}")


class CodecTimeout(CodecError):
    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"codec did not finish within {timeout:g} seconds")


class CodecWorkspaceError(CodecError):
    """Reading, writing or removing a workspace artifact failed."""


class CodecOutputMissing(CodecError):
    def __init__(self) -> None:
        super().__init__("codec produced no output frame")
