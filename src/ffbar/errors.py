"""
Error hierarchy for ffbar.

Every error carries a user-facing message (translated when the error is
raised) and the exit status the CLI should terminate with.
"""

from typing import Optional

from ffbar.i18n import _


class FfbarError(Exception):
    """Base error for all ffbar errors."""

    exit_code = 1

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class BinaryNotFoundError(FfbarError):
    """The transcoding binary could not be found on PATH."""

    def __init__(self, binary: str = "ffmpeg"):
        super().__init__(_("{binary} not installed or not in PATH").format(binary=binary))
        self.binary = binary


class SpawnError(FfbarError):
    """Any other failure while starting the subprocess."""

    def __init__(self, detail: str):
        super().__init__(detail, detail=detail)


class InvalidArgumentsError(FfbarError):
    """Bad wrapper flag value or unknown single flag."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(_("Invalid arguments!"), detail=detail)


class NoArgumentsError(FfbarError):
    """Nothing at all was passed on the command line."""

    def __init__(self):
        super().__init__(_("No arguments supplied!"))


class UpstreamFormatError(FfbarError):
    """A matched progress field did not parse as a number."""

    def __init__(self, field_name: str, text: str):
        super().__init__(f"Unexpected ffmpeg output for {field_name}: {text!r}")
        self.field_name = field_name
        self.text = text
