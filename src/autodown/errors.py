from __future__ import annotations


class AutodownError(Exception):
    """Base class for errors raised by autodown."""


class LeaseParseError(ValueError):
    pass


class ClusterError(AutodownError):
    """A kubectl call failed: non-zero exit, missing binary, timeout or bad JSON."""

    def __init__(
        self,
        message: str,
        *,
        argv: list[str] | None = None,
        rc: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.argv = list(argv or [])
        self.rc = rc
        self.stderr = stderr


class EnumerationError(ClusterError):
    pass


class ActuationError(ClusterError):
    pass


class ReportError(AutodownError):
    """Writing the decision trace or the run report failed."""


class ConfigError(AutodownError):
    pass
