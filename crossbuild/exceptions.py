"""Custom exceptions for the build-then-test orchestration."""


class CrossbuildError(RuntimeError):
    """Base exception for orchestration failures."""


class StageFailedError(CrossbuildError):
    """Raised when a fatal stage exits non-zero; aborts the sequence."""

    def __init__(self, stage: str, exit_code: int, reason: str = "") -> None:
        self.stage = stage
        self.exit_code = exit_code
        self.reason = reason
        # Partial PipelineResult, attached by the pipeline that aborted.
        self.result = None
        message = f"stage '{stage}' failed with exit code {exit_code}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ConfigurationError(CrossbuildError):
    """Raised when settings or the process environment are invalid."""


class MissingEnvironmentError(ConfigurationError):
    """Raised when a required environment variable is unset or empty."""


class UnknownChannelError(ConfigurationError):
    """Raised for a toolchain channel name that is not recognised."""
