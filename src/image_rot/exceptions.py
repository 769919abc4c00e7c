"""Custom exceptions for the image rot audit."""


class ImageRotError(Exception):
    """Base exception for all audit errors."""

    pass


class ConfigError(ImageRotError):
    """Raised when configuration or the checkout path is invalid."""

    pass


class ClusterReadError(ImageRotError):
    """Raised when the deployment listing cannot be read or parsed."""

    pass


class HistoryReadError(ImageRotError):
    """Raised when the git history query fails."""

    pass


class TagLogParseError(ImageRotError):
    """Raised when a git log line does not start with a timestamp."""

    def __init__(self, output: str) -> None:
        super().__init__(f"Failed to match output: {output}")
        self.output = output


class ProcessTimeoutError(ImageRotError):
    """Raised when an external command does not finish in time."""

    pass
