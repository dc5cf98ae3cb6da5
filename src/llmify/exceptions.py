from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LlmifyError(Exception):
    """Base exception for errors in the llmify package."""


@dataclass(frozen=True)
class FatalSetupError(LlmifyError):
    """Raised before any walk begins when the crawl cannot be set up."""

    path: Path
    message: str = "The crawl could not be set up."

    def __str__(self) -> str:
        return f"{self.message}: {self.path}"


@dataclass(frozen=True)
class RootDirectoryError(FatalSetupError):
    """Raised when the root directory is missing, not a directory or unreadable."""

    message: str = "Root directory not found"


@dataclass(frozen=True)
class ScopePathError(FatalSetupError):
    """Raised when the `--path` scope is missing or lies outside the root."""

    message: str = "Target path not found"


@dataclass(frozen=True)
class ConfigFileError(FatalSetupError):
    """Raised when a configuration file exists but cannot be parsed."""

    message: str = "Invalid configuration file"


@dataclass(frozen=True)
class RenderError(LlmifyError):
    """Raised when the file tree cannot be produced."""

    message: str

    def __str__(self) -> str:
        return self.message
