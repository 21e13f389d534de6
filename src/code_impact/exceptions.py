"""Exceptions raised by the code-impact core."""


class CodeImpactError(Exception):
    """Base class for all code-impact errors."""


class ConfigurationError(CodeImpactError):
    """Raised when the project layout cannot be analyzed (e.g. no source roots)."""


class ParseError(CodeImpactError):
    """Raised by an extractor when a file cannot be parsed."""


class SnapshotError(CodeImpactError):
    """Raised when the persisted graph snapshot is missing or unreadable."""
