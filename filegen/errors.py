"""Error taxonomy for the file generation engine.

Every failure raised by :mod:`filegen` derives from :class:`GeneratorError`
and carries the offending path or placeholder key so callers can surface it
without parsing the message.
"""

from __future__ import annotations

from pathlib import Path


class GeneratorError(Exception):
    """Base class for every error raised by the engine."""


class InvalidPathError(GeneratorError):
    """Raised when a constructor path is missing, not a directory, or unreadable."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid path {self.path}: {reason}")


class InvalidProjectError(GeneratorError):
    """Raised when the project manifest is missing or malformed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid project at {self.path}: {reason}")


class TemplateNotFoundError(GeneratorError):
    """Raised when no template file exists for an identifier."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Template not found: {self.path}")


class TraversalError(GeneratorError):
    """Raised when a template identifier resolves outside the template root."""

    def __init__(self, path: str | Path, root: str | Path) -> None:
        self.path = Path(path)
        self.root = Path(root)
        super().__init__(f"Template path escapes {self.root}: {self.path}")


class AccessDeniedError(GeneratorError):
    """Raised when the operating system refuses to read a template."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Access denied reading template: {self.path}")


class TemplateSyntaxError(GeneratorError):
    """Raised when a template cannot be parsed."""

    def __init__(self, path: str | Path | None, lineno: int | None, message: str) -> None:
        self.path = Path(path) if path is not None else None
        self.lineno = lineno
        location = f"{self.path or '<string>'}:{lineno}" if lineno else str(self.path or "<string>")
        super().__init__(f"Template syntax error at {location}: {message}")


class TemplateRenderError(GeneratorError):
    """Raised when template code fails while rendering."""

    def __init__(self, path: str | Path | None, lineno: int | None, message: str) -> None:
        self.path = Path(path) if path is not None else None
        self.lineno = lineno
        location = f"{self.path or '<string>'}:{lineno}" if lineno else str(self.path or "<string>")
        super().__init__(f"Template render error at {location}: {message}")


class UnboundPlaceholderError(GeneratorError):
    """Raised when a template references a key absent from the context."""

    def __init__(self, key: str, detail: str = "") -> None:
        self.key = key
        self.detail = detail
        super().__init__(f"Unbound placeholder: {key!r}")


class WriteFailedError(GeneratorError):
    """Raised when the rendered output cannot be written to its destination."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to write {self.path}: {reason}")


class UseAfterCloseError(GeneratorError):
    """Raised when a closed generator is asked to generate."""

    def __init__(self) -> None:
        super().__init__("Generator has been closed")
