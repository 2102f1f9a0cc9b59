"""Exception types for Zazzy.

Every error raised by the build pipeline derives from ZazzyError so callers
can tell build failures apart from programming errors.

Key classes:
- ReadError: A source, layout or partial file could not be read.
- ParseError: A document header is not a flat key/value mapping.
- UnterminatedMacro: An opening ``{{`` has no matching ``}}``.
- ArgumentError: A builtin macro was called with the wrong arguments.
- NoMatchError: A list pattern is invalid or matches nothing.
- PluginError: A plugin could not be spawned or exited non-zero.
- FaviconError: A favicon could not be found or downloaded.
- TemplateError: The ``<% %>`` template stage failed.
- BuildError: Wraps any of the above with the file being built.
"""

from __future__ import annotations

from pathlib import Path


class ZazzyError(Exception):
    """Base class for all Zazzy errors."""


class ReadError(ZazzyError):
    """A file could not be opened or decoded."""


class ParseError(ZazzyError):
    """A document header could not be decoded."""


class UnterminatedMacro(ZazzyError):
    """An open delimiter was found without a closing one.

    Attributes:
        partial: Output accumulated before the unterminated macro.
    """

    def __init__(self, message: str, partial: str = ""):
        self.partial = partial
        super().__init__(message)


class ArgumentError(ZazzyError):
    """A builtin macro received a malformed argument list."""


class NoMatchError(ZazzyError):
    """A glob pattern is invalid or matches no file."""


class PluginError(ZazzyError):
    """A plugin failed to start or exited with a non-zero status.

    Attributes:
        command: The command that was run.
        returncode: Exit status, or None when the process never started.
    """

    def __init__(self, command: str, message: str, returncode: int | None = None):
        self.command = command
        self.returncode = returncode
        super().__init__(f"{command}: {message}")


class FaviconError(ZazzyError):
    """No favicon could be retrieved for a website."""


class TemplateError(ZazzyError):
    """The secondary template stage failed to parse or render."""


class BuildError(ZazzyError):
    """Error during a file build with file context.

    Attributes:
        source_path: Path of the file being built.
        message: Human-readable error message.
        original_error: The exception that was caught.
    """

    def __init__(
        self,
        source_path: Path | str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = Path(source_path)
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")
