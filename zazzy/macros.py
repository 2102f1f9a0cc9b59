"""Macro expansion for Zazzy.

Document bodies, layouts and partials may contain macros written between
``{{`` and ``}}``. The macro text is split on whitespace: the first field is
the command, the others are its arguments (passed as is, never expanded).
A command is resolved in this order, the first match wins:

1. A builtin (``renderlist``, ``favicon``).
2. A partial: ``{{header.html}}`` includes ``.zazzy/header.html``, itself
   expanded with the same variables. Includes nest at most ten levels deep;
   deeper partials are inserted without expansion.
3. A variable: ``{{title}}`` is replaced by its value.
4. A plugin: any other command is run as an executable.

A failing builtin, partial or plugin is logged and replaced by nothing. Only
a missing ``}}`` aborts the expansion.

Key classes:
- BuiltinRegistry: Maps builtin command names to handlers.
- MacroExpander: Expands the macros of a text.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping

from .config import Config
from .errors import UnterminatedMacro, ZazzyError
from .ignore import IgnoreList, load_ignore
from .plugins import run_plugin

logger = logging.getLogger(__name__)

OPEN_DELIM = "{{"
CLOSE_DELIM = "}}"
PARTIAL_EXTENSIONS = (".html", ".md")
MAX_DEPTH = 10

Builtin = Callable[..., str]


class BuiltinRegistry:
    """Registry for builtin macro commands.

    A builtin is called as ``handler(expander, vars, *args)`` and returns
    the text to substitute.
    """

    def __init__(self):
        self._builtins: dict[str, Builtin] = {}

    def register(self, name: str, handler: Builtin) -> None:
        """Register a builtin under a command name."""
        self._builtins[name] = handler

    def get(self, name: str) -> Builtin | None:
        return self._builtins.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._builtins


def default_builtins() -> BuiltinRegistry:
    """Create a registry holding the renderlist and favicon builtins."""
    from .favicon import render_favicon
    from .listing import render_list

    registry = BuiltinRegistry()
    registry.register("renderlist", render_list)
    registry.register("favicon", render_favicon)
    return registry


class MacroExpander:
    """Expands ``{{ }}`` macros in text.

    Attributes:
        config: Site configuration.
        ignore: Ignore list used by builtins that scan files.
        builtins: Registry of builtin commands.
    """

    def __init__(
        self,
        config: Config,
        ignore: IgnoreList | None = None,
        builtins: BuiltinRegistry | None = None,
    ):
        self.config = config
        self.ignore = ignore if ignore is not None else load_ignore(config)
        self.builtins = builtins or default_builtins()

    def expand(self, text: str, vars: Mapping[str, str], depth: int = 1) -> str:
        """Expand every macro of a text.

        Args:
            text: Text to expand.
            vars: Variables of the document being rendered.
            depth: Partial nesting level, 1 for a document body.

        Returns:
            The expanded text.

        Raises:
            UnterminatedMacro: An open delimiter has no closing one.
        """
        out: list[str] = []
        rest = text
        while True:
            start = rest.find(OPEN_DELIM)
            if start == -1:
                out.append(rest)
                return "".join(out)
            end = rest.find(CLOSE_DELIM, start + len(OPEN_DELIM))
            if end == -1:
                out.append(rest[:start])
                raise UnterminatedMacro("close delim not found", "".join(out))
            out.append(rest[:start])
            macro = rest[start + len(OPEN_DELIM) : end]
            rest = rest[end + len(CLOSE_DELIM) :]
            out.append(self._resolve(macro, vars, depth))

    def _resolve(self, macro: str, vars: Mapping[str, str], depth: int) -> str:
        fields = macro.split()
        if not fields:
            logger.warning("empty macro ignored")
            return ""
        command, args = fields[0], fields[1:]

        builtin = self.builtins.get(command)
        if builtin is not None:
            try:
                return builtin(self, vars, *args)
            except ZazzyError as exc:
                logger.error("%s: %s", command, exc)
                return ""

        if os.path.splitext(command)[1] in PARTIAL_EXTENSIONS:
            partial = self._read_partial(command)
            if partial is not None:
                if depth > MAX_DEPTH:
                    return partial
                try:
                    return self.expand(partial, vars, depth + 1)
                except ZazzyError as exc:
                    logger.error("%s: %s", command, exc)
                    return ""

        if not args and command in vars:
            return vars[command]

        try:
            return run_plugin(self.config, vars, command, *args)
        except ZazzyError as exc:
            logger.error("%s", exc)
            return ""

    def _read_partial(self, name: str) -> str | None:
        path = self.config.config_dir / name
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None
