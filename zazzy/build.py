"""File building for Zazzy.

This module turns one source file into its published form. The file
extension picks the pipeline:

- ``.md`` / ``.mkd``: resolve variables, expand macros, convert Markdown to
  HTML, then wrap the result in the ``layout`` file (``.zazzy/layout.html``
  by default) through the HTML pipeline, with the HTML in ``content``.
  Without a layout file the converted HTML is written as is.
- ``.html`` / ``.xml``: resolve variables, expand macros, evaluate the
  ``<% %>`` template.
- anything else: copied byte for byte.

Output lands in the publish directory unless a writer is given, in which
case nothing is written to disk.

Key objects:
- Builder: Dispatches a file to its pipeline.
- BuildError: Raised with the path of the file that failed.
"""

from __future__ import annotations

import shutil
from collections.abc import Mapping
from contextlib import ExitStack
from typing import IO

from .config import CONFIG_DIR, Config
from .errors import BuildError, ZazzyError
from .ignore import IgnoreList
from .macros import MacroExpander
from .renderers import MarkdownRenderer
from .sitemap import Sitemap
from .templates import TemplateEngine
from .utils import is_html, is_markdown, join_path, rename_ext
from .variables import resolve

__all__ = ["BuildError", "Builder"]


class Builder:
    """Builds single files into the publish directory.

    Attributes:
        config: Site configuration.
        expander: Macro expander.
        sitemap: Sitemap accumulator shared by all builds of a command.
        markdown: Markdown to HTML renderer.
        templates: ``<% %>`` template engine.
    """

    def __init__(
        self,
        config: Config,
        ignore: IgnoreList | None = None,
        sitemap: Sitemap | None = None,
        expander: MacroExpander | None = None,
    ):
        self.config = config
        self.expander = expander or MacroExpander(config, ignore)
        self.sitemap = sitemap or Sitemap(config)
        self.markdown = MarkdownRenderer()
        self.templates = TemplateEngine()

    def build(
        self,
        path: str,
        writer: IO[str] | None = None,
        vars: Mapping[str, str] | None = None,
    ) -> None:
        """Build a file.

        Args:
            path: Source path relative to the site root.
            writer: Optional text stream receiving the output instead of a file.
            vars: Global variables, the configuration globals by default.

        Raises:
            BuildError: The file could not be built.
        """
        if vars is None:
            vars = self.config.globals
        try:
            if is_markdown(path):
                self.build_markdown(path, writer, vars)
            elif is_html(path):
                self.build_html(path, writer, vars)
            else:
                self.build_raw(path, writer)
        except BuildError:
            raise
        except (ZazzyError, OSError) as exc:
            raise BuildError(path, _format_error_message(exc), exc) from exc

    def build_markdown(
        self, path: str, writer: IO[str] | None, vars: Mapping[str, str]
    ) -> None:
        """Render a Markdown document and wrap it in its layout."""
        v, body = resolve(path, vars, self.config)
        content = self.expander.expand(body, v, 1)
        v["content"] = self.markdown.render(content)
        self.sitemap.record(path, v)

        layout = join_path(CONFIG_DIR, v.layout)
        with ExitStack() as stack:
            if writer is None:
                output = v.output or self.config.output_for(rename_ext(path, "", ".html"))
                writer = stack.enter_context(self._create(output))
            if not (self.config.root / layout).exists():
                writer.write(v["content"])
                return
            self.build_html(layout, writer, v)

    def build_html(
        self, path: str, writer: IO[str] | None, vars: Mapping[str, str]
    ) -> None:
        """Render an HTML or XML document, a layout included."""
        v, body = resolve(path, vars, self.config)
        body = self.expander.expand(body, v, 1)
        text = self.templates.render_string(body, v)
        self.sitemap.record(path, v)
        if writer is not None:
            writer.write(text)
            return
        with self._create(self.config.output_for(path)) as f:
            f.write(text)

    def build_raw(self, path: str, writer: IO[str] | None) -> None:
        """Copy a file as is."""
        source = self.config.root / path
        if writer is None:
            dest = self.config.root / self.config.output_for(path)
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, dest)
            return
        data = source.read_bytes()
        buffer = getattr(writer, "buffer", None)
        if buffer is not None:
            writer.flush()
            buffer.write(data)
            buffer.flush()
        else:
            writer.write(data.decode("utf-8", errors="replace"))

    def _create(self, output: str) -> IO[str]:
        target = self.config.root / output
        target.parent.mkdir(parents=True, exist_ok=True)
        return open(target, "w", encoding="utf-8")


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    if isinstance(exc, ZazzyError):
        return str(exc)
    if isinstance(exc, FileNotFoundError):
        return f"File not found: {exc.filename}"
    if isinstance(exc, PermissionError):
        return f"Permission denied: {exc.filename}"
    return f"{type(exc).__name__}: {exc}"
