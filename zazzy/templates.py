"""Layout template evaluation for Zazzy.

HTML and XML documents (layouts included) go through a Jinja2 pass after
their ``{{ }}`` macros are expanded. To keep the two syntaxes apart, Jinja
uses different delimiters here:

- ``<% title %>`` prints a variable.
- ``<%% if sitemap == "true" %%> ... <%% endif %%>`` for statements.
- ``<%# comment #%>`` for comments.

Every resolved document variable is available; unknown names render empty.

Key class:
- TemplateEngine: Renders template strings with document variables.
"""

from __future__ import annotations

from collections.abc import Mapping

import jinja2
from jinja2 import Environment

from .errors import TemplateError

VARIABLE_START = "<%"
VARIABLE_END = "%>"
BLOCK_START = "<%%"
BLOCK_END = "%%>"
COMMENT_START = "<%#"
COMMENT_END = "#%>"


class TemplateEngine:
    """Template rendering engine using Jinja2 with ``<% %>`` delimiters.

    Attributes:
        env: Jinja2 environment.
    """

    def __init__(self):
        self.env = Environment(
            variable_start_string=VARIABLE_START,
            variable_end_string=VARIABLE_END,
            block_start_string=BLOCK_START,
            block_end_string=BLOCK_END,
            comment_start_string=COMMENT_START,
            comment_end_string=COMMENT_END,
            keep_trailing_newline=True,
            autoescape=False,
        )

    def render_string(self, template: str, context: Mapping[str, str]) -> str:
        """Render a template string.

        Args:
            template: Template string to render.
            context: Variables to make available in the template.

        Returns:
            Rendered string.

        Raises:
            TemplateError: The template has a syntax error or fails to render.
        """
        try:
            tmpl = self.env.from_string(template)
            return tmpl.render(dict(context))
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateError(
                f"template syntax error on line {exc.lineno}: {exc.message}"
            ) from exc
        except jinja2.TemplateError as exc:
            raise TemplateError(f"template error: {exc}") from exc
