"""The ``renderlist`` builtin.

``{{renderlist posts/*.md}}`` renders every file matching a glob pattern
through the item layout and concatenates the results. Files are listed in
reverse path order, so ``YYYY-MM-DD-slug.md`` posts come newest first.

The item layout is ``.zazzy/itemlayout.html`` unless the ``itemlayout``
variable names another file. Inside it, each item's own variables are
available, with ``file``, ``url`` and ``output`` describing the item.
"""

from __future__ import annotations

import glob
import logging
import os
from collections.abc import Mapping
from typing import TYPE_CHECKING

from .config import CONFIG_DIR
from .errors import ArgumentError, NoMatchError, ParseError, ReadError
from .utils import is_hidden, to_url
from .variables import resolve

if TYPE_CHECKING:
    from .macros import MacroExpander

logger = logging.getLogger(__name__)

ITEM_LAYOUT = os.path.join(CONFIG_DIR, "itemlayout.html")


def match_files(root: str, pattern: str) -> list[str]:
    """Return the paths matching a glob pattern, newest name first.

    Args:
        root: Directory the pattern is relative to.
        pattern: Glob pattern.

    Returns:
        Normalized paths relative to root, in descending lexicographic order.

    Raises:
        NoMatchError: The pattern is invalid or matches nothing.
    """
    try:
        matches = glob.glob(pattern, root_dir=root)
    except (OSError, ValueError) as exc:
        raise NoMatchError(f"bad pattern {pattern!r}: {exc}") from exc
    if not matches:
        raise NoMatchError(f"no files correspond to {pattern!r}, the list is empty")
    return sorted((os.path.normpath(m) for m in matches), reverse=True)


def render_list(expander: MacroExpander, vars: Mapping[str, str], *args: str) -> str:
    """Render every file matching a pattern through the item layout.

    Args:
        expander: Expander rendering the current document.
        vars: Variables of the current document.
        *args: Exactly one glob pattern.

    Returns:
        Concatenated HTML of all items.

    Raises:
        ArgumentError: No pattern or more than one argument was given.
        NoMatchError: The pattern is invalid or matches nothing.
        ReadError: The item layout cannot be read.
    """
    if len(args) != 1:
        raise ArgumentError("renderlist requires a pattern in parameter, nothing rendered")
    config = expander.config
    matches = match_files(str(config.root), args[0])

    layout_path = vars.get("itemlayout") or ITEM_LAYOUT
    _, item_layout = resolve(layout_path, vars, config)

    result: list[str] = []
    for path in matches:
        if is_hidden(path) or expander.ignore.matches(path):
            continue
        if (config.root / path).is_dir():
            continue
        logger.info("renderlist item: %s", path)
        try:
            item_vars, _ = resolve(path, vars, config)
        except (ReadError, ParseError) as exc:
            logger.error("renderlist item error: %s", exc)
            continue
        item_vars["file"] = path
        item_vars["url"] = to_url(path)
        item_vars["output"] = config.output_for(item_vars["url"])
        result.append(expander.expand(item_layout, item_vars, 1))
    return "".join(result)
