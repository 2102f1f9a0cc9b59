"""Utility functions for Zazzy.

This module contains small path and string helpers used throughout the
Zazzy codebase.

Key functions:
    rename_ext: Swap or append a file extension.
    titleize: Build the default upper-case title of a document.
    is_hidden: Check whether a relative path is hidden.
    is_markdown: Check if a path is a Markdown document.
    is_html: Check if a path goes through the HTML pipeline.
    join_url: Join a host URL and a site-relative URL.
"""

from __future__ import annotations

import os
import posixpath

MARKDOWN_EXTENSIONS = (".md", ".mkd")
HTML_EXTENSIONS = (".html", ".xml")


def rename_ext(path: str, old_ext: str, new_ext: str) -> str:
    """Rename the extension of a path from old_ext to new_ext.

    If old_ext is empty the extension is taken from the path itself. A path
    without any extension always gets new_ext appended.

    Args:
        path: Path to rename.
        old_ext: Extension to replace, or "" to infer it.
        new_ext: Extension to put in its place.

    Returns:
        The renamed path, or path unchanged when it does not end with old_ext.

    Examples:
        >>> rename_ext("foo.md", ".md", ".html")
        'foo.html'

        >>> rename_ext("foo.txt", ".md", ".html")
        'foo.txt'

        >>> rename_ext("foo", "", ".html")
        'foo.html'
    """
    if not old_ext:
        old_ext = os.path.splitext(path)[1]
    if not old_ext:
        return path + new_ext
    if path.endswith(old_ext):
        return path[: -len(old_ext)] + new_ext
    return path


def titleize(path: str) -> str:
    """Build the default title of a document from its path.

    Underscores and dashes become spaces and every letter is upper-cased.
    The extension and directories are kept.

    Examples:
        >>> titleize("posts/my-first_post.md")
        'POSTS/MY FIRST POST.MD'
    """
    return path.replace("_", " ").replace("-", " ").upper()


def is_hidden(path: str) -> bool:
    """Check whether a relative path is hidden.

    A path is hidden when its basename or the path itself starts with a dot.

    Args:
        path: Path relative to the site root.

    Returns:
        True for hidden files and for anything below a leading dot folder.
    """
    base = os.path.basename(path.rstrip("/")) or path
    return base.startswith(".") or path.startswith(".")


def is_markdown(path: str) -> bool:
    """Check if a path is a Markdown document (.md or .mkd)."""
    return os.path.splitext(path)[1] in MARKDOWN_EXTENSIONS


def is_html(path: str) -> bool:
    """Check if a path is an HTML or XML document."""
    return os.path.splitext(path)[1] in HTML_EXTENSIONS


def to_url(path: str) -> str:
    """Return the site URL of a document path: its extension becomes .html."""
    return os.path.splitext(path)[0] + ".html"


def join_url(host: str, url: str) -> str:
    """Join a host URL with a site-relative URL.

    Args:
        host: Host URL such as "https://example.com", may be empty.
        url: Site-relative URL such as "posts/a.html".

    Returns:
        The joined URL with exactly one slash between the parts.

    Examples:
        >>> join_url("https://example.com/", "/posts/a.html")
        'https://example.com/posts/a.html'

        >>> join_url("", "index.html")
        'index.html'
    """
    if not host:
        return url
    return host.rstrip("/") + "/" + url.lstrip("/")


def join_path(*parts: str) -> str:
    """Join path segments the way the publish directory paths are written.

    Leading slashes of later segments do not reset the path, so
    join_path(".pub", "/img/favicons") is ".pub/img/favicons".
    """
    cleaned = [parts[0]] + [p.lstrip("/") for p in parts[1:]]
    return posixpath.normpath(posixpath.join(*cleaned))


def scalar_to_str(value: object) -> str:
    """Convert a decoded YAML scalar to the string stored in a variable map.

    Booleans are written the way YAML spells them and null becomes "".
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
