"""Document variables for Zazzy.

A document is a text file with an optional header. The header is separated
from the body by the first line made of three dashes::

    title: Hello
    layout: post.html
    ---
    Body in *markdown*.

The header is YAML (JSON works too) and must be a flat mapping. Variables are
layered, later layers winning:

1. Computed defaults: title, description, file, url, output.
2. Global variables (config file and ZS_ environment).
3. ``layout`` defaults to ``layout.html`` if neither layer set it.
4. The document header.

Key objects:
- Vars: Variable map with accessors for the well-known keys.
- resolve: Read a document and return its variables and body.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .config import Config
from .errors import ParseError, ReadError
from .utils import scalar_to_str, titleize, to_url

logger = logging.getLogger(__name__)

HEADER_DELIM = "\n---\n"
DEFAULT_LAYOUT = "layout.html"


class Vars(dict):
    """String-keyed variables of one document render.

    Arbitrary keys flow through as plain dictionary entries; the properties
    below avoid typos on the keys every document has.
    """

    @property
    def file(self) -> str:
        return self.get("file", "")

    @property
    def url(self) -> str:
        return self.get("url", "")

    @property
    def output(self) -> str:
        return self.get("output", "")

    @property
    def layout(self) -> str:
        return self.get("layout", DEFAULT_LAYOUT)


def default_vars(path: str, config: Config) -> Vars:
    """Compute the variables every document starts with.

    Args:
        path: Document path relative to the site root.
        config: Site configuration.

    Returns:
        Vars with title, description, file, url and output set.
    """
    url = to_url(path)
    return Vars(
        title=titleize(path),
        description="",
        file=path,
        url=url,
        output=config.output_for(url),
    )


def parse_header(header: str, path: str = "") -> dict[str, str]:
    """Decode a document header into a flat string mapping.

    Args:
        header: Header text (YAML or JSON).
        path: Document path, used in error messages.

    Returns:
        Dictionary of header variables.

    Raises:
        ParseError: The header is not valid YAML or not a flat mapping.
    """
    try:
        data: Any = yaml.safe_load(header)
    except yaml.YAMLError as exc:
        raise ParseError(f"{path}: failed to parse header: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(f"{path}: header is not a key/value mapping")
    values: dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, (dict, list)):
            raise ParseError(f"{path}: header value of {key!r} is not a scalar")
        values[scalar_to_str(key)] = scalar_to_str(value)
    return values


def resolve(
    path: str, globals: Mapping[str, str], config: Config
) -> tuple[Vars, str]:
    """Read a document and resolve its variables.

    Args:
        path: Document path relative to the site root.
        globals: Variables applied on top of the defaults.
        config: Site configuration.

    Returns:
        Tuple of (variables, body). Without a header the body is the whole file.

    Raises:
        ReadError: The file cannot be read.
        ParseError: The header cannot be decoded.
    """
    try:
        text = (config.root / path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadError(f"{path}: {exc}") from exc

    v = default_vars(path, config)
    v.update(globals)
    v.setdefault("layout", DEFAULT_LAYOUT)

    sep = text.find(HEADER_DELIM)
    if sep == -1:
        return v, text

    header = text[:sep]
    body = text[sep + len(HEADER_DELIM) :]
    v.update(parse_header(header, path))
    v["url"] = v.url.lstrip("./")
    return v, body
