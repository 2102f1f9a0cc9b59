"""Favicon download and the ``favicon`` builtin.

``{{favicon https://example.com}}`` renders an ``<img>`` showing the icon of
a website. The icon is downloaded once into ``<pubdir><favicondir>`` (by
default ``.pub/img/favicons``) and named after the website host, so later
builds reuse the cached copy::

    example-com+180x180+.png

Key objects:
- slug_host: Turn a website URL into a file-name friendly slug.
- FaviconCache: Finds or downloads the favicon of a website.
- render_favicon: The builtin macro handler.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from io import BytesIO
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlparse

import requests
from PIL import Image, UnidentifiedImageError

from .config import Config
from .errors import FaviconError

if TYPE_CHECKING:
    from .macros import MacroExpander

logger = logging.getLogger(__name__)

LINK_RE = re.compile(r"<link\b[^>]*>", re.IGNORECASE)
ATTR_RE = re.compile(
    r"""([a-zA-Z_:-]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))"""
)
SIZE_RE = re.compile(r"(\d+)x(\d+)", re.IGNORECASE)
REQUEST_TIMEOUT = 10
USER_AGENT = "zazzy-favicon/1.0"


@dataclass
class IconCandidate:
    """An icon advertised by a web page.

    Attributes:
        url: Absolute URL of the icon.
        width: Declared width, 0 when unknown.
        height: Declared height, 0 when unknown.
    """

    url: str
    width: int = 0
    height: int = 0


def slug_host(website: str) -> str:
    """Build the cache slug of a website from its host.

    Examples:
        >>> slug_host("https://laurent.lourenco.pro/")
        'laurent-lourenco-pro'
    """
    host = urlparse(_with_scheme(website)).hostname or website
    return re.sub(r"[^a-z0-9]+", "-", host.lower()).strip("-")


def _with_scheme(website: str) -> str:
    if "://" in website:
        return website
    return "https://" + website


def find_icons(html: str, base_url: str) -> list[IconCandidate]:
    """Extract icon links from an HTML page, largest declared size first.

    The conventional /favicon.ico is always appended as a last resort.
    """
    candidates: list[IconCandidate] = []
    for tag in LINK_RE.findall(html):
        attrs = {
            m.group(1).lower(): m.group(2) or m.group(3) or m.group(4) or ""
            for m in ATTR_RE.finditer(tag)
        }
        if "icon" not in attrs.get("rel", "").lower() or not attrs.get("href"):
            continue
        width = height = 0
        size = SIZE_RE.search(attrs.get("sizes", ""))
        if size:
            width, height = int(size.group(1)), int(size.group(2))
        candidates.append(IconCandidate(urljoin(base_url, attrs["href"]), width, height))
    candidates.sort(key=lambda c: c.width * c.height, reverse=True)
    candidates.append(IconCandidate(urljoin(base_url, "/favicon.ico")))
    return candidates


class FaviconCache:
    """Finds the favicon of a website, downloading it on first use.

    Attributes:
        config: Site configuration.
        directory: Folder holding the downloaded icons.
    """

    def __init__(self, config: Config, session: requests.Session | None = None):
        self.config = config
        self.directory = config.favicon_dir
        self.session = session or requests.Session()

    def url_for(self, filename: str) -> str:
        return "/" + self.config.favicondir.strip("/") + "/" + filename

    def cached(self, slug: str) -> str | None:
        """Return the file name of a cached icon for a slug, if any."""
        if not self.directory.is_dir():
            return None
        matches = sorted(p.name for p in self.directory.glob(f"{slug}+*.*"))
        return matches[0] if matches else None

    def get(self, website: str) -> str:
        """Return the site URL of a website's favicon.

        Args:
            website: Website URL.

        Returns:
            URL of the icon under the publish directory, e.g. /img/favicons/x+16x16+.png.

        Raises:
            FaviconError: No icon could be downloaded.
        """
        slug = slug_host(website)
        if not slug:
            raise FaviconError(f"invalid website {website!r}")
        filename = self.cached(slug)
        if filename is None:
            filename = self.download(website, slug)
        return self.url_for(filename)

    def download(self, website: str, slug: str) -> str:
        """Download the best favicon of a website into the cache.

        Returns:
            File name of the saved icon.

        Raises:
            FaviconError: No candidate could be downloaded.
        """
        base_url = _with_scheme(website)
        try:
            page = self._fetch(base_url)
            html = page.text
            base_url = page.url or base_url
        except requests.RequestException as exc:
            logger.debug("favicon: %s: %s", base_url, exc)
            html = ""

        errors: list[str] = []
        for candidate in find_icons(html, base_url):
            try:
                response = self._fetch(candidate.url)
            except requests.RequestException as exc:
                errors.append(f"{candidate.url}: {exc}")
                continue
            if not response.content:
                continue
            return self._save(slug, candidate, response)
        raise FaviconError(
            f"no favicon found for {website}" + (f" ({'; '.join(errors)})" if errors else "")
        )

    def _fetch(self, url: str) -> requests.Response:
        response = self.session.get(
            url, timeout=REQUEST_TIMEOUT, headers={"User-Agent": USER_AGENT}
        )
        response.raise_for_status()
        return response

    def _save(self, slug: str, candidate: IconCandidate, response: requests.Response) -> str:
        width, height = candidate.width, candidate.height
        try:
            with Image.open(BytesIO(response.content)) as image:
                width, height = image.size
        except (UnidentifiedImageError, OSError):
            pass
        ext = os.path.splitext(urlparse(candidate.url).path)[1].lower()
        if not ext:
            content_type = response.headers.get("Content-Type", "").split(";")[0]
            ext = mimetypes.guess_extension(content_type) or ".ico"
        filename = f"{slug}+{width}x{height}+{ext}"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            (self.directory / filename).write_bytes(response.content)
        except OSError as exc:
            raise FaviconError(f"unable to save {filename}: {exc}") from exc
        logger.info("favicon: downloaded %s", candidate.url)
        return filename


def render_favicon(expander: MacroExpander, vars: Mapping[str, str], *args: str) -> str:
    """Render the ``<img>`` tag of a website's favicon.

    Requires exactly one argument, the website URL. With any other number of
    arguments a message is logged and nothing is rendered.
    """
    if len(args) != 1:
        logger.warning(
            "favicon placeholder requires a website in parameter. nothing rendered"
        )
        return ""
    url = FaviconCache(expander.config).get(args[0])
    return f'<img src="{url}" alt="icon" class="favicon" role="img">'
