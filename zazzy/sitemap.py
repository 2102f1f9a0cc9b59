"""Plain-text sitemap generation for Zazzy.

A document is listed in ``<pubdir>/sitemap.txt`` when both variables
``sitemaptype: txt`` (usually global, ``ZS_SITEMAPTYPE=txt``) and
``sitemap: true`` (usually in the document header) are set. Each entry is
``hosturl`` joined with the document url, written once.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from .config import Config
from .utils import join_url

logger = logging.getLogger(__name__)


class Sitemap:
    """Accumulates unique URLs in the sitemap file of a site.

    One instance lives for a whole command, so the missing hosturl warning
    is printed at most once.

    Attributes:
        config: Site configuration.
    """

    def __init__(self, config: Config):
        self.config = config
        self._warned = False

    @property
    def path(self) -> Path:
        return self.config.sitemap_path

    def reset(self) -> None:
        """Delete the sitemap file so a full build starts from scratch."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("sitemap: unable to remove %s: %s", self.path, exc)

    def enabled(self, vars: Mapping[str, str]) -> bool:
        return (
            vars.get("sitemaptype", "").lower() == "txt"
            and vars.get("sitemap", "").lower() == "true"
        )

    def record(self, path: str, vars: Mapping[str, str]) -> bool:
        """Append the URL of a document if it is not listed yet.

        Args:
            path: Document path (for log messages).
            vars: Resolved variables of the document.

        Returns:
            True if a new entry was written.
        """
        if not self.enabled(vars):
            return False

        host = vars.get("hosturl", "")
        if not host and not self._warned:
            self._warned = True
            logger.warning("Warning: generating sitemap without hosturl.")

        entry = join_url(host, vars.get("url", ""))
        try:
            with open(self.path, "a+", encoding="utf-8") as f:
                f.seek(0)
                existing = f.read()
                for line in existing.splitlines():
                    if line.strip().lower() == entry.lower():
                        return False
                if existing and not existing.endswith("\n"):
                    f.write("\n")
                f.write(entry + "\n")
        except OSError as exc:
            logger.error("sitemap: %s: %s", path, exc)
            return False
        logger.debug("sitemap: %s", entry)
        return True
