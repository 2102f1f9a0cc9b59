"""Configuration for Zazzy.

Global settings are built once per command. They come from two places, in
increasing order of precedence:

1. ``.zazzy/config.yaml`` - an optional mapping of default global variables.
2. Environment entries named ``ZS_<NAME>`` - lower-cased and stripped of the
   prefix, so ``ZS_HOSTURL`` becomes the variable ``hosturl``.

Two global variables are special: ``pubdir`` selects the publish directory
and ``favicondir`` the favicon cache folder inside it.

Key objects:
- Config: Resolved settings and derived paths, passed to every component.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .utils import join_path, scalar_to_str

logger = logging.getLogger(__name__)

CONFIG_DIR = ".zazzy"
CONFIG_FILE = "config.yaml"
ENV_PREFIX = "ZS_"
DEFAULT_PUBDIR = ".pub"
DEFAULT_FAVICONDIR = "/img/favicons"
SITEMAP_FILE = "sitemap.txt"
WATCH_INTERVAL = 1.0


@dataclass
class Config:
    """Settings shared by every stage of a build.

    Attributes:
        root: Site root; every document path is relative to it.
        pubdir: Publish directory, relative to root unless absolute.
        globals: Global variables applied to every document.
        interval: Seconds between two watch cycles.
    """

    root: Path
    pubdir: str = DEFAULT_PUBDIR
    globals: dict[str, str] = field(default_factory=dict)
    interval: float = WATCH_INTERVAL

    @classmethod
    def load(cls, root: Path, environ: Mapping[str, str] | None = None) -> Config:
        """Build the configuration of a site.

        Args:
            root: Site root directory.
            environ: Environment to read ZS_ variables from, os.environ by default.

        Returns:
            Config with globals, publish directory and favicon folder resolved.
        """
        root = Path(root)
        values = load_config_file(root)
        values.update(env_globals(os.environ if environ is None else environ))
        if not values.get("favicondir"):
            values["favicondir"] = DEFAULT_FAVICONDIR
        pubdir = values.get("pubdir") or DEFAULT_PUBDIR
        return cls(root=root, pubdir=pubdir, globals=values)

    @property
    def favicondir(self) -> str:
        return self.globals.get("favicondir") or DEFAULT_FAVICONDIR

    @property
    def config_dir(self) -> Path:
        return self.root / CONFIG_DIR

    @property
    def publish_dir(self) -> Path:
        return self.root / self.pubdir

    @property
    def sitemap_path(self) -> Path:
        return self.publish_dir / SITEMAP_FILE

    @property
    def favicon_dir(self) -> Path:
        return self.root / join_path(self.pubdir, self.favicondir)

    def output_for(self, path: str) -> str:
        """Return the publish location of a site-relative path, as written in vars."""
        return join_path(self.pubdir, path)

    def plugin_path(self, environ: Mapping[str, str] | None = None) -> str:
        """Return PATH with the configuration directory in front.

        Local plugins therefore shadow system commands of the same name.
        """
        environ = os.environ if environ is None else environ
        current = environ.get("PATH", "")
        local = str(self.config_dir.resolve())
        return local + os.pathsep + current if current else local


def env_globals(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect ZS_ prefixed environment entries as global variables.

    Args:
        environ: Environment mapping.

    Returns:
        Dictionary of lower-cased names (prefix removed) to values.
    """
    values: dict[str, str] = {}
    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key = name[len(ENV_PREFIX) :].lower()
        if key:
            values[key] = value
    return values


def load_config_file(root: Path) -> dict[str, str]:
    """Load default global variables from .zazzy/config.yaml.

    Args:
        root: Site root directory.

    Returns:
        Dictionary of variables; empty when the file is missing or unusable.
    """
    config_path = root / CONFIG_DIR / CONFIG_FILE
    if not config_path.exists():
        return {}
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("config: unable to read %s: %s", config_path, exc)
        return {}
    if not isinstance(loaded, dict):
        logger.warning("config: %s is not a mapping, ignored", config_path)
        return {}
    values: dict[str, str] = {}
    for key, value in loaded.items():
        if isinstance(value, (dict, list)):
            logger.warning("config: nested value for %r ignored", key)
            continue
        values[str(key).lower()] = scalar_to_str(value)
    return values
