"""Whole-site builds and watch mode for Zazzy.

A build cycle walks the site root in lexical order and rebuilds every file
modified after the watermark of the cycle:

- Hidden paths (starting with a dot, such as ``.zazzy`` and ``.pub``) and
  paths matching the ignore list are skipped, folders included.
- Folders are mirrored into the publish directory.
- The ``prehook`` plugin runs once, right before the first rebuilt file,
  and ``posthook`` once after the walk if anything was rebuilt.
- A failing file is logged and the walk goes on.

The watermark starts at the epoch, so the first cycle rebuilds everything.
In watch mode the watermark then moves to the end of each cycle and cycles
repeat every second. A watchdog observer cuts the wait short as soon as a
source file changes.

Key classes:
- Orchestrator: Runs build cycles and the watch loop.
- _ChangeHandler: File system event handler waking the watch loop.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import Builder
from .config import Config
from .errors import BuildError, PluginError
from .executable_utils import find_executable
from .ignore import IgnoreList, load_ignore
from .plugins import run_plugin
from .utils import is_hidden

logger = logging.getLogger(__name__)

PRE_HOOK = "prehook"
POST_HOOK = "posthook"


class Orchestrator:
    """Builds a whole site once or keeps it up to date.

    Attributes:
        config: Site configuration.
        ignore: Ignore list loaded once for the whole command.
        builder: Builder used for every file.
        watermark: Files modified after this timestamp are rebuilt.
    """

    def __init__(
        self,
        config: Config,
        builder: Builder | None = None,
        ignore: IgnoreList | None = None,
    ):
        self.config = config
        self.ignore = ignore if ignore is not None else load_ignore(config)
        self.builder = builder or Builder(config, self.ignore)
        self.watermark = 0.0
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._observer: Observer | None = None

    def run(self, watch: bool = False) -> None:
        """Build the site, then keep rebuilding changes when watching.

        The sitemap is cleared first so it only lists the pages of this run.
        """
        self.builder.sitemap.reset()
        if not watch:
            self.cycle()
            return
        self._stop.clear()
        self._start_watcher()
        try:
            while not self._stop.is_set():
                self.cycle()
                self.watermark = time.time()
                self._wait()
        finally:
            self._stop_watcher()

    def stop(self) -> None:
        """Leave the watch loop after the current cycle."""
        self._stop.set()
        self._wake.set()

    def wake(self) -> None:
        """Start the next watch cycle without waiting for the interval."""
        self._wake.set()

    def cycle(self) -> list[str]:
        """Run one build cycle.

        Returns:
            Paths of the files rebuilt during this cycle.
        """
        since = self.watermark
        dirty: list[str] = []
        self.config.publish_dir.mkdir(parents=True, exist_ok=True)
        self._walk("", since, dirty)
        if dirty:
            self.fire_hook(POST_HOOK)
        return dirty

    def fire_hook(self, name: str) -> None:
        """Run a hook plugin if the site or PATH provides one."""
        if find_executable(name, self.config.config_dir) is None:
            logger.debug("%s: not found, skipped", name)
            return
        try:
            output = run_plugin(self.config, self.config.globals, name)
        except PluginError as exc:
            logger.error("%s", exc)
            return
        if output.strip():
            logger.debug("%s: %s", name, output.rstrip())

    def _walk(self, rel_dir: str, since: float, dirty: list[str]) -> None:
        directory = self.config.root / rel_dir
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as exc:
            logger.error("error: %s", exc)
            return

        for entry in entries:
            rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            if is_hidden(rel) or self.ignore.matches(rel):
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    mirror = self.config.root / self.config.output_for(rel)
                    mirror.mkdir(parents=True, exist_ok=True)
                    self._walk(rel, since, dirty)
                    continue
                mtime = entry.stat().st_mtime
            except OSError as exc:
                logger.error("error: %s", exc)
                continue

            if mtime <= since:
                continue
            if not dirty:
                self.fire_hook(PRE_HOOK)
            dirty.append(rel)
            logger.info("build: %s", rel)
            try:
                self.builder.build(rel, None, self.config.globals)
            except BuildError as exc:
                logger.error("%s", exc)

    def _wait(self) -> None:
        self._wake.wait(self.config.interval)
        self._wake.clear()

    def _start_watcher(self) -> None:
        handler = _ChangeHandler(self)
        observer = Observer()
        try:
            observer.schedule(handler, str(self.config.root), recursive=True)
            observer.start()
        except OSError as exc:
            logger.warning("file events unavailable (%s), polling only", exc)
            return
        self._observer = observer

    def _stop_watcher(self) -> None:
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, orchestrator: Orchestrator):
        super().__init__()
        self.orchestrator = orchestrator
        self.root = orchestrator.config.root.resolve()

    def on_any_event(self, event):
        if event.is_directory:
            return
        path = Path(os.fsdecode(event.src_path))
        try:
            rel = path.resolve().relative_to(self.root).as_posix()
        except ValueError:
            return
        # Skip the publish directory and other hidden or ignored paths
        if is_hidden(rel) or self.orchestrator.ignore.matches(rel):
            return
        self.orchestrator.wake()
