import logging
import os
import time

from zazzy.config import Config
from zazzy.orchestrator import Orchestrator, _ChangeHandler


class DummyEvent:
    def __init__(self, path, is_directory=False):
        self.src_path = str(path)
        self.is_directory = is_directory


def create_site(tmp_path, pubdir=".pub", ignore="drafts*\n"):
    files = {
        ".zazzy/layout.html": "<html>{{content}}</html>",
        ".zazzy/.ignore": ignore,
        ".hidden.md": "secret",
        "index.md": "title: Home\n---\nHello\n",
        "about.html": "<p><% title %></p>",
        "img/logo.png": "png",
        "drafts/wip.md": "wip",
    }
    for path, text in files.items():
        target = tmp_path / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    (tmp_path / "empty").mkdir()
    return Config(root=tmp_path, pubdir=pubdir)


def write_hook(tmp_path, name):
    hook = tmp_path / ".zazzy" / name
    hook.write_text(f"#!/bin/sh\necho {name} >> .zazzy/hooks.log\n", encoding="utf-8")
    hook.chmod(0o755)


def test_first_cycle_builds_everything_in_lexical_order(tmp_path):
    config = create_site(tmp_path)

    built = Orchestrator(config).cycle()

    assert built == ["about.html", "img/logo.png", "index.md"]
    assert (tmp_path / ".pub" / "index.html").read_text(encoding="utf-8") == (
        "<html><p>Hello</p>\n</html>"
    )
    assert (tmp_path / ".pub" / "about.html").read_text(encoding="utf-8") == "<p>ABOUT.HTML</p>"
    assert (tmp_path / ".pub" / "img" / "logo.png").exists()
    assert (tmp_path / ".pub" / "empty").is_dir()
    assert not (tmp_path / ".pub" / "drafts").exists()
    assert not (tmp_path / ".pub" / ".hidden.md").exists()


def test_only_files_newer_than_watermark_are_rebuilt(tmp_path):
    config = create_site(tmp_path)
    orchestrator = Orchestrator(config)
    orchestrator.cycle()

    orchestrator.watermark = time.time() + 100
    assert orchestrator.cycle() == []

    future = orchestrator.watermark + 10
    os.utime(tmp_path / "index.md", (future, future))
    assert orchestrator.cycle() == ["index.md"]


def test_hooks_fire_once_per_dirty_cycle(tmp_path):
    config = create_site(tmp_path)
    write_hook(tmp_path, "prehook")
    write_hook(tmp_path, "posthook")
    orchestrator = Orchestrator(config)
    log = tmp_path / ".zazzy" / "hooks.log"

    orchestrator.cycle()
    assert log.read_text(encoding="utf-8") == "prehook\nposthook\n"

    orchestrator.watermark = time.time() + 100
    orchestrator.cycle()
    assert log.read_text(encoding="utf-8") == "prehook\nposthook\n"


def test_missing_hooks_are_skipped(tmp_path, caplog):
    config = create_site(tmp_path)
    Orchestrator(config).cycle()
    assert "ERROR" not in caplog.text


def test_failing_file_does_not_stop_the_walk(tmp_path, caplog):
    config = create_site(tmp_path)
    (tmp_path / "broken.md").write_text("{{oops", encoding="utf-8")

    built = Orchestrator(config).cycle()

    assert built == ["about.html", "broken.md", "img/logo.png", "index.md"]
    assert "broken.md: close delim not found" in caplog.text
    assert (tmp_path / ".pub" / "index.html").exists()


def test_visible_pubdir_is_not_walked(tmp_path):
    config = create_site(tmp_path, pubdir="public", ignore="")

    orchestrator = Orchestrator(config)
    orchestrator.cycle()
    orchestrator.watermark = 0.0
    built = orchestrator.cycle()

    assert "public/index.html" not in built
    assert (tmp_path / "public" / "index.html").exists()
    assert (tmp_path / "public" / "drafts" / "wip.html").exists()
    assert not (tmp_path / "public" / "public").exists()


def test_run_resets_sitemap(tmp_path):
    config = create_site(tmp_path)
    (tmp_path / ".pub").mkdir()
    (tmp_path / ".pub" / "sitemap.txt").write_text("stale\n", encoding="utf-8")

    Orchestrator(config).run()

    assert not (tmp_path / ".pub" / "sitemap.txt").exists()
    assert (tmp_path / ".pub" / "index.html").exists()


def test_watch_loop_runs_until_stopped(tmp_path, monkeypatch):
    config = create_site(tmp_path)
    config.interval = 0.01
    orchestrator = Orchestrator(config)
    monkeypatch.setattr(orchestrator, "_start_watcher", lambda: None)
    cycles = []
    original = orchestrator.cycle

    def counting_cycle():
        cycles.append(orchestrator.watermark)
        if len(cycles) == 3:
            orchestrator.stop()
        return original()

    monkeypatch.setattr(orchestrator, "cycle", counting_cycle)

    orchestrator.run(watch=True)

    assert len(cycles) == 3
    assert cycles[0] == 0.0
    assert cycles[1] > 0.0
    assert orchestrator.watermark >= cycles[2]


def test_change_handler_wakes_for_source_files(tmp_path):
    config = create_site(tmp_path)
    orchestrator = Orchestrator(config)
    handler = _ChangeHandler(orchestrator)

    handler.on_any_event(DummyEvent(tmp_path / ".pub" / "index.html"))
    handler.on_any_event(DummyEvent(tmp_path / "drafts" / "wip.md"))
    handler.on_any_event(DummyEvent(tmp_path / "img", is_directory=True))
    handler.on_any_event(DummyEvent(tmp_path.parent / "elsewhere.md"))
    assert not orchestrator._wake.is_set()

    handler.on_any_event(DummyEvent(tmp_path / "index.md"))
    assert orchestrator._wake.is_set()


def test_build_messages_are_logged(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    config = create_site(tmp_path)

    Orchestrator(config).cycle()

    assert "build: index.md" in caplog.text


def test_plugin_with_invalid_utf8_does_not_stop_the_cycle(tmp_path):
    config = create_site(tmp_path)
    plugin = tmp_path / ".zazzy" / "bin"
    plugin.write_text("#!/bin/sh\nprintf '\\377\\376'\n", encoding="utf-8")
    plugin.chmod(0o755)
    (tmp_path / "a.md").write_text("x {{bin}} y\n", encoding="utf-8")
    (tmp_path / "b.md").write_text("second\n", encoding="utf-8")

    built = Orchestrator(config).cycle()

    assert "b.md" in built
    assert "\ufffd\ufffd" in (tmp_path / ".pub" / "a.html").read_text(encoding="utf-8")
    assert (tmp_path / ".pub" / "b.html").read_text(encoding="utf-8") == "<html><p>second</p>\n</html>"
