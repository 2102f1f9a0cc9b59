from click.testing import CliRunner

from zazzy import __version__
from zazzy.cli import cli
from zazzy.orchestrator import Orchestrator


def create_project(tmp_path):
    (tmp_path / ".zazzy").mkdir()
    (tmp_path / ".zazzy" / "layout.html").write_text(
        "<html><% title %>{{content}}</html>", encoding="utf-8"
    )
    (tmp_path / "index.md").write_text("title: Home\n---\nHello\n", encoding="utf-8")
    return tmp_path


def test_build_command_builds_the_site(tmp_path, monkeypatch):
    monkeypatch.chdir(create_project(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["build"])

    assert result.exit_code == 0
    assert (tmp_path / ".pub" / "index.html").read_text(encoding="utf-8") == (
        "<html>Home<p>Hello</p>\n</html>"
    )


def test_build_command_uses_zs_environment(tmp_path, monkeypatch):
    monkeypatch.chdir(create_project(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["build"], env={"ZS_PUBDIR": "public"})

    assert result.exit_code == 0
    assert (tmp_path / "public" / "index.html").exists()


def test_build_single_file_to_stdout(tmp_path, monkeypatch):
    monkeypatch.chdir(create_project(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["build", "index.md"])

    assert result.exit_code == 0
    assert "<html>Home<p>Hello</p>" in result.output
    assert not (tmp_path / ".pub").exists()


def test_build_single_file_error(tmp_path, monkeypatch):
    monkeypatch.chdir(create_project(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["build", "missing.md"])

    assert result.exit_code == 1
    assert "ERROR:" in result.output


def test_var_command(tmp_path, monkeypatch):
    monkeypatch.chdir(create_project(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["var", "index.md"])
    assert result.exit_code == 0
    assert "title:Home" in result.output
    assert "url:index.html" in result.output
    assert "layout:layout.html" in result.output

    result = runner.invoke(cli, ["var", "index.md", "title", "url"])
    assert result.exit_code == 0
    assert result.output == "Home\nindex.html\n"


def test_var_command_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["var", "missing.md"])

    assert result.exit_code == 1
    assert "var:" in result.output


def test_unknown_command_runs_plugin(tmp_path, monkeypatch):
    monkeypatch.chdir(create_project(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["echo", "hello", "world"])
    assert result.exit_code == 0
    assert "hello world" in result.output

    result = runner.invoke(
        cli, ["sh", "-c", "echo $ZS_GREETING"], env={"ZS_GREETING": "hi"}
    )
    assert result.exit_code == 0
    assert "hi" in result.output


def test_failing_plugin_exits_with_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["zazzy-no-such-plugin"])

    assert result.exit_code == 1
    assert "ERROR:" in result.output


def test_watch_command(tmp_path, monkeypatch):
    monkeypatch.chdir(create_project(tmp_path))
    calls = []

    def fake_run(self, watch=False):
        calls.append(watch)
        raise KeyboardInterrupt

    monkeypatch.setattr(Orchestrator, "run", fake_run)
    runner = CliRunner()

    result = runner.invoke(cli, ["watch"])

    assert result.exit_code == 0
    assert calls == [True]


def test_version():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
