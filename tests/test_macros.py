import pytest

from zazzy.config import Config
from zazzy.errors import PluginError, UnterminatedMacro
from zazzy.macros import BuiltinRegistry, MacroExpander


def create_site(tmp_path, partials=None):
    (tmp_path / ".zazzy").mkdir()
    for name, text in (partials or {}).items():
        (tmp_path / ".zazzy" / name).write_text(text, encoding="utf-8")
    return Config(root=tmp_path)


def test_text_without_macros_is_unchanged(tmp_path):
    expander = MacroExpander(create_site(tmp_path))
    assert expander.expand("foo bar", {}) == "foo bar"
    assert expander.expand("", {}) == ""
    assert expander.expand("closing }} alone", {}) == "closing }} alone"


def test_variables_are_substituted(tmp_path):
    expander = MacroExpander(create_site(tmp_path))
    vars = {"foo": "bar", "baz": "123"}
    assert expander.expand("a {{foo}} text", vars) == "a bar text"
    assert expander.expand("{{ foo }}{{baz}}", vars) == "bar123"


def test_unknown_commands_run_as_plugins(tmp_path):
    expander = MacroExpander(create_site(tmp_path))
    vars = {"foo": "bar"}
    assert expander.expand("a {{printf short}} text", vars) == "a short text"
    assert expander.expand("{{printf Hello}} x{{foo}}z", vars) == "Hello xbarz"


def test_plugin_receives_variables(tmp_path):
    config = create_site(tmp_path, {"greet": "#!/bin/sh\nprintf '%s %s' \"$1\" \"$ZS_NAME\"\n"})
    (tmp_path / ".zazzy" / "greet").chmod(0o755)
    expander = MacroExpander(config)
    assert expander.expand("[{{greet hello}}]", {"name": "world"}) == "[hello world]"


def test_missing_close_delimiter_raises(tmp_path):
    expander = MacroExpander(create_site(tmp_path))
    with pytest.raises(UnterminatedMacro) as excinfo:
        expander.expand("a {{foo}} b {{foo", {"foo": "bar"})
    assert "close delim not found" in str(excinfo.value)
    assert excinfo.value.partial == "a bar b "


def test_partials_are_expanded_with_the_same_variables(tmp_path):
    config = create_site(
        tmp_path,
        {"header.html": "<h1>{{title}}</h1>", "intro.md": "Hi {{name}}"},
    )
    expander = MacroExpander(config)
    vars = {"title": "Home", "name": "Ann"}
    assert expander.expand("{{header.html}}|{{intro.md}}", vars) == "<h1>Home</h1>|Hi Ann"


def test_partial_nesting_is_capped(tmp_path):
    config = create_site(tmp_path, {"loop.html": "x{{loop.html}}"})
    expander = MacroExpander(config)
    assert expander.expand("{{loop.html}}", {}) == "x" * 11 + "{{loop.html}}"


def test_missing_partial_falls_back_to_variable(tmp_path):
    expander = MacroExpander(create_site(tmp_path))
    assert expander.expand("{{missing.html}}", {"missing.html": "value"}) == "value"


def test_variable_with_arguments_is_a_plugin_call(tmp_path, caplog):
    expander = MacroExpander(create_site(tmp_path))
    assert expander.expand("<{{zzvar extra}}>", {"zzvar": "bar"}) == "<>"
    assert "executable not found" in caplog.text


def test_failing_plugin_is_logged_and_empty(tmp_path, caplog):
    expander = MacroExpander(create_site(tmp_path))
    assert expander.expand("a{{zazzy-no-such-command}}b", {}) == "ab"
    assert "zazzy-no-such-command" in caplog.text


def test_empty_macro_is_dropped(tmp_path, caplog):
    expander = MacroExpander(create_site(tmp_path))
    assert expander.expand("a{{ }}b", {}) == "ab"
    assert "empty macro" in caplog.text


def test_custom_builtins_win_over_variables(tmp_path):
    registry = BuiltinRegistry()
    registry.register("shout", lambda expander, vars, *args: " ".join(args).upper())
    expander = MacroExpander(create_site(tmp_path), builtins=registry)

    assert "shout" in registry
    assert expander.expand("{{shout hello you}}", {"shout": "no"}) == "HELLO YOU"


def test_builtin_errors_are_logged_and_empty(tmp_path, caplog):
    def broken(expander, vars, *args):
        raise PluginError("broken", "always fails")

    registry = BuiltinRegistry()
    registry.register("broken", broken)
    expander = MacroExpander(create_site(tmp_path), builtins=registry)

    assert expander.expand("a{{broken}}b", {}) == "ab"
    assert "always fails" in caplog.text


def test_renderlist_without_pattern_renders_nothing(tmp_path, caplog):
    expander = MacroExpander(create_site(tmp_path))
    assert expander.expand("[{{renderlist}}]", {}) == "[]"
    assert "requires a pattern" in caplog.text
