"""Plugin invocation for Zazzy.

Any executable can act as a macro handler. ``{{date +%Y}}`` runs ``date``
with the argument ``+%Y`` and substitutes its standard output. The plugin
receives the document variables through its environment:

- ``ZS``: path of the running zazzy program.
- ``ZS_OUTDIR``: the publish directory.
- ``ZS_<NAME>``: every document variable, name upper-cased.

Plugins are searched in ``.zazzy/`` before PATH and always run from the
site root. They block the build until they exit; there is no timeout.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from collections.abc import Mapping

from .config import ENV_PREFIX, Config
from .errors import PluginError
from .executable_utils import find_executable

logger = logging.getLogger(__name__)


def plugin_env(config: Config, vars: Mapping[str, str]) -> dict[str, str]:
    """Build the environment of a plugin process.

    Args:
        config: Site configuration.
        vars: Variables of the document being rendered.

    Returns:
        OS environment extended with the ZS variables.
    """
    env = dict(os.environ)
    env["ZS"] = sys.argv[0]
    env["ZS_OUTDIR"] = config.pubdir
    for key, value in vars.items():
        env[ENV_PREFIX + key.upper()] = value
    env["PATH"] = config.plugin_path()
    return env


def resolve_command(config: Config, command: str) -> str:
    """Resolve a plugin name to the executable to spawn.

    Names containing a path separator are taken relative to the site root.

    Raises:
        PluginError: No executable with this name exists.
    """
    if "/" in command or os.sep in command:
        return str(config.root / command)
    found = find_executable(command, config.config_dir)
    if found is None:
        raise PluginError(command, "executable not found")
    return found


def run_plugin(
    config: Config, vars: Mapping[str, str], command: str, *args: str
) -> str:
    """Run a plugin and return its standard output.

    Standard error is logged whatever the exit status.

    Args:
        config: Site configuration.
        vars: Variables exported to the plugin.
        command: Plugin name or path.
        *args: Positional arguments passed unchanged.

    Returns:
        The plugin's standard output, invalid UTF-8 bytes replaced.

    Raises:
        PluginError: The plugin could not be started or exited non-zero.
    """
    executable = resolve_command(config, command)
    try:
        result = subprocess.run(
            [executable, *args],
            cwd=config.root,
            env=plugin_env(config, vars),
            capture_output=True,
        )
    except OSError as exc:
        raise PluginError(command, str(exc)) from exc

    stderr = result.stderr.decode("utf-8", errors="replace")
    if stderr:
        logger.error("ERROR: %s", stderr)
    if result.returncode != 0:
        raise PluginError(
            command, f"exit status {result.returncode}", result.returncode
        )
    return result.stdout.decode("utf-8", errors="replace")
