"""Zazzy static site generator.

This package builds a static site from a tree of Markdown, HTML and XML
files. Documents carry an optional YAML header, and their bodies may contain
``{{ }}`` macros that expand to variables, partials, file lists, favicons or
the output of external plugins. Markdown is converted to HTML and wrapped in
a layout; everything else is copied to the publish directory.

The main entry point is the CLI module, which provides commands for building
the site once, watching it for changes, printing document variables and
running plugins.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
