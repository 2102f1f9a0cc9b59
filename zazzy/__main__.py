"""Entry point for the Zazzy CLI.

Running ``python -m zazzy`` is the same as running the ``zazzy`` command.
"""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
