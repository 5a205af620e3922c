"""Entry point for ``python -m sql_interrogator`` and the ``sqli`` console script."""

from __future__ import annotations

from sql_interrogator.cli.app import main

if __name__ == "__main__":
    main()
