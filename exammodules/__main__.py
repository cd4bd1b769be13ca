"""
Package entry point.

Allows running the application via:

    python -m exammodules

This simply forwards execution to exammodules.cli.main().
"""

from exammodules.cli import main

if __name__ == "__main__":
    main()
