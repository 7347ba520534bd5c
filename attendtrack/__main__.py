"""
Package entry point.

Allows running the application via:

    python -m attendtrack

This simply forwards execution to attendtrack.cli.main().
"""

from attendtrack.cli import main

if __name__ == "__main__":
    main()
