"""
Package entry point.

Allows running the application via:

    python -m horaires

This simply forwards execution to horaires.cli.main().
"""

from horaires.cli import main

if __name__ == "__main__":
    main()
