"""
Package entry point.

Allows running the application via:

    python -m dropin

This simply forwards execution to dropin.cli.main().
"""

from dropin.cli import main

if __name__ == "__main__":
    main()
