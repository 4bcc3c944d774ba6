"""
Main entry point for the iconship package when executed as a module.

This allows running the package with `python -m iconship`.
"""

from iconship.cli import main

if __name__ == '__main__':
    main()
