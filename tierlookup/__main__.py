"""Main entry point when executing tierlookup as a package.

This allows running the package using python -m tierlookup.
"""

from tierlookup.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
