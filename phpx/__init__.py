"""phpx — run PHP command-line tools on demand, npx-style."""

__version__ = "0.1.0"
