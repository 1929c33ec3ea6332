"""antx: an interactive shell for the Antbox document management API."""

__version__ = "0.1.0"
