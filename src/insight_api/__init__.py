"""py-insight: block explorer API for the Dash blockchain."""

__version__ = "0.1.0"
