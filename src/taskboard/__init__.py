"""taskboard — collaborative board, invitation, and task core."""

__version__ = "0.4.0"
