"""Built-in plugins shipped with taskboard."""
