"""Infrastructure layer — persistence ports, stores, and the workspace.

This layer depends on stdlib, third-party libs (SQLAlchemy, pluggy), and
domain models. It must never import from services, commands, or output.
"""
