"""Domain layer — entities, access rules, lifecycle, and failures.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
