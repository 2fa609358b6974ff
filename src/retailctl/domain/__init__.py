"""Domain layer — credentials, preconditions, and database principals.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
