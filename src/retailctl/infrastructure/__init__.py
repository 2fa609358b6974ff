"""Infrastructure layer — container runtime, compose tool, MySQL server.

This layer wraps external processes (subprocess) and the database
(SQLAlchemy + PyMySQL). It may use domain types but must never import
from services, commands, or output.
"""
