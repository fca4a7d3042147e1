"""Infrastructure layer — database, repositories, and the Store unit of work.

This layer depends on stdlib, SQLAlchemy, and the domain layer.
It must never import from services, commands, or output.
"""
