"""Domain layer — value objects, entities, aggregates, events, and the leave ledger.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
