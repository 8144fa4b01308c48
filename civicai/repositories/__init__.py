"""
Repositories package for ticket persistence

Provides the ticket store contract and its backends:
- JsonFileTicketStore (single named slot in a JSON file)
- InMemoryTicketStore (tests and demos)
"""
from civicai.repositories.ticket_store import (
    TicketStore,
    JsonFileTicketStore,
    InMemoryTicketStore,
)

__all__ = [
    "TicketStore",
    "JsonFileTicketStore",
    "InMemoryTicketStore",
]
