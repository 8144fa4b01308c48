"""
Ticket Store - durable table of Ticket records

Pure load/save with no business logic:
- load_all() never fails: missing or corrupt data reads as an empty table
- save_all() replaces the whole collection atomically

Backends:
- JsonFileTicketStore: single named slot in a JSON file
- InMemoryTicketStore: process-local fake for tests and demos
"""
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from civicai.exceptions import TicketStoreError
from civicai.models.ticket import Ticket
from civicai.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SLOT = "civic_ai_tickets"


class TicketStore(ABC):
    """Store contract used by the escalation engine and lifecycle service"""

    @abstractmethod
    def load_all(self) -> List[Ticket]:
        """Load every persisted ticket (empty list if none or unreadable)"""

    @abstractmethod
    def save_all(self, tickets: Sequence[Ticket]) -> None:
        """Replace the persisted collection"""

    @staticmethod
    def _parse_records(records) -> List[Ticket]:
        """
        Validate raw records into tickets.

        Raises:
            ValueError: If the payload is not a list of valid ticket records
        """
        if not isinstance(records, list):
            raise ValueError(f"Expected a list of tickets, got {type(records).__name__}")
        return [Ticket.model_validate(record) for record in records]


class JsonFileTicketStore(TicketStore):
    """
    Ticket table persisted as {"<slot>": [ticket, ...]} in a JSON file.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so readers never observe a partial write.
    """

    def __init__(self, path: str, slot: str = DEFAULT_SLOT):
        """
        Initialize store

        Args:
            path: JSON file path (created on first save)
            slot: Top-level key holding the ticket list
        """
        self.path = Path(path)
        self.slot = slot
        logger.info(f"JsonFileTicketStore initialized: {self.path} (slot={self.slot})")

    def load_all(self) -> List[Ticket]:
        if not self.path.exists():
            logger.debug(f"Ticket store {self.path} does not exist yet")
            return []

        try:
            with self.path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
            if not isinstance(payload, dict):
                raise ValueError("Store root must be an object")
            tickets = self._parse_records(payload.get(self.slot, []))
        except (OSError, ValueError, ValidationError) as e:
            # Corrupt or unreadable store counts as empty
            logger.warning(f"Ticket store {self.path} unreadable, treating as empty: {e}")
            return []

        logger.debug(f"Loaded {len(tickets)} tickets from {self.path}")
        return tickets

    def save_all(self, tickets: Sequence[Ticket]) -> None:
        payload = {self.slot: [ticket.to_record() for ticket in tickets]}
        tmp_path: Optional[str] = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            logger.error(f"Failed to save {len(tickets)} tickets to {self.path}: {e}")
            raise TicketStoreError(f"Could not write ticket store: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.debug(f"Saved {len(tickets)} tickets to {self.path}")


class InMemoryTicketStore(TicketStore):
    """
    In-memory ticket table.

    Stores serialized records so that callers never share mutable state with
    the store, mirroring the file backend.
    """

    def __init__(self, tickets: Optional[Sequence[Ticket]] = None):
        self._records: List[dict] = [t.to_record() for t in tickets or []]
        self.save_count = 0

    def load_all(self) -> List[Ticket]:
        return self._parse_records(json.loads(json.dumps(self._records)))

    def save_all(self, tickets: Sequence[Ticket]) -> None:
        self._records = [ticket.to_record() for ticket in tickets]
        self.save_count += 1
