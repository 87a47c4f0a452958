"""
In-memory availability blocks (vacations, holidays, other blackouts).

Blocks are created and deleted by an admin and never edited in place.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from booking_engine.errors import NotFoundError
from booking_engine.scheduling.time_window import TimeWindow
from booking_engine.schemas.calendar_schema import AvailabilityBlock

logger = logging.getLogger(__name__)


class AvailabilityBlockStore:
    def __init__(self) -> None:
        self._blocks: dict[str, AvailabilityBlock] = {}

    def add(
        self, start: datetime, end: datetime, reason: Optional[str] = None
    ) -> AvailabilityBlock:
        """Block out ``[start, end)``."""
        block = AvailabilityBlock(
            id=f"blk_{uuid.uuid4().hex[:12]}",
            start_date=start,
            end_date=end,
            reason=reason,
        )
        self._blocks[block.id] = block
        logger.info(
            "Availability block %s added: %s to %s",
            block.id, block.start_date.isoformat(), block.end_date.isoformat(),
        )
        return block

    def remove(self, block_id: str) -> AvailabilityBlock:
        if block_id not in self._blocks:
            raise NotFoundError(f"Availability block {block_id} not found")
        logger.info("Availability block %s removed", block_id)
        return self._blocks.pop(block_id)

    def overlapping(self, window: TimeWindow) -> list[AvailabilityBlock]:
        """Blocks intersecting ``window``, ordered by start."""
        hits = [b for b in self._blocks.values() if b.window.overlaps(window)]
        return sorted(hits, key=lambda b: b.start_date)

    def all(self) -> list[AvailabilityBlock]:
        return sorted(self._blocks.values(), key=lambda b: b.start_date)

    def reset(self) -> None:
        self._blocks.clear()
