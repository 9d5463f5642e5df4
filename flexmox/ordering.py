"""Order-number allocation and validation for ordered expectations."""

from __future__ import annotations

import logging
import typing as t

from .errors import OrderViolationError
from .verifiers import order_violation_message

logger = logging.getLogger(__name__)


class Ordering:
    """Track the order cursor and named groups of one double.

    Every ungrouped ``ordered()`` declaration gets a new slot; members of a
    named group share the slot allocated when the group was first seen.
    Calls may move the cursor forwards or stay in the same slot, never back.
    """

    def __init__(self, owner_name: str) -> None:
        self.owner_name = owner_name
        self.current_order = 0
        self.groups: dict[t.Hashable, int] = {}
        self._allocated = 0

    def allocate(self) -> int:
        """Return the next free order number."""
        self._allocated += 1
        return self._allocated

    def number_for(self, group: t.Hashable | None = None) -> int:
        """Return the order number for *group*, allocating one if needed."""
        if group is None:
            return self.allocate()
        number = self.groups.get(group)
        if number is None:
            number = self.allocate()
            self.groups[group] = number
        return number

    def validate(self, description: str, order_number: int) -> None:
        """Advance the cursor to *order_number* or raise if it lies behind."""
        if order_number < self.current_order:
            msg = order_violation_message(
                self.owner_name, description, order_number, self.current_order
            )
            raise OrderViolationError(msg)
        logger.debug(
            "Double %r advanced order from %d to %d for %s",
            self.owner_name,
            self.current_order,
            order_number,
            description,
        )
        self.current_order = order_number


__all__ = ["Ordering"]
