"""Two logically paired writes without a cross-document transaction."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from events.domain.errors import PartialWriteInconsistencyError
from events.services.base import store_errors
from events.stores.interfaces import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TwoPhaseWrite(Generic[T]):
    """A primary write followed by a dependent secondary write.

    Failure of the primary leaves nothing written and surfaces as
    StoreUnavailableError (or whatever domain error the primary raises).
    Failure of the secondary is never rolled back: it surfaces as
    PartialWriteInconsistencyError and is logged for reconciliation.
    """

    operation: str
    event_id: str
    identity_id: str
    primary: Callable[[], T]
    secondary: Callable[[T], None]

    def execute(self) -> T:
        with store_errors():
            result = self.primary()
        try:
            self.secondary(result)
        except StoreError as exc:
            logger.error(
                "Partial write: operation=%s event_id=%s identity=%s "
                "primary committed, secondary failed: %s",
                self.operation,
                self.event_id,
                self.identity_id,
                exc,
            )
            raise PartialWriteInconsistencyError(
                self.operation, self.event_id, self.identity_id
            ) from exc
        return result
