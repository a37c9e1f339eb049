"""In-process bus carrying booking and reassignment notifications."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Handler = Callable[[BaseModel], None]


class EventBus:
    """Publish/subscribe bus for domain events.

    Delivery is synchronous: ``publish`` returns once every subscriber of the
    message's exact type has run, in subscription order.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type[BaseModel], list[Handler]] = defaultdict(list)

    def subscribe(self, message_type: type[BaseModel], handler: Handler) -> None:
        self._subscribers[message_type].append(handler)

    def publish(self, message: BaseModel) -> None:
        handlers = self._subscribers.get(type(message), [])
        logger.debug("Publishing %s to %d handler(s)", type(message).__name__, len(handlers))
        for handler in handlers:
            handler(message)
