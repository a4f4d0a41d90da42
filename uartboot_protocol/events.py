# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Upload notifications delivered to client observers."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Union

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Progress:
    """Upload progress; percent is a fraction between 0.0 and 1.0."""
    total: int
    sent: int
    percent: float


@dataclass(frozen=True)
class Completed:
    """Every line of the image was acknowledged."""
    total: int


@dataclass(frozen=True)
class Failed:
    """The upload was aborted."""
    error: Exception


Event = Union[Progress, Completed, Failed]
Observer = Callable[[Event], None]


class ObserverRegistry:
    """Ordered set of observers notified with every event."""

    def __init__(self):
        self._observers: List[Observer] = []

    def add(self, observer: Observer):
        if observer not in self._observers:
            self._observers.append(observer)

    def remove(self, observer: Observer):
        if observer in self._observers:
            self._observers.remove(observer)

    def __len__(self) -> int:
        return len(self._observers)

    def __call__(self, event: Event):
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:  # noqa: BLE001
                _logger.exception("Observer %r failed on %r", observer, event)
