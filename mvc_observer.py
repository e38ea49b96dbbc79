# mvc_observer.py
from __future__ import annotations
import logging
from typing import Protocol, Any

logger = logging.getLogger(__name__)


class Observer(Protocol):
    def update(self, event: str, payload: Any) -> None: ...


class Subject:
    """
    Простейший Subject: подписчики получают (event, payload) в порядке подписки.
    Ошибка подписчика не глотается — она уходит тому, кто вызвал notify().
    """

    def __init__(self) -> None:
        self._observers: list[Observer] = []

    def attach(self, obs: Observer) -> None:
        if obs not in self._observers:
            self._observers.append(obs)

    def detach(self, obs: Observer) -> None:
        if obs in self._observers:
            self._observers.remove(obs)

    def notify(self, event: str, payload: Any) -> None:
        logger.debug("%s: событие %s для %d подписчиков",
                     type(self).__name__, event, len(self._observers))
        for obs in list(self._observers):
            obs.update(event, payload)
