"""
Publicación de eventos de cambio (trips/ledger/settlements).

Los eventos no llevan datos: quien los recibe vuelve a consultar. La entrega
es best-effort y a lo sumo una vez; todo el estado derivado se puede
recalcular desde la base de datos.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional

from app.core.sio_events import sio

logger = logging.getLogger(__name__)


class ChangeEvent(str, Enum):
    TRIPS_CHANGED = "trips-changed"
    LEDGER_CHANGED = "ledger-changed"
    SETTLEMENTS_CHANGED = "settlements-changed"


Subscriber = Callable[[ChangeEvent], None]


class ChangeNotifier:
    def __init__(self, server=sio):
        self.server = server
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._subscribers: List[Subscriber] = []

    def bind_loop(self, loop: Optional[asyncio.AbstractEventLoop]):
        """Registra el event loop del servidor ASGI (se llama en el lifespan)."""
        self._loop = loop

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def publish(self, kind: ChangeEvent) -> None:
        kind = ChangeEvent(kind)
        for callback in list(self._subscribers):
            try:
                callback(kind)
            except Exception:
                logger.exception(f"Subscriber failed handling {kind.value}")
        self._emit(kind)

    def _emit(self, kind: ChangeEvent) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug(f"No event loop bound, dropping {kind.value}")
            return
        try:
            asyncio.run_coroutine_threadsafe(
                self.server.emit(kind.value, {"type": kind.value}), loop)
        except RuntimeError as e:
            logger.warning(f"Could not emit {kind.value}: {e}")


change_notifier = ChangeNotifier()
