# app/shared/services/notification_hub.py
import asyncio
import logging
from typing import Any, Dict, Optional, Set

from fastapi import Request

logger = logging.getLogger(__name__)


class NotificationHub:
    """
    Canal de eventos en proceso.

    Se crea en el lifespan de la aplicación, vive en `app.state.notification_hub`
    y se cierra al apagar el proceso. Cada suscriptor recibe su propia cola;
    al cerrar el hub todas las colas reciben `None` como fin de stream.
    """

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscribers: Set[asyncio.Queue] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        if self._closed:
            raise RuntimeError("NotificationHub cerrado")
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers.add(queue)
        logger.debug(f"Nuevo suscriptor ({len(self._subscribers)} activos)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    def publish(self, event: Dict[str, Any]) -> int:
        """Entregar evento a todos los suscriptores; retorna cuántos lo recibieron"""
        if self._closed:
            logger.debug(f"Evento descartado, hub cerrado: {event.get('event')}")
            return 0

        delivered = 0
        for queue in list(self._subscribers):
            if queue.full():
                # Suscriptor lento: se descarta el evento más antiguo
                queue.get_nowait()
                logger.warning("Cola de suscriptor llena, evento antiguo descartado")
            queue.put_nowait(event)
            delivered += 1
        return delivered

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for queue in self._subscribers:
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(None)
        self._subscribers.clear()
        logger.info("NotificationHub cerrado")


def get_notification_hub(request: Request) -> Optional[NotificationHub]:
    """Dependency: hub asociado a la aplicación (None fuera del lifespan)"""
    return getattr(request.app.state, "notification_hub", None)
