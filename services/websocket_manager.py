"""
Registro de conexiones WebSocket por usuario del staff.

Cada usuario puede tener varias pestañas abiertas; los mensajes de una
notificación se envían a todas sus conexiones.
"""

import asyncio
import logging
from typing import Any, Dict, List, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self) -> None:
        self._connections: Dict[str, List[WebSocket]] = {}
        self._lock = asyncio.Lock()
        self._tasks: Set[asyncio.Task] = set()

    async def connect(self, id_usuario: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._connections.setdefault(id_usuario, []).append(websocket)
        logger.info(f"WebSocket conectado para usuario {id_usuario}")

    async def disconnect(self, id_usuario: str, websocket: WebSocket) -> None:
        async with self._lock:
            sockets = self._connections.get(id_usuario, [])
            if websocket in sockets:
                sockets.remove(websocket)
            if not sockets:
                self._connections.pop(id_usuario, None)
        logger.info(f"WebSocket desconectado para usuario {id_usuario}")

    async def send_to_user(self, id_usuario: str, message: Dict[str, Any]) -> int:
        """Envía `message` a todas las conexiones del usuario; devuelve cuántas lo recibieron."""
        async with self._lock:
            targets = list(self._connections.get(id_usuario, []))

        enviados = 0
        failures: List[WebSocket] = []
        for socket in targets:
            try:
                await socket.send_json(message)
                enviados += 1
            except Exception as e:
                logger.warning(f"No se pudo enviar al WebSocket de {id_usuario}: {e}")
                failures.append(socket)

        for socket in failures:
            await self.disconnect(id_usuario, socket)
        return enviados

    def connection_count(self, id_usuario: str) -> int:
        return len(self._connections.get(id_usuario, []))

    def notify_user(self, id_usuario: str, message: Dict[str, Any]) -> None:
        """
        Programa el envío desde código síncrono.

        Solo funciona dentro de un event loop en ejecución (las rutas async de
        FastAPI); fuera de él el envío se omite, la notificación ya quedó en BD.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"Sin event loop activo; push omitido para {id_usuario}")
            return
        task = loop.create_task(self.send_to_user(id_usuario, message))
        self._tasks.add(task)
        task.add_done_callback(self._task_terminada)

    def _task_terminada(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Fallo al enviar notificación por WebSocket: {error}", exc_info=error)

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)


manager = ConnectionManager()


def get_connection_manager() -> ConnectionManager:
    return manager
