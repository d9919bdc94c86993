"""
WebSocket de notificaciones en tiempo real: /ws/notificaciones?token=<jwt>.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from auth import context_from_token
from core.exceptions import UnauthorizedException
from database.db import get_db
from services.websocket_manager import get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["websocket"])

WS_CLOSE_UNAUTHORIZED = 4401
WS_CLOSE_FORBIDDEN = 4403


@router.websocket("/notificaciones")
async def notificaciones_ws(
    websocket: WebSocket,
    token: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    El staff recibe aquí sus notificaciones como {"evento": "notificacion", "data": {...}}.
    Los mensajes que envía el cliente se ignoran (sirven de keep-alive).
    """
    try:
        ctx = context_from_token(token, db)
    except UnauthorizedException as e:
        logger.info(f"WebSocket rechazado: {e.message}")
        await websocket.close(code=WS_CLOSE_UNAUTHORIZED)
        return
    if not ctx.es_staff:
        await websocket.close(code=WS_CLOSE_FORBIDDEN)
        return

    manager = get_connection_manager()
    await manager.connect(ctx.id, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug(f"WebSocket cerrado por el cliente {ctx.id}")
    finally:
        await manager.disconnect(ctx.id, websocket)
