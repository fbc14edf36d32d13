import logging
import socketio

logger = logging.getLogger(__name__)

# Para varias instancias usar un AsyncRedisManager como client_manager
sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins='*')


@sio.event
async def connect(sid, environ):
    logger.info(f'Cliente conectado: {sid}')


@sio.event
async def disconnect(sid):
    logger.info(f'Cliente desconectado: {sid}')
