import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import socketio

from .core.db import create_all_tables
from .routers import (
    trips, driver_rent_logs, settlements, vehicles, vehicle_assignments,
    rental_slabs, substitute_drivers
)
from .core.config import settings
from .core.init_data import init_data
from .core.sio_events import sio
from .services.change_notifier import change_notifier

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Iniciando la aplicación...")
    create_all_tables()
    init_data()
    change_notifier.bind_loop(asyncio.get_running_loop())
    yield
    change_notifier.bind_loop(None)
    logger.info("Cerrando la aplicación...")

fastapi_app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="Liquidación semanal y ledger de rentas de una flota de vehículos",
    version=settings.APP_VERSION,
    debug=settings.DEBUG
)

# Configuración CORS
fastapi_app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_CREDENTIALS,
    allow_methods=settings.CORS_METHODS,
    allow_headers=settings.CORS_HEADERS,
)

# Agregar routers
fastapi_app.include_router(trips.router)
fastapi_app.include_router(driver_rent_logs.router)
fastapi_app.include_router(settlements.router)
fastapi_app.include_router(vehicles.router)
fastapi_app.include_router(vehicle_assignments.router)
fastapi_app.include_router(rental_slabs.router)
fastapi_app.include_router(substitute_drivers.router)


@fastapi_app.get("/health")
def health():
    return {"status": "healthy"}

# Socket.IO debe ser lo último
app = socketio.ASGIApp(sio, other_asgi_app=fastapi_app)
