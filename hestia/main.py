from fastapi import FastAPI
from loguru import logger

from hestia.core.logging import setup_logging
from hestia.core.init_db import init_db
from hestia.core.errors import install_error_handlers
from hestia.modules.users.routes import router as users_router
from hestia.modules.connections.routes import router as connections_router
from hestia.modules.notifications.router import router as notifications_router
from hestia.modules.locations.router import router as locations_router

setup_logging()
logger.info("Starting Hestia backend")


app = FastAPI(
    title="Hestia Backend",
    version="0.1.0"
)

install_error_handlers(app)

app.include_router(users_router)
app.include_router(notifications_router)
app.include_router(connections_router)
app.include_router(locations_router)

# Init DB after app is created
init_db()

@app.get("/health")
def health():
    logger.debug("Health check hit")
    return {"status": "ok"}
