from loguru import logger
from hestia.core.db import engine, Base

# Import all models so SQLAlchemy registers them
from hestia.modules.users.models import User
from hestia.modules.notifications.models import Notification
from hestia.modules.connections.models import Connection, Message
from hestia.modules.locations.models import LocationSetting, LocationSample, LocationPermission

def init_db(bind=None):
    logger.info("Creating database tables")
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created")
