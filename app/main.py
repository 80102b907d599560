import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Config
from app.core.logging_config import configure_logging
from app.database.db import Base, engine
from app.models import events as event_models, registrations as registration_models  # noqa: F401
from app.routes import events, registrations, reports

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Church Events")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create all tables (in production, use migrations such as Alembic)
if Config.AUTO_CREATE_TABLES:
    Base.metadata.create_all(bind=engine)

# Include the routers
app.include_router(events.router)
app.include_router(registrations.router)
app.include_router(reports.router)
