"""
Clubhouse - Cricket Club Portal API
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clubhouse import __version__
from clubhouse.config import settings
from clubhouse.database import init_db
from clubhouse.logging_config import setup_logging
from clubhouse.api.errors import register_error_handlers
from clubhouse.api.players import router as players_router
from clubhouse.api.matches import router as matches_router
from clubhouse.api.me import router as me_router
from clubhouse.api.club import router as club_router

# Initialize FastAPI app
app = FastAPI(
    title="Clubhouse",
    description="Cricket club scoring and statistics API",
    version=__version__,
)

# CORS origins - configurable via environment variable
default_origins = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]

# Add custom origins from environment (comma-separated)
if settings.CORS_ORIGINS:
    default_origins.extend([o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()])

app.add_middleware(
    CORSMiddleware,
    allow_origins=default_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(players_router, prefix="/api")
app.include_router(matches_router, prefix="/api")
app.include_router(me_router, prefix="/api")
app.include_router(club_router, prefix="/api")


@app.on_event("startup")
def startup_event():
    """Configure logging and initialize database on startup"""
    setup_logging(settings.LOG_DIR or None, getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    init_db()


@app.get("/")
def root():
    """Health check endpoint"""
    return {
        "name": "Clubhouse API",
        "version": __version__,
        "status": "running",
    }


@app.get("/api/health")
def health_check():
    """API health check"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
