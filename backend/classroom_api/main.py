"""
Classroom Attendance API
FastAPI Application Entry Point

On startup:
1. Seeds the admin user if not exists
2. Reports readiness; schema is managed by Alembic (alembic upgrade head)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classroom_api.config import settings
from classroom_api.database import engine, AsyncSessionLocal
from classroom_api.models.user import UserRole
from classroom_api.services.user_service import create_user, get_user_by_email
from classroom_api.api.auth import router as auth_router
from classroom_api.api.classrooms import router as classrooms_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("classroom-attendance")


async def seed_database():
    """Create the admin account from settings if it does not exist yet."""
    async with AsyncSessionLocal() as session:
        try:
            admin = await get_user_by_email(session, settings.ADMIN_EMAIL)
            if not admin:
                await create_user(
                    session,
                    name=settings.ADMIN_NAME,
                    email=settings.ADMIN_EMAIL,
                    password=settings.ADMIN_PASSWORD,
                    role=UserRole.ADMIN,
                )
                await session.commit()
                logger.info(f"Admin user created: {settings.ADMIN_EMAIL}")
            else:
                logger.info("Database already seeded (admin user exists)")
        except Exception as e:
            logger.error(f"Database seeding failed: {e}")
            await session.rollback()
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: seed data on startup, release the engine on shutdown."""
    logger.info("Starting %s...", settings.APP_NAME)
    logger.info("Skipping create_all; ensure Alembic migrations are applied (alembic upgrade head)")

    await seed_database()

    logger.info(f"{settings.APP_NAME} is ready!")
    logger.info(" API docs: http://localhost:8000/docs")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Classrooms, enrolled students and daily attendance records",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routes
app.include_router(auth_router)
app.include_router(classrooms_router)


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "online",
        "app": settings.APP_NAME,
        "version": "1.0.0",
    }


@app.get("/api/v1/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": "1.0.0",
    }
