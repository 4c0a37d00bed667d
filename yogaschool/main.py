from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from pathlib import Path
import time

from .core.config import settings
from .core.logging import setup_logging, logger
from .core.cache import cache_manager
from .core.database import init_models, close_db_connections
from .core.exceptions import YogaSchoolException, yoga_school_exception_handler, general_exception_handler

# Import all routers
from .routers import health, auth, admin
from .routers.chat import chat_router, websocket_router

setup_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting yoga school API")

    if settings.create_tables_on_startup:
        await init_models()
        logger.info("Database tables ready")

    await cache_manager.initialize()
    logger.info("Cache initialized")

    yield

    logger.info("Shutting down yoga school API")
    await cache_manager.close()
    await close_db_connections()
    logger.info("Shutdown complete")

app = FastAPI(
    title="Yoga School API",
    description="Accounts, group and direct-message chat with realtime delivery for a yoga school",
    version=settings.app_version,
    lifespan=lifespan
)

@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    logger.info(f"{request.method} {request.url.path} - {process_time:.3f}s")
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

app.add_exception_handler(YogaSchoolException, yoga_school_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

# Include all routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(chat_router)
app.include_router(websocket_router)

@app.get("/")
async def root():
    return {
        "message": "Yoga School API",
        "version": settings.app_version,
        "features": ["Role-based accounts", "Group chats", "Direct messages", "Realtime delivery", "Unread counts"],
        "status": "active"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("yogaschool.main:app", host="0.0.0.0", port=8000, reload=True)
