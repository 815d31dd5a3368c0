from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import asyncio
import logging
from typing import Optional
from helpradar.core.config import settings
from helpradar.routers import posts, suggest, stats
from helpradar.database import init_database
from helpradar.services.rate_limiter import rate_limiter

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="HelpRadar",
    description="Community bulletin board with priority and proximity ranked feeds",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(posts.router, prefix="/api/posts", tags=["posts"])
app.include_router(suggest.router, prefix="/api/suggest", tags=["suggest"])
app.include_router(stats.router, prefix="/api/stats", tags=["stats"])

async def sweep_rate_limits():
    while True:
        await asyncio.sleep(settings.rate_limit_window_ms / 1000)
        rate_limiter.sweep_expired()

sweeper_task: Optional[asyncio.Task] = None

# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    global sweeper_task
    init_database()
    logger.info("Database initialized successfully")
    sweeper_task = asyncio.create_task(sweep_rate_limits())

@app.on_event("shutdown")
async def shutdown_event():
    global sweeper_task
    if sweeper_task is None:
        return
    sweeper_task.cancel()
    try:
        await sweeper_task
    except asyncio.CancelledError:
        pass
    sweeper_task = None
    logger.info("Rate limit sweeper stopped")

@app.get("/")
async def root():
    return {"message": "HelpRadar API", "status": "running"}

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "helpradar"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8001)
