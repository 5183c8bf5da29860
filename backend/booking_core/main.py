# booking_core/main.py
from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from booking_core.core.config import get_settings

#Import Routers
from booking_core.api.v1 import scheduling

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.slot_store == "sql":
        from booking_core.core.database import init_models
        await init_models()
    yield


# Create FastAPI app
app = FastAPI(
    title="Booking Core API",
    description="Appointment availability and booking for a single business",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
#Include routers
app.include_router(scheduling.router, prefix="/api/v1", tags=["scheduling"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Booking Core API",
        "version": "1.0.0",
        "status": "running"
    }

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": os.getenv("APP_ENV", "unknown"),
        "slot_store": settings.slot_store,
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "booking_core.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
