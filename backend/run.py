import uvicorn

from booking_core.core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "booking_core.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
