import uvicorn

from redirection_service.app import create_app
from redirection_service.config import configure_logging, load_settings

settings = load_settings()
configure_logging(settings.log_level)

# Create FastAPI app
app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
