from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notification_engine.config import get_settings
from notification_engine.infrastructure.database import engine, initialize_database
from notification_engine.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup and release pooled connections on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Build the notification API application."""

    app = FastAPI(title="Notification Engine", lifespan=lifespan)

    # The client application reads inboxes and preferences from another origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[get_settings().base_url.rstrip("/")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.server_host, port=settings.server_port)
