"""DevTask - FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from devtask import __version__
from devtask.api.routes import chat
from devtask.api.schemas import HealthResponse
from devtask.config import API_PREFIX, HOST, PORT, project_root
from devtask.utils.logging import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(f"DevTask v{__version__} starting...")
    logger.info(f"Project root: {project_root()}")
    logger.info(f"Server running at http://{HOST}:{PORT}")
    yield
    logger.info("DevTask stopped")


app = FastAPI(
    title="DevTask",
    description="Conversational assistant for project files, tasks and code",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router, prefix=API_PREFIX)


@app.get(f"{API_PREFIX}/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", version=__version__)


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    run()
