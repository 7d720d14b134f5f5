# supergains/main.py
import uvicorn
from fastapi import FastAPI

from supergains import __version__
from supergains.api import api_router
from supergains.api.errors import register_exception_handlers
from supergains.api.middleware import register_middleware
from supergains.data.database import Base, init_db
from supergains.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app() -> FastAPI:
    configure_logging()

    init_db()
    logger.info(f"Database ready, tables: {sorted(Base.metadata.tables)}")

    app = FastAPI(
        title="SuperGains API",
        version=__version__,
    )

    register_exception_handlers(app)
    register_middleware(app)
    app.include_router(api_router, prefix="/api")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
