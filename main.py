from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from framework.config import settings
from framework.middleware.logging_md import LoggingMiddleware
from framework.logging.logger import LogConfig, get_logger
from framework.database.manager import DatabaseManager
from framework.exceptions.handler import global_exception_handler
from apps.products.api.router import router as products_router

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check the database on startup and release the pool on shutdown."""
    driver = DatabaseManager.get_instance().sql
    await driver.connect()
    logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV})")
    yield
    await driver.disconnect()
    logger.info(f"{settings.APP_NAME} stopped")


app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Initialize logging configuration
LogConfig.setup_logging()

# Register global exception handlers
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(LoggingMiddleware)

# Mount routers (prefix from config for easy override in private projects)
app.include_router(
    products_router,
    prefix=settings.API_PRODUCTS_PREFIX,
    tags=["Products"]
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
