from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from database import Base, engine
from datetime import datetime
import os
import models  # noqa: F401  registers every table on Base.metadata
import routers.journals as journals
import routers.partners as partners
import routers.goods as goods
import routers.tax_codes as tax_codes
import routers.journal_partner_links as journal_partner_links
import routers.journal_good_links as journal_good_links
import routers.journal_partner_good_links as journal_partner_good_links
import logging
from fastapi.openapi.utils import get_openapi

from config import CORS_ALLOWED_ORIGINS, LOG_DIR, LOG_LEVEL
from exceptions import InvariantViolationError, LinkingError


os.makedirs(LOG_DIR, exist_ok=True) # Create the log directory if it doesn't exist

# Create a unique log file name based on current date/time
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

# Configure the root logger
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE, # Log to a file
    filemode='a' # Append to the file if it exists
)

# Also log to the console
console_handler = logging.StreamHandler()
console_handler.setLevel(LOG_LEVEL)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler) # Add to the root logger

logger = logging.getLogger(__name__)
logger.info("Application starting up...")
# --- End Logging Configuration ---


# Create database tables
Base.metadata.create_all(bind=engine)


app = FastAPI()

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LinkingError)
async def linking_error_handler(request: Request, exc: LinkingError):
    """Map domain errors raised by the crud layer to HTTP responses."""
    if isinstance(exc, InvariantViolationError):
        logger.error(f"{request.method} {request.url.path} aborted: {exc.message} {exc.details}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_type": type(exc).__name__, "context": exc.details},
    )


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Journal Linking API",
        version="1.0.0",
        description="Journal hierarchy and partner/good linking service",
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


app.include_router(journals.router)
app.include_router(partners.router)
app.include_router(goods.router)
app.include_router(tax_codes.router)
app.include_router(journal_partner_links.router)
app.include_router(journal_good_links.router)
app.include_router(journal_partner_good_links.router)

@app.get("/")
async def test_route():
    return {"message": "Welcome to the Journal Linking API!"}
