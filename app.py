"""
Compliance Records Tracker API
Main application entry point.

Tracks licenses, certificates and contracts, classifies each record as
active, soon to expire or expired, and raises a once-per-day expiry
notification for records expiring within the notification horizon.
"""

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from compliance_tracker.api.routes import router, get_record_store, get_scanner
from compliance_tracker.utils.config import get_api_config
from compliance_tracker.utils.logger import setup_logging

# Load environment variables
load_dotenv(override=True)

# Setup logging
logger = setup_logging()

# Load API configuration
api_config = get_api_config()

# Create FastAPI application
app = FastAPI(
    title=api_config['api']['title'],
    description=api_config['api']['description'],
    version=api_config['api']['version'],
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
cors_config = api_config.get('cors', {})
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_config.get('allow_origins', ["*"]),
    allow_credentials=True,
    allow_methods=cors_config.get('allow_methods', ["*"]),
    allow_headers=cors_config.get('allow_headers', ["*"]),
)

# Include API routes
app.include_router(router, prefix=api_config['api']['prefix'])


@app.on_event("startup")
async def startup_event():
    """Load records and run the daily expiry scan."""
    logger.info("Starting Compliance Records Tracker API...")
    logger.info(f"API Version: {api_config['api']['version']}")

    store = get_record_store()
    alerts = get_scanner().run_if_due(store.collections())
    if alerts is not None:
        logger.info(f"Startup expiry scan found {len(alerts)} records")

    port = api_config.get('server', {}).get('port', 8000)
    logger.info(f"API available at: http://localhost:{port}")
    logger.info(f"Docs available at: http://localhost:{port}/docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Compliance Records Tracker API...")
    sender = get_scanner().sender
    if sender is not None:
        sender.close()


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": api_config['api']['title'],
        "version": api_config['api']['version'],
        "description": api_config['api']['description'],
        "docs": "/docs",
        "health": f"{api_config['api']['prefix']}/health"
    }
