"""FastAPI main application."""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .config import settings
from .services.broker import Broker
from .utils.logger import init_app_logger
from .api.v1 import conversations, inquiries, messages


# Initialize logger
logger = init_app_logger(settings)

# Global broker instance
broker_instance: Broker = None


def _mask(secret: str) -> str:
    return secret[:4] + "..." + secret[-4:] if len(secret) > 12 else "***"


def log_configuration() -> None:
    logger.info("")
    logger.info("📡 Server Configuration:")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  Debug: {settings.debug}")
    logger.info(f"  Log Level: {settings.log_level}")
    logger.info(f"  Log File: {settings.log_file}")

    logger.info("")
    logger.info("📨 Messaging Configuration:")
    logger.info(f"  Owner: {settings.owner_id}")
    logger.info(f"  Gateway: {settings.gateway_base_url}")
    logger.info(f"  Gateway Token: {_mask(settings.gateway_token) if settings.gateway_token else 'Not set'}")
    logger.info(f"  Topics File: {settings.topics_file}")
    logger.info(f"  Ignored Senders: {', '.join(settings.get_ignored_senders()) or '(none)'}")

    logger.info("")
    logger.info("💾 State Configuration:")
    logger.info(f"  Backend: {settings.state_backend}")
    if settings.state_backend.lower() == "duckdb":
        logger.info(f"  Database: {settings.database_path}")
    else:
        logger.info(f"  State File: {settings.state_file}")

    logger.info("")
    logger.info("🤖 Normalizer Configuration:")
    if settings.gemini_api_key:
        logger.info(f"  Model: {settings.gemini_model}")
        logger.info(f"  API Key: {_mask(settings.gemini_api_key)}")
        logger.info(f"  Timeout: {settings.normalizer_timeout}s")
    else:
        logger.info("  API Key: Not set (raw text reports)")

    logger.info("")
    logger.info("🧹 Housekeeping Configuration:")
    logger.info(f"  Interval: {settings.sweep_interval}s")
    logger.info(f"  Conversation TTL: {settings.conversation_ttl}s")
    logger.info(f"  Topic Retention: {settings.topic_retention}s")
    logger.info(f"  Attachment Delay: {settings.attachment_send_delay}s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    # Startup
    logger.info("=" * 70)
    logger.info("Starting Inquiry Broker...")
    logger.info("=" * 70)
    log_configuration()

    logger.info("")
    logger.info("🚀 Initializing Broker...")
    global broker_instance
    broker_instance = Broker(settings)

    # Set broker in API modules
    messages.broker = broker_instance
    inquiries.broker = broker_instance
    conversations.broker = broker_instance

    broker_instance.start()

    logger.info("")
    logger.info("=" * 70)
    logger.info("✅ Inquiry Broker started successfully!")
    logger.info(f"📍 Webhook at: http://{settings.host}:{settings.port}/api/v1/messages")
    logger.info(f"📚 API Docs: http://{settings.host}:{settings.port}/docs")
    logger.info("=" * 70)

    yield

    # Shutdown
    logger.info("")
    logger.info("=" * 70)
    logger.info("Shutting down Inquiry Broker...")
    logger.info("=" * 70)

    if broker_instance:
        await broker_instance.shutdown()

    logger.info("✅ Inquiry Broker shut down successfully")


# Create FastAPI application
app = FastAPI(
    title="Inquiry Broker",
    description="Broadcasts buyer inquiries to interest groups and relays private seller responses",
    version="1.0.0",
    lifespan=lifespan
)

# Include API routers
app.include_router(messages.router)
app.include_router(inquiries.router)
app.include_router(conversations.router)


@app.get("/health")
async def health():
    """
    Simple health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": "Inquiry Broker"
    }


def run() -> None:
    """Console entry point."""
    uvicorn.run(
        "broker.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )


if __name__ == "__main__":
    run()
