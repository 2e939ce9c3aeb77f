import logging
import os
import sys

import uvicorn

# Configure logging to stdout until the app configures its own handlers
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

# Add the src directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
src_path = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)


def _log_environment() -> None:
    """Log which settings are present without exposing secrets."""
    logger.info("ClinicDesk startup")
    logger.info(f"Python version: {sys.version.split()[0]}")
    logger.info(f"APP_ENV: {os.environ.get('APP_ENV', 'not set')}")
    logger.info(f"REDIS_URL: {'set' if os.environ.get('REDIS_URL') else 'not set (using default)'}")
    logger.info(f"REDIS_TOKEN: {'set' if os.environ.get('REDIS_TOKEN') else 'not set'}")
    logger.info(f"AZURE_OPENAI_ENDPOINT: {'set' if os.environ.get('AZURE_OPENAI_ENDPOINT') else 'not set'}")
    logger.info(f"AZURE_OPENAI_API_KEY: {'set' if os.environ.get('AZURE_OPENAI_API_KEY') else 'not set'}")
    logger.info(f"TRANSCRIPTION_API_KEY: {'set' if os.environ.get('TRANSCRIPTION_API_KEY') else 'not set'}")


if __name__ == "__main__":
    _log_environment()
    try:
        from clinicdesk.core.config import get_settings
        settings = get_settings()
    except ValueError as ve:
        logger.error(f"Configuration validation failed: {ve}")
        logger.error("Check REDIS_URL (redis://, rediss:// or unix://) and AZURE_OPENAI_ENDPOINT (https://)")
        sys.exit(1)

    port = int(os.environ.get("PORT", settings.port))
    host = os.environ.get("HOST", settings.host)
    logger.info(f"Starting application on {host}:{port}")

    try:
        uvicorn.run(
            "clinicdesk.app:app",
            host=host,
            port=port,
            workers=1,
            log_level=settings.logging.level.lower(),
            access_log=True,
            timeout_keep_alive=75,
            timeout_graceful_shutdown=30,
        )
    except KeyboardInterrupt:
        logger.info("Shutting down due to keyboard interrupt")
        sys.exit(0)
