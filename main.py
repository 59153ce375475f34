import uvicorn

from core.config import settings
from core.logger import setup_logging, logger


def main():
    setup_logging()
    logger.info("Server starting", host=settings.HOST, port=settings.PORT,
                gemini_key_configured=bool(settings.GEMINI_API_KEY))
    uvicorn.run("api.main:app", host=settings.HOST, port=settings.PORT, log_level="info")


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Application stopped.")
