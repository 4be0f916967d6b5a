# services/logger_config.py
import logging
from logging.handlers import RotatingFileHandler
import os
from config import settings

# Client libraries that log one INFO line per HTTP request; the cold-start
# build makes one embedding request per chunk.
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "urllib3", "sentence_transformers")


def setup_logging() -> logging.Logger:
    """
    Sets up logging for the docs assistant.
    Logs are written to a file and also printed to the console.
    Per-request chatter from HTTP/model clients is raised to WARNING.
    """
    logger = logging.getLogger(settings.LOGGER_NAME)

    # Avoid adding duplicate handlers if this function is called multiple times
    if logger.handlers:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
    )

    # File Handler: Rotates logs to prevent large files.
    try:
        log_dir = os.path.dirname(settings.LOG_FILE_PATH)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            settings.LOG_FILE_PATH,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        print(f"Error setting up file logger: {e}")

    logger.propagate = True

    # Console Handler: For immediate feedback during development.
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.info(f"Logging configured at {logging.getLevelName(level)}; corpus pages: {len(settings.DOC_PAGES)}")
    return logger
