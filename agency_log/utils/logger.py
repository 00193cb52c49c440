import logging
import logging.config

from agency_log.config import JournalConfig


def setup_logging(config: JournalConfig) -> logging.Logger:
    config.ensure_directories()
    logging.config.dictConfig(config.get_logging_config())
    logger = logging.getLogger("agency_log")
    logger.debug(f"Logging configured: level={config.log_level.value}, file={config.log_to_file}")
    return logger
