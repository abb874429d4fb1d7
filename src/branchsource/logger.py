import logging
from typing import Optional

import notifiers.logging

from branchsource import config

ALERT_FORMAT = "[branchsource] %(levelname)s %(module)s: %(message)s"


def add_alert_handler(logger: logging.Logger) -> Optional[logging.Handler]:
    """Forward scan problems (dropped heads, failed fetches) to Telegram.

    Nothing is attached unless ``TELEGRAM_TOKEN`` is configured.
    """
    if config.TELEGRAM_TOKEN is None:
        return None
    handler = notifiers.logging.NotificationHandler(
        "telegram",
        defaults={
            "token": config.TELEGRAM_TOKEN,
            "chat_id": config.TELEGRAM_CHAT_ID,
        },
    )
    handler.setLevel(config.ALERT_LEVEL)
    handler.setFormatter(logging.Formatter(ALERT_FORMAT))
    logger.addHandler(handler)
    logger.debug(
        "Sending %s alerts to chat %s",
        logging.getLevelName(config.ALERT_LEVEL),
        config.TELEGRAM_CHAT_ID,
    )
    return handler
