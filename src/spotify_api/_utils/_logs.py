import logging
from typing import Optional

logger = logging.getLogger("spotify_api")

_HANDLER_NAME = "spotify_api"


def setup_logging(should_debug: Optional[bool] = None) -> None:
    """Attach a stream handler to the package logger.

    Calling it again only adjusts the level, so constructing several clients
    does not duplicate output.
    """
    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)

    logger.setLevel(logging.DEBUG if should_debug else logging.INFO)
