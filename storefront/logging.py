"""
Logging configuration.
Seviye LOG_LEVEL ayarından gelir; servisler modül logger'ı (storefront.*) kullanır.
Production'da uvicorn erişim logu susturulur, istek satırı middleware tarafından zaten yazılır.
"""
import logging
import sys

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: int | str = logging.INFO, quiet_access_log: bool = False) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=DEFAULT_FORMAT, stream=sys.stdout, force=True)

    logging.getLogger("storefront").setLevel(level)
    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING if quiet_access_log else level)
