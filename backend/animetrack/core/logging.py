"""
Process-wide logging setup. Called once from the application factory.
"""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level_name: str) -> None:
    """Install a root handler at *level_name* (falls back to INFO)."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # SQL echo is driven by the engine; keep httpx request lines at WARNING
    logging.getLogger("httpx").setLevel(logging.WARNING)
