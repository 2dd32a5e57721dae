"""
Application entrypoint.

Configures logging and re-exports the FastAPI `app` from `jobtracker.api.main`.
"""

from jobtracker.config import get_config
from jobtracker.utils.logger import get_logger, setup_logging

config = get_config()
setup_logging(config)
logger = get_logger(__name__)

from jobtracker.api.main import app  # noqa: E402,F401
