from .app.main import audit, commits, insights

__all__ = [
    "audit",
    "commits",
    "insights",
]

# stdlib logging defaults: attach NullHandler to prevent 'No handler' warnings
import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
