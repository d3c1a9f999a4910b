import functools
import logging

from tenantkit.domain.errors import DomainError, PersistenceError

logger = logging.getLogger(__name__)


def translate_errors(func):
    """Wrap adapter-level failures into PersistenceError, keeping the cause chained"""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except DomainError:
            raise
        except Exception as exc:
            logger.error("%s failed: %s", func.__qualname__, exc)
            raise PersistenceError(f"{func.__qualname__} failed") from exc

    return wrapper
