import logging
from typing import Awaitable, Callable

from taskboard.errors import PersistenceError, TaskBoardError, ValidationError
from taskboard.models import ActionResult

logger = logging.getLogger(__name__)


async def run_operation(
    name: str,
    operation: Callable[[], Awaitable[ActionResult]],
) -> ActionResult:
    """
    Operation boundary: typed failures become failure results, anything
    unexpected is logged and reported as a PersistenceError. Nothing is retried.
    """
    try:
        return await operation()
    except TaskBoardError as e:
        logger.warning(f"{name} failed: {e}")
        return ActionResult.failure(e)
    except Exception as e:
        logger.exception(f"{name} failed unexpectedly")
        return ActionResult.failure(PersistenceError(f"Failed to {name.replace('_', ' ')}: {e}"))


def require_id(value, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid {label} ID")
    return value.strip()
