import logging
import time

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from api.metrics import REQUESTS_TOTAL, REQUEST_LATENCY_SECONDS
from taskboard.errors import ERROR_STATUS
from taskboard.models import ActionResult

logger = logging.getLogger(__name__)


def observe(endpoint: str, status: str, start: float) -> None:
    # Prometheus counters (best-effort)
    try:
        REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
    except Exception:
        logger.debug("Could not record request metrics", exc_info=True)


def to_response(result: ActionResult, endpoint: str, start: float) -> JSONResponse:
    """Serialize an ActionResult; failures map to the HTTP status of their kind."""
    if result.success:
        status_code = 200
        observe(endpoint, "ok", start)
    else:
        status_code = ERROR_STATUS.get(result.error_kind, 500)
        observe(endpoint, result.error_kind or "error", start)

    return JSONResponse(status_code=status_code, content=jsonable_encoder(result))
