import logging
from time import perf_counter
from typing import Any, Dict, Optional


_LOGGER = logging.getLogger("brandgraphics")


def _dimensions(request_id: Optional[str], dimensions: Dict[str, Any]) -> Dict[str, Any]:
    dims: Dict[str, Any] = {"requestId": request_id} if request_id else {}
    dims.update({k: v for k, v in dimensions.items() if v is not None})
    return dims


def log(level: int, request_id: Optional[str], message: str, **dimensions: Any) -> None:
    dims = _dimensions(request_id, dimensions)
    try:
        _LOGGER.log(level, message, extra={"custom_dimensions": dims})
    except Exception:
        # Handlers that choke on extra= still get the dimensions inline
        _LOGGER.log(level, f"{message} | {dims}")


def info(request_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.INFO, request_id, message, **dimensions)


def warning(request_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.WARNING, request_id, message, **dimensions)


def error(request_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.ERROR, request_id, message, **dimensions)


def exception(request_id: Optional[str], message: str, **dimensions: Any) -> None:
    """Log at ERROR with the active traceback attached."""
    _LOGGER.exception(message, extra={"custom_dimensions": _dimensions(request_id, dimensions)})


def elapsed_ms(start: float) -> int:
    """Milliseconds since a perf_counter() reading."""
    return int((perf_counter() - start) * 1000)
