from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
import structlog


class ServiceError(Exception):
    """Base for failures a caller is expected to handle."""

    status_code = 500
    kind = "error"

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "detail": self.detail}


class NotFoundError(ServiceError):
    status_code = 404
    kind = "not_found"


class ValidationError(ServiceError):
    status_code = 400
    kind = "validation_error"


class ConflictError(ServiceError):
    status_code = 409
    kind = "conflict"


class InsufficientStockError(ServiceError):
    status_code = 400
    kind = "insufficient_stock"

    def __init__(self, available_quantity: int, requested_quantity: int, product_id: Optional[int] = None):
        super().__init__(
            "Insufficient stock",
            detail={
                "available_quantity": available_quantity,
                "requested_quantity": requested_quantity,
                "product_id": product_id,
            },
        )
        self.available_quantity = available_quantity
        self.requested_quantity = requested_quantity
        self.product_id = product_id


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    log = structlog.get_logger()
    if exc.status_code >= 500:
        log.error("service_error", kind=exc.kind, message=exc.message, path=request.url.path)
    else:
        log.info("request_rejected", kind=exc.kind, message=exc.message, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
