"""Translation of domain failures into HTTP responses.

Protean's own exceptions (validation errors, missing objects) use the stock
handlers from ``protean.integrations.fastapi``. Marketplace errors answer with
their own status code and a ``{"error", "detail", "context"}`` body.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from marketplace.shared.errors import MarketplaceError
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    logger.info("Request rejected", path=request.url.path, error=exc.code, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
