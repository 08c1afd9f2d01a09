"""HTTP adapter: maps requests onto PaymentService and error kinds onto status codes.

Routes:
    GET  /api/payments                                   list, newest first
    POST /api/payments                                   create
    POST /api/payments/simulate-confirmation/{id}        confirm

Start with: uvicorn payment_lifecycle.entrypoints.api:create_app --factory
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from payment_lifecycle.application.dtos import ErrorKind, ServiceResult
from payment_lifecycle.application.service import PaymentService
from payment_lifecycle.config import Settings, configure_logging, get_settings
from payment_lifecycle.entrypoints.bootstrap import build_service

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.STORAGE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class CreatePaymentRequest(BaseModel):
    """Request body for creating a payment.

    Missing fields fall through to domain validation; bodies that fail to
    parse (non-numeric amount, null customerId) are rejected by the
    request validation handler. Both come back as 400.
    """

    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(default="", alias="customerId")
    amount: Decimal = Decimal(0)


router = APIRouter(prefix="/api/payments", tags=["payments"])


def get_service(request: Request) -> PaymentService:
    return request.app.state.payment_service


def _unwrap(result: ServiceResult) -> Any:
    if not result.ok:
        raise HTTPException(status_code=ERROR_STATUS[result.error], detail=result.message)
    return result.value


@router.get("")
def list_payments(
    service: Annotated[PaymentService, Depends(get_service)],
) -> list[dict[str, Any]]:
    """List all payments, most recent first."""
    return [view.to_dict() for view in _unwrap(service.list_payments())]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_payment(
    body: CreatePaymentRequest,
    service: Annotated[PaymentService, Depends(get_service)],
) -> dict[str, Any]:
    """Create a pending payment."""
    return _unwrap(service.create_payment(body.customer_id, body.amount)).to_dict()


@router.post("/simulate-confirmation/{payment_id}")
def confirm_payment(
    payment_id: str,
    service: Annotated[PaymentService, Depends(get_service)],
) -> dict[str, Any]:
    """Confirm a pending payment; 409 if it was already confirmed."""
    return _unwrap(service.confirm_payment(payment_id)).to_dict()


def create_app(
    service: PaymentService | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        service: Pre-built service (tests inject one); built from settings if omitted.
        settings: Defaults to get_settings().
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report unparseable input as a validation error, not FastAPI's 422."""
        return JSONResponse(
            status_code=ERROR_STATUS[ErrorKind.VALIDATION],
            content={"detail": jsonable_encoder(exc.errors())},
        )

    app.state.payment_service = service or build_service(settings)
    app.include_router(router)
    return app
