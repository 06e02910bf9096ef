"""HTTP boundary — FastAPI application exposing ``POST /deposit``.

The deposit is a multipart/form-data request.  The manifest travels in the
``manifest`` field; every other field is an uploaded part named after a
manifest id.  Repeating a field name submits more than one file for that
id, which the integrity phase rejects.

Run with: ``depositgate serve`` or ``uvicorn depositgate.api.app:create_app --factory``
"""

from __future__ import annotations

import io
import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile

from depositgate import __version__
from depositgate.api.dispatch import dispatch_outcome
from depositgate.config import GateSettings, enforce_production_constraints
from depositgate.core.validator import DepositValidator
from depositgate.models.deposit import UploadBundle

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Deposit"])


def bundle_from_form(form: FormData) -> UploadBundle:
    """Turn every form field into an uploaded part, keeping submission order.

    Plain text fields are treated as parts whose content is the UTF-8
    encoded value.
    """
    bundle = UploadBundle()
    for name, value in form.multi_items():
        if isinstance(value, UploadFile):
            bundle.add(name, value.file)
        else:
            bundle.add(name, io.BytesIO(value.encode("utf-8")))
    return bundle


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": __version__}


@router.post(
    "/deposit",
    responses={
        200: {"description": "Deposit satisfies its manifest"},
        400: {"description": "Deposit rejected; body lists every violation"},
    },
)
async def deposit(request: Request) -> JSONResponse:
    """Validate an uploaded deposit against its manifest."""
    settings: GateSettings = request.app.state.settings
    validator: DepositValidator = request.app.state.validator

    form = await request.form(
        max_files=settings.max_upload_parts,
        max_fields=settings.max_upload_parts,
    )
    try:
        bundle = bundle_from_form(form)
        logger.info("Deposit received with %d part names", len(bundle))
        # Reading and hashing the parts is blocking file I/O.
        outcome = await run_in_threadpool(validator.submit, bundle)
    finally:
        await form.close()

    response = dispatch_outcome(outcome)
    return JSONResponse(status_code=response.status_code, content=response.body)


def create_app(
    settings: GateSettings | None = None,
    validator: DepositValidator | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Raises ``GateConfigError`` if the settings are unusable in the
    configured environment.
    """
    settings = settings or GateSettings()
    enforce_production_constraints(settings)

    app = FastAPI(
        title="depositgate",
        version=__version__,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.validator = validator or DepositValidator(settings=settings)
    app.include_router(router)
    return app
