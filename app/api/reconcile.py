"""Reconciliation API endpoints."""

import logging
from typing import Annotated, Any, NoReturn

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, Field

from app.services.errors import ReconciliationError
from app.services.reconcile import ReconciliationOrchestrator, ReconciliationResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recon", tags=["reconciliation"])


class ReconcileRequest(BaseModel):
    """JSON reconciliation request."""

    bank_transactions: list[dict[str, Any]]
    ledger_transactions: list[dict[str, Any]]
    company_name: str | None = None


class ReconciliationStats(BaseModel):
    """Summary counts for a run."""

    total_bank_transactions: int
    total_ledger_transactions: int
    matched_transactions: int
    unmatched_transactions: int


class ReconcileResponse(BaseModel):
    """Reconciliation results plus the upload file."""

    success: bool
    company_name: str
    comparison_results: list[dict[str, Any]]
    csv_content: str
    stats: ReconciliationStats


class KnownVendorResponse(BaseModel):
    """Known-vendor rule."""

    pattern: str
    vendor_id: str
    vendor_name: str
    gl_account: str
    check_name: str
    reserved_check_numbers: list[str] = Field(default_factory=list)


def get_orchestrator() -> ReconciliationOrchestrator:
    """Fresh orchestrator per request; runs share no state."""
    return ReconciliationOrchestrator()


def _to_response(result: ReconciliationResult) -> ReconcileResponse:
    return ReconcileResponse(**result.to_dict())


def _raise_http(error: ReconciliationError) -> NoReturn:
    if error.status_code >= 500:
        logger.error(f"Reconciliation failed: {error.message}")
    else:
        logger.warning(f"Rejected reconciliation request: {error.message}")
    raise HTTPException(status_code=error.status_code, detail=error.message) from error


@router.post("/compare", response_model=ReconcileResponse)
async def compare(
    orchestrator: Annotated[ReconciliationOrchestrator, Depends(get_orchestrator)],
    bankData: Annotated[str | None, Form()] = None,  # noqa: N803 - form field name
    glFile: Annotated[UploadFile | None, File()] = None,  # noqa: N803 - form field name
    companyName: Annotated[str | None, Form()] = None,  # noqa: N803 - form field name
):
    """Reconcile a bank batch (JSON form field) against an uploaded GL file."""
    if not bankData or glFile is None:
        raise HTTPException(status_code=400, detail="Missing bank data or GL file")

    content = await glFile.read()
    logger.info(f"Received GL file {glFile.filename!r} ({len(content)} bytes)")

    try:
        result = orchestrator.reconcile_upload(bankData, content, companyName)
    except ReconciliationError as e:
        _raise_http(e)

    return _to_response(result)


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile(
    request: ReconcileRequest,
    orchestrator: Annotated[ReconciliationOrchestrator, Depends(get_orchestrator)],
):
    """Reconcile bank and ledger batches supplied as JSON."""
    try:
        result = orchestrator.reconcile(
            request.bank_transactions,
            request.ledger_transactions,
            request.company_name,
        )
    except ReconciliationError as e:
        _raise_http(e)

    return _to_response(result)


@router.get("/rules", response_model=list[KnownVendorResponse])
async def list_rules(
    orchestrator: Annotated[ReconciliationOrchestrator, Depends(get_orchestrator)],
):
    """List the active known-vendor rules."""
    return [KnownVendorResponse(**rule.to_dict()) for rule in orchestrator.rules.known_vendors]
