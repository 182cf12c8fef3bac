"""Token operation endpoints.

Each POST endpoint hands the raw Authorization header and body to the
pipeline orchestrator, so authentication always happens before the body is
even parsed. The signing wallet's answer is passed back untouched:

- wallet 200: the body (a tx hash) is returned as a JSON string
- any other wallet status: same status, same raw body
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from ethential.pipeline.errors import IssuanceError
from ethential.pipeline.orchestrator import PipelineOrchestrator
from ethential.pipeline.types import OperationKind, PipelineRun
from ethential.web.contracts.tokens import CredentialResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tokens"])

_ERROR_RESPONSES = {
    403: {"model": ErrorResponse, "description": "Missing or invalid bearer credential"},
    500: {"model": ErrorResponse, "description": "Malformed request, construction or relay failure"},
    502: {"model": ErrorResponse, "description": "Request headers could not be parsed"},
}


def get_orchestrator(request: Request) -> PipelineOrchestrator:
    """Orchestrator wired up by the application."""
    return request.app.state.orchestrator


def render_run(run: PipelineRun) -> Response:
    """Turn a finished pipeline run into the HTTP response."""
    if run.failed:
        return JSONResponse(status_code=run.failure.status_code, content=run.failure.to_payload())

    if run.kind is OperationKind.BALANCE_QUERY:
        return JSONResponse(status_code=200, content=run.balance)

    result = run.relay_result
    if result.is_success:
        # Sending the tx hash as a JSON string
        return JSONResponse(status_code=200, content=result.text)

    return Response(
        content=result.body,
        status_code=result.status_code,
        media_type=result.content_type or "text/plain",
    )


async def _handle(kind: OperationKind, request: Request, orchestrator: PipelineOrchestrator) -> Response:
    run = await orchestrator.run(
        kind,
        request.headers.getlist("authorization"),
        await request.body(),
    )
    return render_run(run)


@router.get(
    "/genToken/{client_id}",
    response_model=CredentialResponse,
    responses={500: {"model": ErrorResponse}},
)
async def gen_token(
    client_id: str,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Issue a bearer credential for a client."""
    try:
        issued = await orchestrator.issue_credential(client_id)
    except IssuanceError as e:
        logger.warning("Token issuance failed for %s: %s", client_id, e.details)
        return JSONResponse(status_code=e.status_code, content=e.to_payload())

    return CredentialResponse.from_issued(issued)


@router.post("/transferToken", responses=_ERROR_RESPONSES)
async def transfer_token(
    request: Request,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Build an unsigned ``transfer`` and relay it to the signing wallet.

    Body: ``{"toAddress", "tokenAmount", "from"}``.
    """
    return await _handle(OperationKind.TRANSFER, request, orchestrator)


@router.post("/approve", responses=_ERROR_RESPONSES)
async def approve(
    request: Request,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Build an unsigned ``approve`` for the manager contract and relay it.

    Body: ``{"tokenAmount", "pubkey"}``. The spender is always the configured
    manager contract.
    """
    return await _handle(OperationKind.APPROVE, request, orchestrator)


@router.post("/swap", responses=_ERROR_RESPONSES)
async def swap(
    request: Request,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Build an unsigned ``swap`` and relay it.

    Body: ``{"tokenAmount", "pubkey"}``.
    """
    return await _handle(OperationKind.SWAP, request, orchestrator)


@router.post("/getTokenBalance", responses=_ERROR_RESPONSES)
async def get_token_balance(
    request: Request,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Return the token balance of ``pubkey``. Nothing is relayed.

    Body: ``{"pubkey"}``.
    """
    return await _handle(OperationKind.BALANCE_QUERY, request, orchestrator)
