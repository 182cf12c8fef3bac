"""Pipeline orchestrator: auth -> build -> construct -> relay for one request.

Every token operation runs through the same state machine:

    START -> AUTHENTICATING -> BUILDING -> CONSTRUCTING -> RELAYING -> DONE
                                                       \\-> DONE (balance query)

Any stage may end the run in the absorbing FAILED state. The run never
retries a stage and never contacts the signing wallet once an earlier stage
has failed. Runs share nothing but the immutable configuration and the
collaborators, so any number of them can be in flight at once.
"""

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError

from ethential.auth.base import CredentialVerifier
from ethential.config import PipelineConfig
from ethential.construction.base import TxConstructionClient
from ethential.pipeline.errors import (
    ConstructionError,
    HeaderParseError,
    InvalidCredential,
    MalformedRequest,
    NoCredentialSupplied,
    PipelineError,
)
from ethential.pipeline.intent import assemble_intent
from ethential.pipeline.params import build_parameters, sender_for
from ethential.pipeline.relay import RelayDispatcher
from ethential.pipeline.types import (
    IssuedCredential,
    OperationKind,
    PipelineRun,
    PipelineState,
    RequestFields,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

RequestBody = Union[bytes, str, Mapping, RequestFields, None]
AuthorizationHeader = Union[str, Sequence[str], None]


def extract_credential(authorization: AuthorizationHeader) -> str:
    """Pull the bearer credential out of the Authorization header value(s).

    Raises:
        HeaderParseError: If the header was sent more than once
        NoCredentialSupplied: If there is no ``Bearer `` credential
    """
    if authorization is None:
        raise NoCredentialSupplied()

    if isinstance(authorization, str):
        values = [authorization]
    else:
        values = list(authorization)

    if len(values) > 1:
        raise HeaderParseError(f"expected one Authorization header, got {len(values)}")
    if not values or not values[0].startswith(BEARER_PREFIX):
        raise NoCredentialSupplied()

    credential = values[0][len(BEARER_PREFIX):].strip()
    if not credential:
        raise NoCredentialSupplied()
    return credential


def parse_fields(body: RequestBody) -> RequestFields:
    """Parse a request body into RequestFields.

    An empty body parses to empty fields, so the builder reports exactly
    which field is missing.

    Raises:
        MalformedRequest: If the body is not a JSON object of string fields
    """
    if isinstance(body, RequestFields):
        return body

    if body is None:
        data: Any = {}
    elif isinstance(body, (bytes, str)):
        if not body.strip():
            data = {}
        else:
            try:
                data = json.loads(body)
            except ValueError as e:
                raise MalformedRequest("Invalid JSON body", details=str(e)) from e
    else:
        data = body

    if not isinstance(data, Mapping):
        raise MalformedRequest("Request body must be a JSON object")

    try:
        return RequestFields.model_validate(dict(data))
    except ValidationError as e:
        raise MalformedRequest("Invalid request fields", details=str(e)) from e


class PipelineOrchestrator:
    """Runs token operations through the transaction pipeline."""

    def __init__(
        self,
        config: PipelineConfig,
        verifier: CredentialVerifier,
        construction: TxConstructionClient,
        dispatcher: RelayDispatcher,
    ):
        self.config = config
        self.verifier = verifier
        self.construction = construction
        self.dispatcher = dispatcher

    async def issue_credential(self, client_id: str) -> IssuedCredential:
        """Issue a bearer credential for ``client_id``.

        Raises:
            IssuanceError: If the verifier cannot issue one
        """
        return await self.verifier.issue(client_id)

    async def run(
        self,
        kind: OperationKind,
        authorization: AuthorizationHeader,
        body: RequestBody,
    ) -> PipelineRun:
        """Run one operation end to end.

        Args:
            kind: Operation requested
            authorization: Authorization header value(s) as received
            body: Raw or parsed request body

        Returns:
            The finished run, either DONE or FAILED with ``run.failure`` set
        """
        run = PipelineRun(kind=kind, state=PipelineState.START)

        try:
            credential = extract_credential(authorization)

            self._advance(run, PipelineState.AUTHENTICATING)
            if not await self.verifier.verify(credential):
                raise InvalidCredential()

            self._advance(run, PipelineState.BUILDING)
            run.fields = parse_fields(body)
            run.parameters = tuple(
                build_parameters(kind, run.fields, self.config.manager_address)
            )
            run.intent = assemble_intent(sender_for(kind, run.fields), run.parameters)

            self._advance(run, PipelineState.CONSTRUCTING)
            if not kind.relays:
                run.balance = await self._construct_balance(credential, run)
                self._advance(run, PipelineState.DONE)
                return run

            run.blob = await self._construct_tx(credential, run)

            self._advance(run, PipelineState.RELAYING)
            run.relay_result = await self.dispatcher.relay(run.blob, self.config.wallet_uri)
            self._advance(run, PipelineState.DONE)

        except PipelineError as e:
            self._fail(run, e)

        return run

    async def _construct_tx(self, credential: str, run: PipelineRun) -> str:
        try:
            blob = await self.construction.build_tx(
                run.kind, credential, run.intent, self.config.chain_id
            )
        except httpx.HTTPError as e:
            raise ConstructionError(str(e)) from e

        if not blob:
            raise ConstructionError("construction backend returned an empty transaction")
        return blob

    async def _construct_balance(self, credential: str, run: PipelineRun) -> int:
        try:
            return await self.construction.get_balance(
                credential, run.intent, self.config.chain_id
            )
        except httpx.HTTPError as e:
            raise ConstructionError(str(e)) from e

    @staticmethod
    def _advance(run: PipelineRun, state: PipelineState) -> None:
        logger.debug("%s: %s -> %s", run.kind.value, run.state.value, state.value)
        run.state = state
        run.history.append(state)

    @staticmethod
    def _fail(run: PipelineRun, error: PipelineError) -> None:
        logger.warning(
            "%s failed while %s: %s (%s)",
            run.kind.value,
            run.state.value,
            error.code,
            error.details or error.message,
        )
        run.failure = error
        run.state = PipelineState.FAILED
        run.history.append(PipelineState.FAILED)
