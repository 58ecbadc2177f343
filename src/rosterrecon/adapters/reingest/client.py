"""HTTP client for the document reingestion service."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from rosterrecon.adapters.http_resilience import ResilientClient
from rosterrecon.config import ReingestConfig, get_reingest_config
from rosterrecon.domain.errors import InvalidArgumentError, UpstreamError
from rosterrecon.domain.model import ReingestResult

from .schema import ReingestErrorResponse, ReingestResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from rosterrecon.config import ResilienceConfig

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _error_message(response: httpx.Response) -> str:
    try:
        return ReingestErrorResponse.model_validate(response.json()).message
    except (ValueError, ValidationError):
        return response.text or response.reason_phrase


@dataclass(slots=True)
class HttpDocumentReingester:
    config: ReingestConfig = field(default_factory=get_reingest_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def reingest_document(self, document_id: str) -> ReingestResult:
        if not document_id:
            raise InvalidArgumentError("A document id is required for reingestion")
        return asyncio.run(self._reingest_async(document_id))

    async def _reingest_async(self, document_id: str) -> ReingestResult:
        url = f"{self.config.base_url}/reingest/{quote(document_id, safe='')}"
        async with self.client_factory(self.config.resilience) as client:
            try:
                response = await client.post(url)
            except httpx.HTTPError as exc:
                raise UpstreamError(f"Reingestion request for {document_id} failed: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            log.error(
                "Reingestion of %s returned %s: %s", document_id, response.status_code, message
            )
            raise UpstreamError(
                f"Reingestion of {document_id} failed with {response.status_code}: {message}"
            )

        try:
            payload = ReingestResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UpstreamError(f"Unexpected reingestion response for {document_id}") from exc

        return ReingestResult(
            records_ingested=payload.records_ingested,
            lambda_invocation_count=payload.lambda_invocation_count,
        )


if TYPE_CHECKING:
    from rosterrecon.domain.ports.collaborators import DocumentReingester

    _reingester_check: DocumentReingester = HttpDocumentReingester()
