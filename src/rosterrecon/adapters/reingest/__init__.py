"""Document reingestion adapter."""

from __future__ import annotations

from .client import HttpDocumentReingester
from .schema import ReingestErrorResponse, ReingestResponse

__all__ = ["HttpDocumentReingester", "ReingestErrorResponse", "ReingestResponse"]
