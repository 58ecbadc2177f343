"""Pydantic models for the reingestion service payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


class ReingestResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    records_ingested: NonNegativeInt = Field(alias="recordsIngested")
    lambda_invocation_count: NonNegativeInt = Field(alias="lambdaInvocationCount")


class ReingestErrorResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str = "Unknown reingestion error"
