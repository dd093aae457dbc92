"""Shared response models for endpoints that return simple JSON dicts."""

from typing import Literal

from pydantic import BaseModel


class DetailResponse(BaseModel):
    detail: str


class HealthResponse(BaseModel):
    status: Literal["ok", "stopping"]
