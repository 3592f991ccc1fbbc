"""Pydantic models for the HTTP status endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

WorkflowStateName = Literal["idle", "running", "exhausted"]


class Health(BaseModel):
    status: str


class WorkflowStatus(BaseModel):
    workflow: str | None = None
    state: WorkflowStateName
    cursor: int
    length: int
