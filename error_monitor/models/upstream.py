"""Data models for n8n and Close CRM lookups.

Upstream payloads carry many more fields than the dashboard reads; every
model keeps unknown fields so they are passed through untouched.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class UpstreamModel(BaseModel):
    """Base for upstream payloads."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class N8NWorkflow(UpstreamModel):
    """Workflow definition as returned by the n8n public API."""

    id: str
    name: str
    active: bool = False
    nodes: List[Any] = []
    connections: Any = None
    settings: Optional[Any] = None
    staticData: Optional[Any] = None
    tags: Optional[List[Any]] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class CloseCustomField(UpstreamModel):
    """Lead or opportunity custom field definition."""

    id: str
    name: str
    type: str
    accepts_multiple_values: Optional[bool] = None
    editable_by: Optional[List[str]] = None
    required: Optional[bool] = None
    choices: Optional[List[Any]] = None
    converting_to_type: Optional[str] = None


class CloseUser(UpstreamModel):
    """Close CRM user."""

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None
    role_id: Optional[str] = None
    role_name: Optional[str] = None


class CloseStatus(UpstreamModel):
    """Lead or opportunity status."""

    id: str
    label: str
    type: Optional[str] = None
    organization_id: Optional[str] = None
