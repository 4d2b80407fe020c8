"""Editor identity carried by the session token."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel


class Editor(BaseModel):
    """An authenticated editor acting on behalf of one tenant."""

    id: UUID
    tenant_id: UUID
