from datetime import datetime
from typing import Any, Dict, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


class VM(BaseModel):
    """
    Canonical VM record shared by every provider adapter.

    A record without a private_ip is not ready, whatever its state says.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    password: str = Field(..., alias="pass")
    host: str
    private_ip: Optional[str] = None
    state: Optional[str] = None
    tags: Set[str] = Field(default_factory=set)
    creation_date: Optional[datetime] = None
    original_name: Optional[str] = Field(None, alias="originalName")
    provider: str
    large: bool = False
    region: str

    @property
    def is_ready(self) -> bool:
        return bool(self.private_ip)

    def to_record(self) -> Dict[str, Any]:
        """Dump using the wire-level field names (pass, originalName)."""
        return self.model_dump(by_alias=True)


class ActionResult(BaseModel):
    """Outcome of a best-effort operation. Failures are reported, never raised."""

    action: str
    vm_id: str
    ok: bool = True
    error: Optional[str] = None
