from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RunStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.ERROR)


class WorkItem(BaseModel):
    """One inbound business record to be replayed against the portal.

    Only `ticket`, `status`, `last_error` and `updated_at` are written by the engine.
    """

    id: int | str
    tax_id: str = ""
    company: str = ""
    city: str = ""
    contact_name: str = ""
    phone: str = ""
    email: str = ""
    client_type: str = ""
    description: str = ""
    contact_channel: str = ""
    assigned_agent: str = ""
    sales_line: str = ""

    ticket: str = ""
    status: RunStatus = RunStatus.PENDING
    last_error: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class IntakeRecord(BaseModel):
    """Payload accepted by the intake endpoint, normalized before storage."""

    tax_id: str = ""
    company: str = ""
    city: str = ""
    contact_name: str = ""
    phone: str = ""
    email: str = ""
    client_type: str = ""
    description: str = ""
    contact_channel: str = ""
    assigned_agent: str = ""
    sales_line: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v

    def normalized(self) -> dict[str, str]:
        return {
            "tax_id": self.tax_id.strip(),
            "company": self.company.strip().upper(),
            "city": self.city.strip(),
            "contact_name": self.contact_name.strip().upper(),
            "phone": self.phone.strip().replace(" ", ""),
            "email": self.email.strip().lower(),
            "client_type": self.client_type.strip(),
            "description": self.description.strip().upper(),
            "contact_channel": self.contact_channel.strip(),
            "assigned_agent": self.assigned_agent.strip().upper(),
            "sales_line": self.sales_line.strip(),
        }
