"""
Lead capture payload models
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Wire shape of the single outbound persistence request
LEAD_PAYLOAD_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "canvasId": {"type": ["string", "null"]},
        "name": {"type": ["string", "null"]},
        "email": {"type": ["string", "null"]},
        "phone": {"type": ["string", "null"]},
        "points": {"type": "integer", "minimum": 0},
        "createdDate": {"type": "string", "minLength": 1},
    },
    "required": ["canvasId", "name", "email", "phone", "points", "createdDate"],
    "additionalProperties": False,
}


class LeadSubmission(BaseModel):
    """Raw contact fields entered in the lead form"""

    name: str = Field(default="")
    email: str = Field(default="")
    phone: str = Field(default="")

    @field_validator("name", "email", "phone", mode="before")
    @classmethod
    def strip_value(cls, v):
        if v is None:
            return ""
        return str(v).strip()


class LeadPayload(BaseModel):
    """Payload persisted once per session on completion"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    canvas_id: Optional[str] = Field(default=None, alias="canvasId")
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    points: int = Field(default=0, ge=0)
    created_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="createdDate"
    )

    @classmethod
    def from_submission(
        cls,
        submission: Optional[LeadSubmission],
        points: int,
        canvas_id: Optional[str] = None,
        created_date: Optional[datetime] = None,
    ) -> "LeadPayload":
        fields: Dict[str, Any] = {"canvas_id": canvas_id, "points": points}
        if submission is not None:
            # Empty strings travel as null
            fields["name"] = submission.name or None
            fields["email"] = submission.email or None
            fields["phone"] = submission.phone or None
        if created_date is not None:
            fields["created_date"] = created_date
        return cls(**fields)

    def to_wire(self) -> Dict[str, Any]:
        created = self.created_date
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        created = created.astimezone(timezone.utc)
        return {
            "canvasId": self.canvas_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "points": self.points,
            "createdDate": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        }
