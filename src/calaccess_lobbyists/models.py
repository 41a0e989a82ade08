from __future__ import annotations

from dataclasses import dataclass, field, fields


@dataclass
class RelationshipRecord:
    entity_name: str  # employer / client organization
    type: str  # e.g. "EMPLOYER", "LOBBYING FIRM"
    effective_date: str  # e.g. "01/01/2023"
    termination_date: str | None = None
    entity_id: str | None = None  # not resolved from the page

    def to_dict(self) -> dict:
        data = {
            "entityName": self.entity_name,
            "entityId": self.entity_id,
            "type": self.type,
            "effectiveDate": self.effective_date,
            "terminationDate": self.termination_date,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class LobbyistDetail:
    """Everything the detail page contributes; id/name come from the index."""

    address: str | None = None
    phone: str | None = None
    email: str | None = None
    mailing_address: str | None = None
    registration_date: str | None = None
    ethics_course_completion_date: str | None = None
    status: str | None = None
    relationships: list[RelationshipRecord] = field(default_factory=list)


@dataclass
class LobbyistRecord:
    id: str
    name: str
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    mailing_address: str | None = None
    registration_date: str | None = None
    ethics_course_completion_date: str | None = None
    status: str | None = None
    relationships: list[RelationshipRecord] = field(default_factory=list)

    def merge(self, detail: LobbyistDetail) -> None:
        """Assign every detail field onto this record (absent values included)."""
        for f in fields(detail):
            setattr(self, f.name, getattr(detail, f.name))

    def to_dict(self) -> dict:
        """Serialize with camelCase keys; ``None`` fields are left out entirely."""
        data = {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "mailingAddress": self.mailing_address,
            "registrationDate": self.registration_date,
            "ethicsCourseCompletionDate": self.ethics_course_completion_date,
            "status": self.status,
            "relationships": [r.to_dict() for r in self.relationships],
        }
        return {k: v for k, v in data.items() if v is not None}
