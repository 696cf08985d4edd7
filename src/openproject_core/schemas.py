"""Pydantic models for OpenProject API v3 resources and the flat records built from them.

OpenProject speaks HAL+JSON: related resources and permitted operations live in
`_links`, inlined resources in `_embedded`, collections in `_embedded.elements`.
Only the fields the adapter reads are modeled; everything else is ignored.
"""
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ResponseShapeError(Exception):
    """Raised when a remote document lacks a field the adapter depends on."""


class Link(BaseModel):
    """A hypermedia reference. `href` is null when the relation is unset."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    href: Optional[str] = None
    title: Optional[str] = None
    templated: bool = False
    method: Optional[str] = None


class HalResource(BaseModel):
    """Base for resources carrying `_links` and `_embedded` maps."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    links: dict[str, Any] = Field(default_factory=dict, alias="_links")
    embedded: dict[str, Any] = Field(default_factory=dict, alias="_embedded")

    def get_link(self, name: str) -> Optional[Link]:
        """Return the named link, or None when absent or not a single link object."""
        raw = self.links.get(name)
        if not isinstance(raw, dict):
            return None
        return Link.model_validate(raw)

    def get_embedded_name(self, name: str) -> Optional[str]:
        """Name of an embedded resource, falling back to the title of the matching link."""
        embedded = self.embedded.get(name)
        if isinstance(embedded, dict) and embedded.get("name"):
            return embedded["name"]
        link = self.get_link(name)
        if link is not None and link.href is not None and link.title:
            return link.title
        return None


class Status(HalResource):
    """A work package status. Immutable snapshot, fetched fresh per call."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: int
    name: str
    is_closed: bool = Field(False, alias="isClosed")
    is_default: bool = Field(False, alias="isDefault")
    position: Optional[int] = None

    @property
    def self_href(self) -> Optional[str]:
        link = self.get_link("self")
        return link.href if link else None


class FormattedText(BaseModel):
    model_config = ConfigDict(extra="ignore")

    format: Optional[str] = None
    raw: Optional[str] = None
    html: Optional[str] = None


class WorkPackage(HalResource):
    """A work package as returned by GET/PATCH /work_packages/{id}."""

    id: int
    lock_version: int = Field(..., alias="lockVersion")
    subject: str = ""
    description: Optional[FormattedText] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
    start_date: Optional[str] = Field(None, alias="startDate")
    due_date: Optional[str] = Field(None, alias="dueDate")
    estimated_time: Optional[str] = Field(None, alias="estimatedTime")
    percentage_done: Optional[int] = Field(None, alias="percentageDone")

    @property
    def status_name(self) -> Optional[str]:
        return self.get_embedded_name("status")

    @property
    def project_id(self) -> Optional[int]:
        project = self.embedded.get("project")
        if isinstance(project, dict) and isinstance(project.get("id"), int):
            return project["id"]
        return None


class Attachment(HalResource):
    id: int
    file_name: str = Field(..., alias="fileName")
    file_size: Optional[int] = Field(None, alias="fileSize")
    content_type: Optional[str] = Field(None, alias="contentType")

    @property
    def download_link(self) -> Optional[Link]:
        """Preferred download link: the static location, then the API content endpoint."""
        return self.get_link("staticDownloadLocation") or self.get_link("downloadLocation")


def _elements(resource: HalResource) -> list[dict]:
    elements = resource.embedded.get("elements", [])
    if not isinstance(elements, list):
        raise ResponseShapeError("Collection has no _embedded.elements list")
    return elements


class StatusCatalog(HalResource):
    """The collection returned by GET /statuses, in remote order."""

    total: Optional[int] = None

    @property
    def statuses(self) -> list[Status]:
        return [parse_resource(Status, element, "status") for element in _elements(self)]

    @property
    def names(self) -> list[str]:
        return [status.name for status in self.statuses]


class AttachmentCollection(HalResource):
    total: Optional[int] = None

    @property
    def attachments(self) -> list[Attachment]:
        return [parse_resource(Attachment, element, "attachment") for element in _elements(self)]


def parse_resource(model: type[BaseModel], document: Any, what: str) -> Any:
    """Validate a decoded JSON document, raising ResponseShapeError on mismatch."""
    try:
        return model.model_validate(document)
    except ValidationError as e:
        missing = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ResponseShapeError(f"Unexpected {what} document (invalid or missing: {missing})") from e


# ============================================================================
# Flat records handed back to callers
# ============================================================================

class WorkPackageRecord(BaseModel):
    """Flat projection of a work package.

    Absent values stay None internally; placeholders are applied by to_display().
    """

    id: int
    subject: str
    status: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[str] = None
    assignee: Optional[str] = None
    project: Optional[str] = None
    project_id: Optional[int] = None
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    start_date: Optional[str] = None
    due_date: Optional[str] = None
    estimated_time: Optional[str] = None
    percentage_done: Optional[int] = None
    lock_version: int
    statuses: list[str] = Field(default_factory=list)

    def to_display(self) -> dict:
        """Caller-facing dict with a placeholder for every absent field."""
        return {
            "id": self.id,
            "subject": self.subject,
            "status": self.status or "Unknown status",
            "type": self.type or "Unknown type",
            "priority": self.priority or "Unknown priority",
            "assignee": self.assignee or "Unassigned",
            "project": self.project or "Unknown project",
            "projectId": self.project_id or 0,
            "description": self.description or "No description",
            "createdAt": self.created_at or "Unknown",
            "updatedAt": self.updated_at or "Unknown",
            "startDate": self.start_date or "No start date",
            "dueDate": self.due_date or "No due date",
            "estimatedTime": self.estimated_time or "No estimate",
            "percentageDone": self.percentage_done or 0,
            "lockVersion": self.lock_version,
            "statuses": list(self.statuses),
        }


OutcomeKind = Literal["downloaded", "skipped", "failed"]


class DownloadOutcome(BaseModel):
    """Result of processing a single attachment."""

    attachment_id: int
    file_name: str
    outcome: OutcomeKind
    reason: str
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    content_type: Optional[str] = None


class DownloadReport(BaseModel):
    """Ordered per-attachment ledger for one work package."""

    work_package_id: int
    directory: Optional[str] = None
    outcomes: list[DownloadOutcome] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.outcomes

    @property
    def downloaded(self) -> list[DownloadOutcome]:
        return [o for o in self.outcomes if o.outcome == "downloaded"]

    @property
    def failed(self) -> list[DownloadOutcome]:
        return [o for o in self.outcomes if o.outcome == "failed"]

    @property
    def skipped(self) -> list[DownloadOutcome]:
        return [o for o in self.outcomes if o.outcome == "skipped"]

    @property
    def file_mapping(self) -> dict[str, dict]:
        """Attachment id -> local path and content type, for downloaded files only."""
        return {
            str(o.attachment_id): {"filePath": o.file_path, "contentType": o.content_type}
            for o in self.downloaded
        }
