"""Status resolution for work package transitions.

OpenProject does not accept a status name on update: a transition is requested
by linking the work package to the target status resource. This module:
- Builds a name -> Status lookup table from a freshly fetched catalog
- Matches caller-supplied names case-insensitively (exact, no fuzzy matching)
- Builds the minimal PATCH body: the fetched lockVersion plus the status link
"""
import logging

from pydantic import BaseModel, ConfigDict

from .schemas import ResponseShapeError, Status, StatusCatalog, WorkPackage

logger = logging.getLogger("openproject-core.statuses")


class InvalidStatusError(Exception):
    """Raised when a requested status name matches no catalog entry.

    This is a caller input error; the message lists every valid name so the
    caller can correct itself without another round trip.
    """

    def __init__(self, requested: str, valid_names: list[str]):
        self.requested = requested
        self.valid_names = valid_names
        super().__init__(
            f'Status "{requested}" is not available. Available statuses are: {", ".join(valid_names)}'
        )


class StatusLookup:
    """Explicit name -> Status table, rebuilt for every call.

    Names are unique in OpenProject, so later duplicates (which the remote
    system does not produce) never shadow the first entry.
    """

    def __init__(self, statuses: list[Status]):
        self.statuses = list(statuses)
        self._by_name: dict[str, Status] = {}
        for status in self.statuses:
            self._by_name.setdefault(status.name.lower(), status)

    @classmethod
    def from_catalog(cls, catalog: StatusCatalog) -> "StatusLookup":
        return cls(catalog.statuses)

    @property
    def names(self) -> list[str]:
        """Canonical names in catalog order."""
        return [status.name for status in self.statuses]

    def resolve(self, name: str) -> Status:
        """Return the catalog status matching `name` case-insensitively.

        Raises:
            InvalidStatusError: if no status has that name.
        """
        status = self._by_name.get(name.lower())
        if status is None:
            logger.info(f"Rejected unknown status '{name}' (valid: {self.names})")
            raise InvalidStatusError(name, self.names)
        return status


class StatusUpdateRequest(BaseModel):
    """PATCH body for a status transition.

    Build it with for_transition() so the lockVersion always comes from the
    work package that was just fetched, never from caller input.
    """

    model_config = ConfigDict(frozen=True)

    lock_version: int
    status_href: str

    @classmethod
    def for_transition(cls, work_package: WorkPackage, target: Status) -> "StatusUpdateRequest":
        href = target.self_href
        if not href:
            raise ResponseShapeError(f'Status "{target.name}" has no self link')
        return cls(lock_version=work_package.lock_version, status_href=href)

    def to_payload(self) -> dict:
        # Anything beyond lockVersion and the status link would be applied as a change
        return {
            "lockVersion": self.lock_version,
            "_links": {"status": {"href": self.status_href}},
        }
