"""Tests for status lookup and the status update request."""
import pytest
from pydantic import ValidationError

from openproject_core.schemas import ResponseShapeError, Status, StatusCatalog, WorkPackage
from openproject_core.statuses import InvalidStatusError, StatusLookup, StatusUpdateRequest

from tests.payloads import status, status_collection, work_package


@pytest.fixture
def lookup():
    return StatusLookup.from_catalog(StatusCatalog.model_validate(status_collection()))


class TestStatusLookup:
    """Test case-insensitive exact matching."""

    @pytest.mark.parametrize("requested,expected", [
        ("closed", "Closed"),
        ("CLOSED", "Closed"),
        ("in progress", "In Progress"),
        ("In Progress", "In Progress"),
        ("nEw", "New"),
    ])
    def test_matches_canonical_name(self, lookup, requested, expected):
        assert lookup.resolve(requested).name == expected

    @pytest.mark.parametrize("requested", ["  new ", "closed ", ""])
    def test_surrounding_whitespace_is_not_trimmed(self, lookup, requested):
        with pytest.raises(InvalidStatusError) as exc_info:
            lookup.resolve(requested)

        assert exc_info.value.valid_names == ["New", "In Progress", "Closed"]

    def test_resolved_status_carries_self_link(self, lookup):
        assert lookup.resolve("closed").self_href == "/api/v3/statuses/3"

    def test_no_partial_matching(self, lookup):
        with pytest.raises(InvalidStatusError):
            lookup.resolve("progress")

    def test_unknown_status_lists_catalog_in_order(self, lookup):
        with pytest.raises(InvalidStatusError) as exc_info:
            lookup.resolve("cancelled")

        error = exc_info.value
        assert error.requested == "cancelled"
        assert error.valid_names == ["New", "In Progress", "Closed"]
        assert "New, In Progress, Closed" in str(error)

    def test_table_is_built_per_catalog(self):
        """A status added remotely is visible in the next lookup."""
        first = StatusLookup.from_catalog(StatusCatalog.model_validate(status_collection(["New"])))
        second = StatusLookup.from_catalog(StatusCatalog.model_validate(status_collection(["New", "Rejected"])))

        with pytest.raises(InvalidStatusError):
            first.resolve("rejected")
        assert second.resolve("rejected").name == "Rejected"


class TestStatusUpdateRequest:
    """Test the minimal PATCH body."""

    def test_echoes_fetched_lock_version(self, lookup):
        fetched = WorkPackage.model_validate(work_package(lock_version=17))

        update = StatusUpdateRequest.for_transition(fetched, lookup.resolve("closed"))

        assert update.to_payload() == {
            "lockVersion": 17,
            "_links": {"status": {"href": "/api/v3/statuses/3"}},
        }

    def test_status_without_self_link(self):
        fetched = WorkPackage.model_validate(work_package())
        document = status(9, "Orphan")
        document["_links"] = {}
        target = Status.model_validate(document)

        with pytest.raises(ResponseShapeError):
            StatusUpdateRequest.for_transition(fetched, target)

    def test_request_is_immutable(self, lookup):
        fetched = WorkPackage.model_validate(work_package(lock_version=1))
        update = StatusUpdateRequest.for_transition(fetched, lookup.resolve("new"))

        with pytest.raises(ValidationError):
            update.lock_version = 99
