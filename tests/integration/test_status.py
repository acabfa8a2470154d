"""
Integration tests for the status lifecycle and delete guard.

Run: pytest tests/integration/test_status.py -v
"""
import pytest

from content_sets.exceptions import ConcurrencyConflictError, InvalidStatusError
from content_sets.graph import ContentStatus
from content_sets.graph.status import StatusLifecycle


@pytest.fixture
def lifecycle(store):
    return StatusLifecycle(store, conflict_policy="last_writer_wins")


@pytest.fixture
def optimistic(store):
    return StatusLifecycle(store, conflict_policy="optimistic_version")


@pytest.fixture
def stored_id(store):
    header = store.insert("content_sets", [{"title": "기압", "status": "검수 전"}])[0]
    store.insert("passages", [{"content_set_id": header["id"], "passage_number": 1}])
    store.insert("vocabulary_terms", [{"content_set_id": header["id"], "term": "기압"}])
    return header["id"]


class TestCanDelete:

    @pytest.mark.parametrize(
        "status,expected",
        [
            ("검수 전", True),
            (ContentStatus.PRE_REVIEW, True),
            ("pre-review", True),
            ("1차검수", False),
            ("검수완료", False),
            ("복제", False),
            ("nonsense", False),
            (None, False),
        ],
    )
    def test_only_pre_review_is_deletable(self, status, expected):
        assert StatusLifecycle.can_delete(status) is expected


class TestDelete:

    def test_pre_review_set_is_deleted_with_children(self, store, lifecycle, stored_id):
        result = lifecycle.delete(stored_id)

        assert result.success
        assert result.removed["content_sets"] == 1
        assert result.removed["passages"] == 1
        assert result.removed["vocabulary_terms"] == 1
        assert store.select_one("content_sets", id=stored_id) is None
        assert store.select("passages", content_set_id=stored_id) == []

    def test_reviewed_set_is_rejected_with_instructions(self, store, lifecycle, stored_id):
        store.update("content_sets", {"status": "검수완료"}, id=stored_id)

        result = lifecycle.delete(stored_id)

        assert not result.success
        assert "'검수완료'" in result.message
        assert "'검수 전'" in result.message
        assert store.select_one("content_sets", id=stored_id) is not None

    def test_missing_set(self, lifecycle):
        result = lifecycle.delete("missing")
        assert not result.success
        assert result.message == "missing: content set not found"


class TestSetStatus:

    def test_status_walk_ends_undeletable(self, lifecycle, stored_id):
        for status in ("1차검수", "2차검수", "3차검수", "4차검수", "검수완료"):
            assert lifecycle.set_status(stored_id, status).success

        assert not lifecycle.delete(stored_id).success

    def test_each_change_bumps_version(self, store, lifecycle, stored_id):
        first = lifecycle.set_status(stored_id, "1st-review")
        second = lifecycle.set_status(stored_id, ContentStatus.APPROVED)

        assert first.version == 2
        assert second.version == 3
        assert second.status is ContentStatus.APPROVED
        assert store.select_one("content_sets", id=stored_id)["status"] == "승인완료"

    def test_back_to_pre_review_allows_delete(self, lifecycle, stored_id):
        lifecycle.set_status(stored_id, "검수완료")
        lifecycle.set_status(stored_id, "검수 전")
        assert lifecycle.delete(stored_id).success

    def test_missing_set(self, lifecycle):
        result = lifecycle.set_status("missing", "1차검수")
        assert not result.success
        assert result.message == "missing: content set not found"

    def test_unknown_status_raises(self, lifecycle, stored_id):
        with pytest.raises(InvalidStatusError):
            lifecycle.set_status(stored_id, "5차검수")

    def test_duplicated_marker_cannot_be_assigned(self, lifecycle, stored_id):
        with pytest.raises(InvalidStatusError):
            lifecycle.set_status(stored_id, "복제")


class TestOptimisticVersion:

    def test_matching_version_succeeds(self, optimistic, stored_id):
        result = optimistic.set_status(stored_id, "1차검수", expected_version=1)
        assert result.success
        assert result.version == 2

    def test_stale_version_conflicts(self, optimistic, stored_id):
        optimistic.set_status(stored_id, "1차검수", expected_version=1)

        with pytest.raises(ConcurrencyConflictError) as exc:
            optimistic.set_status(stored_id, "2차검수", expected_version=1)
        assert exc.value.expected == 1
        assert exc.value.actual == 2

    def test_missing_version_conflicts(self, optimistic, stored_id):
        with pytest.raises(ConcurrencyConflictError):
            optimistic.set_status(stored_id, "1차검수")

    def test_last_writer_wins_ignores_version(self, lifecycle, stored_id):
        lifecycle.set_status(stored_id, "1차검수")
        assert lifecycle.set_status(stored_id, "2차검수", expected_version=1).success


class TestBatch:

    def test_batch_reports_each_id(self, store, lifecycle, stored_id):
        other = store.insert("content_sets", [{"title": "바람"}])[0]["id"]

        result = lifecycle.batch_set_status([stored_id, "missing", other], "2nd-review")

        assert result.attempted == 3
        assert result.updated == 2
        assert result.failed == 1
        assert result.errors == ["missing: content set not found"]
        assert store.select_one("content_sets", id=other)["status"] == "2차검수"

    def test_batch_under_optimistic_policy(self, optimistic, stored_id):
        result = optimistic.batch_set_status([stored_id], "검수완료")
        assert result.updated == 1

    def test_batch_rejects_duplicated_marker(self, lifecycle, stored_id):
        with pytest.raises(InvalidStatusError):
            lifecycle.batch_set_status([stored_id], "duplicated")
