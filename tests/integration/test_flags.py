"""
Integration tests for the question flag audit.

Run: pytest tests/integration/test_flags.py -v
"""
import pytest

from content_sets.exceptions import InvalidStatusError
from content_sets.graph.flags import QuestionFlagAuditor


@pytest.fixture
def auditor(store):
    return QuestionFlagAuditor(store)


@pytest.fixture
def stale_id(service, store, final_payload):
    """A pre-review set whose stored flags are both wrong."""
    content_set_id = service.save_final(final_payload).content_set_id
    store.update("vocabulary_terms", {"has_question_generated": False}, content_set_id=content_set_id, term="기압")
    store.update("vocabulary_terms", {"has_question_generated": True}, content_set_id=content_set_id, term="바람")
    return content_set_id


def stored_flags(store, content_set_id):
    return {
        t["term"]: t["has_question_generated"]
        for t in store.select("vocabulary_terms", content_set_id=content_set_id)
    }


class TestDryRun:

    def test_reports_disagreements_without_writing(self, auditor, store, stale_id):
        result = auditor.recompute()

        assert result.dry_run
        assert result.content_sets == 1
        assert result.terms_checked == 3
        assert {(c.term, c.current, c.should_be) for c in result.changes} == {
            ("기압", False, True),
            ("바람", True, False),
        }
        assert result.updated == 0
        assert stored_flags(store, stale_id) == {"기압": False, "바람": True, "기온": False}

    def test_reasons(self, auditor, stale_id):
        reasons = {c.term: c.reason for c in auditor.recompute().changes}
        assert reasons["기압"] == "vocabulary question exists but term is not flagged"
        assert reasons["바람"] == "term is flagged but no vocabulary question exists"

    def test_consistent_sets_report_nothing(self, auditor, service, final_payload):
        service.save_final(final_payload)
        assert auditor.recompute().changes == []


class TestApply:

    def test_live_run_writes_corrected_flags(self, auditor, store, stale_id):
        result = auditor.recompute(dry_run=False)

        assert not result.dry_run
        assert result.updated == 2
        assert result.errors == []
        assert stored_flags(store, stale_id) == {"기압": True, "바람": False, "기온": False}
        assert auditor.recompute().changes == []

    def test_service_exposes_the_audit(self, service, store, stale_id):
        result = service.recompute_question_flags(["pre-review"], dry_run=False)
        assert result.updated == 2
        assert stored_flags(store, stale_id)["기압"] is True


class TestSelection:

    def test_status_filter(self, auditor, store, stale_id):
        assert auditor.recompute(["1차검수"]).content_sets == 0
        assert auditor.recompute(["검수 전", "pre-review"]).content_sets == 1

        store.update("content_sets", {"status": "1차검수"}, id=stale_id)
        assert len(auditor.recompute(["1st-review"]).changes) == 2

    def test_unknown_status(self, auditor):
        with pytest.raises(InvalidStatusError):
            auditor.recompute(["완료"])

    def test_session_range(self, auditor, store, stale_id):
        assert auditor.recompute(session_range=(1, 5)).content_sets == 0

        store.update("content_sets", {"session_number": "3"}, id=stale_id)
        assert auditor.recompute(session_range=(1, 5)).content_sets == 1
        assert auditor.recompute(session_range=(4, 5)).content_sets == 0

    def test_non_numeric_session_is_outside_every_range(self, auditor, store, stale_id):
        store.update("content_sets", {"session_number": "3차시"}, id=stale_id)
        assert auditor.recompute(session_range=(1, 100)).content_sets == 0
