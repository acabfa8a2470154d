"""
Integration tests for GraphDuplicator.

Run: pytest tests/integration/test_duplicator.py -v
"""
import pytest

from content_sets.db import ContentStore
from content_sets.exceptions import PersistenceError
from content_sets.graph.builder import ContentGraphBuilder
from content_sets.graph.duplicator import GraphDuplicator
from content_sets.graph.persister import GraphPersister


class FailingStore(ContentStore):
    """Store that rejects inserts into one table."""

    fail_on: str | None = None

    def insert(self, table, rows):
        if table == self.fail_on:
            raise PersistenceError(table, "simulated failure")
        return super().insert(table, rows)


@pytest.fixture
def stored_id(store, clock, final_payload):
    graph = ContentGraphBuilder(default_user_id="anonymous", clock=clock).build(final_payload)
    return GraphPersister(store).persist(graph)


@pytest.fixture
def duplicator(store):
    return GraphDuplicator(store, title_suffix=" (복제)")


class TestDuplicate:

    def test_copy_gets_new_id_status_and_title(self, store, duplicator, stored_id):
        result = duplicator.duplicate([stored_id])

        assert result.attempted == 1
        assert result.succeeded == 1
        assert result.errors == []
        copy_id = result.copies[stored_id]
        assert copy_id != stored_id

        copy = store.select_one("content_sets", id=copy_id)
        assert copy["status"] == "복제"
        assert copy["title"] == "공기가 누르는 힘, 기압 (복제)"
        assert copy["version"] == 1
        assert copy["user_id"] == "teacher-01"
        assert copy["total_vocabulary_terms"] == 3

    def test_children_are_copied_with_new_ids(self, store, duplicator, stored_id):
        copy_id = duplicator.duplicate([stored_id]).copies[stored_id]

        for table in (
            "passages",
            "vocabulary_terms",
            "vocabulary_questions",
            "paragraph_questions",
            "comprehensive_questions",
        ):
            source_rows = store.select(table, content_set_id=stored_id)
            copied_rows = store.select(table, content_set_id=copy_id)
            assert len(copied_rows) == len(source_rows) > 0
            assert not {r["id"] for r in source_rows} & {r["id"] for r in copied_rows}

    def test_terms_reference_copied_passages(self, store, duplicator, stored_id):
        copy_id = duplicator.duplicate([stored_id]).copies[stored_id]

        copied_passages = {p["id"]: p for p in store.select("passages", content_set_id=copy_id)}
        for term in store.select("vocabulary_terms", content_set_id=copy_id):
            assert term["passage_id"] in copied_passages
            assert copied_passages[term["passage_id"]]["passage_number"] == 1

    def test_terms_keep_their_passage_across_passages(self, store, duplicator, clock, sample_input):
        payload = {
            "input": sample_input,
            "editablePassage": {
                "passages": [
                    {"title": "가", "paragraphs": ["a"], "footnote": ["기압: 공기의 힘"]},
                    {"title": "나", "paragraphs": ["b"], "footnote": ["바람: 공기의 움직임", "기온: 공기의 온도"]},
                ]
            },
        }
        graph = ContentGraphBuilder(default_user_id="anonymous", clock=clock).build(payload)
        source_id = GraphPersister(store).persist(graph)

        copy_id = duplicator.duplicate([source_id]).copies[source_id]

        def term_passages(content_set_id):
            passages = {p["id"]: p for p in store.select("passages", content_set_id=content_set_id)}
            return {
                t["term"]: (t["passage_id"], passages[t["passage_id"]]["passage_number"])
                for t in store.select("vocabulary_terms", content_set_id=content_set_id)
            }

        source, copied = term_passages(source_id), term_passages(copy_id)
        assert {term: number for term, (_, number) in copied.items()} == {"기압": 1, "바람": 2, "기온": 2}
        for term, (passage_id, number) in copied.items():
            assert number == source[term][1]
            assert passage_id != source[term][0]

    def test_comprehensive_set_keys_are_preserved(self, store, duplicator, stored_id):
        copy_id = duplicator.duplicate([stored_id]).copies[stored_id]

        source_keys = [r["original_question_id"] for r in store.select("comprehensive_questions", content_set_id=stored_id)]
        copied_keys = [r["original_question_id"] for r in store.select("comprehensive_questions", content_set_id=copy_id)]
        assert copied_keys == source_keys

    def test_links_to_question_ids_are_remapped(self, store, duplicator, stored_id):
        basic = store.select("comprehensive_questions", content_set_id=stored_id)[0]
        store.update(
            "comprehensive_questions",
            {"original_question_id": basic["id"]},
            content_set_id=stored_id,
            question_type=basic["question_type"],
        )

        copy_id = duplicator.duplicate([stored_id]).copies[stored_id]

        copied = store.select("comprehensive_questions", content_set_id=copy_id)
        copied_basic = copied[0]
        linked = [r for r in copied if r["question_type"] == basic["question_type"]]
        assert {r["original_question_id"] for r in linked} == {copied_basic["id"]}

    def test_copies_are_independent(self, store, duplicator, stored_id):
        copy_id = duplicator.duplicate([stored_id]).copies[stored_id]
        store.update("content_sets", {"title": "수정됨"}, id=copy_id)
        assert store.select_one("content_sets", id=stored_id)["title"] == "공기가 누르는 힘, 기압"


class TestBatch:

    def test_missing_source_does_not_stop_batch(self, duplicator, stored_id):
        result = duplicator.duplicate(["missing", stored_id])

        assert result.attempted == 2
        assert result.succeeded == 1
        assert result.failed == 1
        assert result.errors == ["missing: source not found"]
        assert stored_id in result.copies

    def test_empty_batch(self, duplicator):
        result = duplicator.duplicate([])
        assert (result.attempted, result.succeeded, result.errors) == (0, 0, [])


class TestPartialFailure:

    def test_failed_step_is_reported_and_later_steps_run(self, session_factory, stored_id):
        store = FailingStore(session_factory)
        store.fail_on = "vocabulary_questions"
        result = GraphDuplicator(store, title_suffix=" (복제)").duplicate([stored_id])

        assert result.succeeded == 0
        assert result.errors == [
            f"{stored_id}: vocabulary questions copy failed - simulated failure"
        ]
        copy_id = result.copies[stored_id]
        assert store.select_one("content_sets", id=copy_id) is not None
        assert store.select("vocabulary_questions", content_set_id=copy_id) == []
        assert len(store.select("comprehensive_questions", content_set_id=copy_id)) == 9

    def test_header_copy_failure_skips_children(self, session_factory, stored_id):
        store = FailingStore(session_factory)
        store.fail_on = "content_sets"
        result = GraphDuplicator(store, title_suffix=" (복제)").duplicate([stored_id])

        assert result.errors == [f"{stored_id}: content set copy failed - simulated failure"]
        assert result.copies == {}
        assert len(store.select("passages")) == 1
