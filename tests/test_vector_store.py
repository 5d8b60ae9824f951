"""
Tests for the in-memory vector store: collections, upsert/delete, filtered
cosine search and the lookup helpers.
"""

import numpy as np
import pytest

from trialrag.vector.embeddings import DeterministicHashEmbedding, embed
from trialrag.vector.index import (
    IVectorStore,
    InMemoryVectorStore,
    cosine_similarity,
    matches_filter,
)
from trialrag.vector.types import Document, SearchResult


class ShortEmbedding(DeterministicHashEmbedding):
    """Hash embedding that returns a truncated vector for one input."""

    def embed_text(self, text):
        vector = super().embed_text(text)
        return vector[:3] if text == "short" else vector


@pytest.fixture
def store():
    """Create a fresh vector store for each test."""
    return InMemoryVectorStore()


@pytest.fixture
def populated_store(store):
    store.upsert("trials", [
        {"id": "t1", "content": "metformin glycemic control", "metadata": {"phase": "3", "site": 1}},
        {"id": "t2", "content": "breast cancer progression", "metadata": {"phase": "2", "site": 1}},
        {"id": "t3", "content": "serious adverse event report", "metadata": {"phase": "3", "site": 2}},
        {"id": "t4", "content": "central laboratory results", "metadata": {"phase": "3"}},
    ])
    return store


def test_vector_store_interface(store):
    """Test that InMemoryVectorStore implements IVectorStore interface."""
    assert isinstance(store, IVectorStore)
    assert store.dimension == 384


class TestCosineSimilarity:

    def test_identical_vectors(self):
        assert cosine_similarity(np.array([1.0, 2.0]), np.array([1.0, 2.0])) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity(np.array([1.0, 0.0]), np.array([0.0, 1.0])) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        assert cosine_similarity(np.array([1.0, 0.0]), np.array([-1.0, 0.0])) == pytest.approx(-1.0)

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity(np.zeros(3), np.array([1.0, 0.0, 0.0])) == 0.0
        assert cosine_similarity(np.zeros(3), np.zeros(3)) == 0.0


class TestMatchesFilter:

    def test_empty_filter_matches(self):
        assert matches_filter({"a": 1}, {})
        assert matches_filter({}, None)

    def test_all_keys_must_match(self):
        assert matches_filter({"a": 1, "b": "x"}, {"a": 1, "b": "x"})
        assert not matches_filter({"a": 1, "b": "y"}, {"a": 1, "b": "x"})

    def test_missing_key_excludes(self):
        assert not matches_filter({"a": 1}, {"b": None})

    def test_none_value_requires_present_key(self):
        assert matches_filter({"b": None}, {"b": None})

    def test_bool_does_not_match_int(self):
        assert not matches_filter({"flag": 1}, {"flag": True})
        assert not matches_filter({"flag": True}, {"flag": 1})
        assert matches_filter({"flag": True}, {"flag": True})

    def test_string_does_not_match_number(self):
        assert not matches_filter({"site": "1"}, {"site": 1})


class TestCollections:

    def test_create_collection_is_idempotent(self, store):
        store.create_collection("docs")
        store.create_collection("docs")

        assert store.list_collections() == ["docs"]
        assert store.count("docs") == 0

    def test_upsert_auto_creates_collection(self, store):
        store.upsert("auto", [{"id": "a", "content": "text"}])

        assert "auto" in store.list_collections()
        assert store.count("auto") == 1

    def test_delete_unknown_collection_returns_false(self, store):
        assert store.delete_collection("nonexistent") is False

    def test_delete_collection_cascades_documents(self, populated_store):
        assert populated_store.delete_collection("trials") is True

        assert "trials" not in populated_store.list_collections()
        for doc_id in ("t1", "t2", "t3", "t4"):
            assert populated_store.get(doc_id) is None

    def test_delete_collection_purges_shared_ids(self, store):
        store.upsert("a", [{"id": "shared", "content": "x"}, {"id": "only-a", "content": "y"}])
        store.upsert("b", [{"id": "shared", "content": "x"}, {"id": "only-b", "content": "z"}])

        store.delete_collection("a")

        assert store.count("b") == 1
        assert [r.id for r in store.query("b", "z")] == ["only-b"]

    def test_batch_upsert_scenario(self, store):
        store.upsert("fresh", [
            {"id": "1", "content": "first"},
            {"id": "2", "content": "second"},
            {"id": "3", "content": "third"},
        ])

        assert store.count("fresh") == 3
        assert store.list_collections().count("fresh") == 1


class TestUpsert:

    def test_returns_ids_in_input_order(self, store):
        ids = store.upsert("docs", [
            {"id": "z", "content": "last"},
            {"id": "a", "content": "first"},
        ])
        assert ids == ["z", "a"]

    def test_stores_vector_of_content(self, store):
        store.upsert("docs", [{"id": "a", "content": "aspirin reduces fever", "metadata": {"topic": "medicine"}}])

        doc = store.get("a")
        assert isinstance(doc, Document)
        assert doc.content == "aspirin reduces fever"
        assert doc.metadata == {"topic": "medicine"}
        assert doc.vector.shape == (384,)
        assert np.array_equal(doc.vector, embed("aspirin reduces fever"))

    def test_metadata_defaults_to_empty(self, store):
        store.upsert("docs", [{"id": "a", "content": "no metadata"}])
        assert store.get("a").metadata == {}

    def test_same_content_keeps_vector(self, store):
        store.upsert("docs", [{"id": "a", "content": "stable"}])
        first = store.get("a").vector.copy()
        store.upsert("docs", [{"id": "a", "content": "stable"}])

        assert np.array_equal(store.get("a").vector, first)
        assert store.count("docs") == 1

    def test_new_content_changes_vector(self, store):
        store.upsert("docs", [{"id": "a", "content": "before"}])
        before = store.get("a").vector
        store.upsert("docs", [{"id": "a", "content": "after", "metadata": {"v": 2}}])

        after = store.get("a")
        assert not np.array_equal(after.vector, before)
        assert after.content == "after"
        assert after.metadata == {"v": 2}
        # the old array is not mutated in place
        assert np.array_equal(before, embed("before"))

    def test_overwrite_keeps_existing_memberships(self, store):
        store.upsert("a", [{"id": "doc", "content": "v1"}])
        store.upsert("b", [{"id": "doc", "content": "v2"}])

        assert store.count("a") == 1
        assert store.count("b") == 1
        assert store.query("a", "v2", top_k=1)[0].content == "v2"

    def test_malformed_document_leaves_store_unchanged(self, store):
        with pytest.raises(KeyError):
            store.upsert("docs", [
                {"id": "good", "content": "fine"},
                {"id": "bad"},
            ])

        assert store.get("good") is None
        assert "docs" not in store.list_collections()

    def test_non_string_content_rejected(self, store):
        with pytest.raises(TypeError):
            store.upsert("docs", [{"id": "bad", "content": 42}])

    def test_content_with_lone_surrogate(self, store):
        store.upsert("docs", [{"id": "x", "content": "bad \ud800 text"}])

        assert store.count("docs") == 1
        assert np.array_equal(store.get("x").vector, embed("bad \ufffd text"))

    def test_provider_dimension_mismatch_rejected(self):
        store = InMemoryVectorStore(embedding_provider=ShortEmbedding())

        with pytest.raises(ValueError):
            store.upsert("docs", [
                {"id": "first", "content": "fine"},
                {"id": "second", "content": "short"},
            ])

        assert store.get("first") is None
        assert "docs" not in store.list_collections()


class TestDelete:

    def test_delete_returns_removed_ids(self, populated_store):
        deleted = populated_store.delete("trials", ["t1", "missing", "t3"])

        assert deleted == ["t1", "t3"]
        assert populated_store.count("trials") == 2
        assert populated_store.get("t1") is None

    def test_delete_unknown_collection(self, populated_store):
        assert populated_store.delete("nonexistent", ["t1"]) == []
        assert populated_store.get("t1") is not None

    def test_delete_skips_ids_of_other_collections(self, populated_store):
        populated_store.upsert("other", [{"id": "o1", "content": "other"}])

        assert populated_store.delete("trials", ["o1"]) == []
        assert populated_store.get("o1") is not None


class TestQuery:

    def test_end_to_end_scenario(self, store):
        store.create_collection("docs")
        store.upsert("docs", [{"id": "a", "content": "aspirin reduces fever", "metadata": {"topic": "medicine"}}])

        results = store.query("docs", "aspirin", top_k=1)
        assert len(results) == 1
        assert results[0].id == "a"
        assert isinstance(results[0], SearchResult)
        assert -1.0 <= results[0].score <= 1.0

        assert store.query("docs", "aspirin", top_k=1, filter={"topic": "legal"}) == []

    def test_exact_text_scores_one(self, populated_store):
        results = populated_store.query("trials", "breast cancer progression", top_k=1)

        assert results[0].id == "t2"
        assert results[0].score == pytest.approx(1.0)

    def test_results_sorted_descending(self, populated_store):
        results = populated_store.query("trials", "anything", top_k=10)
        scores = [r.score for r in results]

        assert scores == sorted(scores, reverse=True)

    @pytest.mark.parametrize("top_k, expected", [(1, 1), (2, 2), (4, 4), (10, 4), (0, 0)])
    def test_top_k_bound(self, populated_store, top_k, expected):
        assert len(populated_store.query("trials", "query", top_k=top_k)) == expected

    def test_default_top_k(self, store):
        store.upsert("many", [{"id": str(i), "content": f"doc {i}"} for i in range(15)])
        assert len(store.query("many", "doc")) == 10

    def test_filter_correctness(self, populated_store):
        results = populated_store.query("trials", "query", top_k=10, filter={"phase": "3", "site": 1})

        assert [r.id for r in results] == ["t1"]
        for result in results:
            assert result.metadata["phase"] == "3"
            assert result.metadata["site"] == 1

    def test_filter_missing_key_excludes(self, populated_store):
        results = populated_store.query("trials", "query", top_k=10, filter={"site": 2})
        assert [r.id for r in results] == ["t3"]

    def test_filter_limits_to_eligible_count(self, populated_store):
        results = populated_store.query("trials", "query", top_k=10, filter={"phase": "3"})
        assert sorted(r.id for r in results) == ["t1", "t3", "t4"]

    def test_unknown_collection_returns_empty(self, store):
        assert store.query("nonexistent", "x") == []
        assert store.count("nonexistent") == 0

    def test_empty_collection_returns_empty(self, store):
        store.create_collection("empty")
        assert store.query("empty", "x") == []

    def test_query_by_vector(self, populated_store):
        results = populated_store.query("trials", embed("serious adverse event report"), top_k=1)

        assert results[0].id == "t3"
        assert results[0].score == pytest.approx(1.0)

    def test_query_by_list_vector(self, populated_store):
        results = populated_store.query("trials", embed("central laboratory results").tolist(), top_k=1)
        assert results[0].id == "t4"

    def test_query_vector_dimension_mismatch(self, populated_store):
        with pytest.raises(ValueError):
            populated_store.query("trials", [1.0, 0.0, 0.0])

    def test_ties_break_by_insertion_order(self, store):
        store.upsert("dupes", [
            {"id": "first", "content": "same text"},
            {"id": "second", "content": "same text"},
            {"id": "third", "content": "same text"},
        ])

        for _ in range(3):
            assert [r.id for r in store.query("dupes", "same text")] == ["first", "second", "third"]

    def test_result_metadata_is_a_copy(self, populated_store):
        result = populated_store.query("trials", "metformin glycemic control", top_k=1)[0]
        result.metadata["phase"] = "changed"

        assert populated_store.get("t1").metadata["phase"] == "3"


class TestLookups:

    def test_get_unknown_returns_none(self, store):
        assert store.get("missing") is None

    def test_get_is_collection_independent(self, store):
        store.upsert("a", [{"id": "doc", "content": "text"}])
        assert store.get("doc").id == "doc"

    def test_get_many_skips_unknown(self, populated_store):
        docs = populated_store.get_many(["t3", "missing", "t1"])
        assert [d.id for d in docs] == ["t3", "t1"]
