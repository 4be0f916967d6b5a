import math

import pytest

from core.exceptions import EmbeddingDimensionError
from infrastructure.vector_store import InMemoryVectorStore, cosine_similarity
from conftest import make_chunk


class TestCosineSimilarity:

    @pytest.mark.parametrize("vec", [[1.0, 0.0], [3.0, 4.0], [-2.5, 0.1, 7.0], [1e-3, 2e-3]])
    def test_self_similarity_is_one(self, vec):
        assert cosine_similarity(vec, vec) == pytest.approx(1.0)

    @pytest.mark.parametrize("a,b", [
        ([1.0, 2.0], [3.0, -1.0]),
        ([0.2, 0.9, 0.1], [0.5, 0.5, 0.5]),
        ([-1.0, 0.0], [1.0, 0.0]),
    ])
    def test_symmetric(self, a, b):
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    @pytest.mark.parametrize("a,b", [
        ([0.0, 0.0], [1.0, 2.0]),
        ([1.0, 2.0], [0.0, 0.0]),
        ([0.0, 0.0], [0.0, 0.0]),
    ])
    def test_zero_vector_scores_exactly_zero(self, a, b):
        score = cosine_similarity(a, b)
        assert score == 0.0
        assert not math.isnan(score)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)

    def test_mismatched_lengths_rejected(self):
        with pytest.raises(ValueError):
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


class TestInMemoryVectorStore:

    def test_returns_most_similar_first(self):
        store = InMemoryVectorStore([
            make_chunk("first", [1.0, 0.0]),
            make_chunk("second", [0.0, 1.0]),
            make_chunk("third", [0.9, 0.1]),
        ])

        result = store.query([1.0, 0.0], top_k=2)

        assert [c.content for c in result] == ["first", "third"]

    @pytest.mark.parametrize("top_k,expected", [(0, 0), (1, 1), (3, 3), (10, 3)])
    def test_result_length_is_min_of_k_and_size(self, top_k, expected):
        store = InMemoryVectorStore([
            make_chunk("a", [1.0, 0.0]),
            make_chunk("b", [0.0, 1.0]),
            make_chunk("c", [1.0, 1.0]),
        ])
        assert len(store.query([1.0, 0.5], top_k=top_k)) == expected

    def test_scores_are_non_increasing(self):
        store = InMemoryVectorStore([
            make_chunk(f"c{i}", [float(i), float(10 - i), 1.0]) for i in range(11)
        ])

        results = store.search([2.0, 1.0, 0.0], top_k=11)
        scores = [r.score for r in results]

        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_insertion_order(self):
        store = InMemoryVectorStore([
            make_chunk("low", [0.0, 1.0]),
            make_chunk("tie-1", [2.0, 0.0]),
            make_chunk("tie-2", [1.0, 0.0]),
            make_chunk("tie-3", [5.0, 0.0]),
        ])

        result = store.query([1.0, 0.0], top_k=4)

        assert [c.content for c in result] == ["tie-1", "tie-2", "tie-3", "low"]

    def test_zero_embedding_scores_zero(self):
        store = InMemoryVectorStore([
            make_chunk("zero", [0.0, 0.0]),
            make_chunk("negative", [-1.0, 0.0]),
        ])

        results = store.search([1.0, 0.0], top_k=2)

        assert [(r.chunk.content, r.score) for r in results] == [("zero", 0.0), ("negative", -1.0)]

    def test_zero_query_vector_keeps_insertion_order(self):
        store = InMemoryVectorStore([make_chunk("a", [1.0, 0.0]), make_chunk("b", [0.0, 1.0])])

        results = store.search([0.0, 0.0], top_k=2)

        assert [r.score for r in results] == [0.0, 0.0]
        assert [r.chunk.content for r in results] == ["a", "b"]

    def test_empty_store(self):
        store = InMemoryVectorStore([])
        assert store.count() == 0
        assert store.query([1.0, 2.0]) == []

    def test_rejects_mixed_dimensions(self):
        with pytest.raises(EmbeddingDimensionError):
            InMemoryVectorStore([make_chunk("a", [1.0, 0.0]), make_chunk("b", [1.0, 0.0, 0.0])])

    def test_rejects_query_of_wrong_dimension(self):
        store = InMemoryVectorStore([make_chunk("a", [1.0, 0.0])])
        with pytest.raises(ValueError):
            store.query([1.0, 0.0, 0.0])

    def test_repeated_queries_are_deterministic(self):
        store = InMemoryVectorStore([make_chunk(f"c{i}", [1.0, float(i % 3)]) for i in range(9)])
        first = store.query([1.0, 1.0], top_k=5)
        assert all(store.query([1.0, 1.0], top_k=5) == first for _ in range(5))
