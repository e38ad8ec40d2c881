"""Unit tests for the chunker module."""

from __future__ import annotations

import json

import pytest

from rag_ingestion.errors import InputError
from rag_ingestion.ingestion.chunker import (
    build_json_chunks,
    build_text_chunks,
    chunk_text,
    is_json_source,
)


def _words(n: int, prefix: str = "w") -> str:
    return " ".join(f"{prefix}{i}" for i in range(n))


class TestChunkText:
    def test_empty_text_yields_no_chunks(self) -> None:
        assert chunk_text("") == []

    def test_whitespace_only_yields_no_chunks(self) -> None:
        assert chunk_text("  \n\t  ") == []

    def test_whitespace_runs_collapse_to_single_spaces(self) -> None:
        assert chunk_text("alpha\n\n\tbeta    gamma") == ["alpha beta gamma"]

    def test_exactly_chunk_size_words_is_one_chunk(self) -> None:
        text = _words(220)
        chunks = chunk_text(text, 220, 40)
        assert len(chunks) == 1
        assert chunks[0].split() == text.split()

    def test_stride_and_overlap_for_400_words(self) -> None:
        words = _words(400).split()
        chunks = chunk_text(" ".join(words), 220, 40)

        assert len(chunks) >= 2
        first, second = chunks[0].split(), chunks[1].split()
        assert first[0] == words[0]
        assert second[0] == words[180]
        assert second[:40] == first[-40:]

    def test_last_window_is_not_padded(self) -> None:
        chunks = chunk_text(_words(400), 220, 40)
        assert [len(c.split()) for c in chunks] == [220, 220, 40]

    @pytest.mark.parametrize(
        ("n_words", "size", "overlap"),
        [(1, 5, 0), (17, 5, 2), (400, 220, 40), (1000, 50, 49), (33, 10, 0)],
    )
    def test_stride_prefixes_reconstruct_the_text(self, n_words: int, size: int, overlap: int) -> None:
        words = _words(n_words).split()
        chunks = chunk_text(" ".join(words), size, overlap)

        assert chunks
        rebuilt: list[str] = []
        for chunk in chunks:
            rebuilt.extend(chunk.split()[: size - overlap])
        assert rebuilt == words

    def test_is_deterministic(self) -> None:
        text = _words(777)
        assert chunk_text(text, 64, 8) == chunk_text(text, 64, 8)

    @pytest.mark.parametrize(("size", "overlap"), [(100, 100), (40, 220), (10, 11)])
    def test_overlap_gte_chunk_size_raises(self, size: int, overlap: int) -> None:
        with pytest.raises(ValueError, match="overlap.*must be < chunk_size"):
            chunk_text("some words here", size, overlap)

    def test_negative_overlap_raises(self) -> None:
        with pytest.raises(ValueError, match="overlap"):
            chunk_text("a b c", 5, -1)

    def test_non_positive_chunk_size_raises(self) -> None:
        with pytest.raises(ValueError, match="chunk_size"):
            chunk_text("a b c", 0, 0)


class TestBuildTextChunks:
    def test_title_defaults_to_document_name(self) -> None:
        chunks = build_text_chunks(_words(10), "notes.txt", chunk_size=4, overlap=1)
        assert all(c.title == "notes.txt" for c in chunks)
        assert all(c.document_name == "notes.txt" for c in chunks)

    def test_indices_are_contiguous_from_zero(self) -> None:
        chunks = build_text_chunks(_words(50), "a.txt", chunk_size=10, overlap=2)
        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))

    def test_empty_text_gives_no_chunks(self) -> None:
        assert build_text_chunks("   ", "empty.txt") == []


class TestBuildJsonChunks:
    def test_two_items_three_chunks_each(self) -> None:
        payload = json.dumps([
            {"title": "Alpha", "content": _words(400, "a")},
            {"title": "Beta", "content": _words(400, "b")},
        ])
        chunks = build_json_chunks(payload, "kb.json")

        alpha = [c for c in chunks if c.title.startswith("Alpha")]
        beta = [c for c in chunks if c.title.startswith("Beta")]
        assert [c.chunk_index for c in alpha] == [0, 1, 2]
        assert [c.chunk_index for c in beta] == [0, 1, 2]
        assert [c.title for c in beta] == ["Beta", "Beta (Part 2)", "Beta (Part 3)"]
        assert all(c.document_name == "kb.json" for c in chunks)

    def test_items_keep_emission_order(self) -> None:
        payload = [
            {"title": "A", "content": _words(8)},
            {"title": "B", "content": _words(8)},
        ]
        chunks = build_json_chunks(payload, "kb.json", chunk_size=4, overlap=1)
        assert [c.title for c in chunks] == [
            "A", "A (Part 2)", "A (Part 3)",
            "B", "B (Part 2)", "B (Part 3)",
        ]

    def test_title_falls_back_to_name_then_empty(self) -> None:
        chunks = build_json_chunks(
            [{"name": "Named", "content": "x"}, {"content": "y"}], "kb.json"
        )
        assert [c.title for c in chunks] == ["Named", ""]

    def test_single_object_is_one_item(self) -> None:
        chunks = build_json_chunks('{"title": "Solo", "content": "hello world"}', "solo.json")
        assert len(chunks) == 1
        assert chunks[0].title == "Solo"

    def test_item_without_content_contributes_nothing(self) -> None:
        assert build_json_chunks([{"title": "Empty"}], "kb.json") == []

    def test_invalid_json_raises_input_error(self) -> None:
        with pytest.raises(InputError, match="JSON parse failed for bad.json"):
            build_json_chunks("{not json", "bad.json")

    def test_scalar_top_level_raises_input_error(self) -> None:
        with pytest.raises(InputError, match="array of objects"):
            build_json_chunks("42", "num.json")

    def test_non_object_item_raises_input_error(self) -> None:
        with pytest.raises(InputError, match="non-object"):
            build_json_chunks('["just a string"]', "strings.json")

    def test_non_string_title_is_stringified(self) -> None:
        chunks = build_json_chunks(
            [{"title": 2024, "content": _words(8)}, {"name": 7, "content": "x"}],
            "years.json",
            chunk_size=4,
            overlap=1,
        )
        assert [c.title for c in chunks] == ["2024", "2024 (Part 2)", "2024 (Part 3)", "7"]


@pytest.mark.parametrize(
    ("name", "mime", "expected"),
    [
        ("data.JSON", "", True),
        ("data.txt", "application/json", True),
        ("data.txt", "text/plain", False),
        ("report.pdf", "application/pdf", False),
    ],
)
def test_is_json_source(name: str, mime: str, expected: bool) -> None:
    assert is_json_source(name, mime) is expected
