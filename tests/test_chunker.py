"""
Tests for the sliding-window text chunker.
"""

import pytest

from docvec.indexing.chunker import TextChunk, chunk_text, normalize_text


def _assert_well_formed(chunks):
    assert all(chunk.text for chunk in chunks)
    assert [chunk.index for chunk in chunks] == list(range(len(chunks)))


class TestChunkTextBasics:
    @pytest.mark.parametrize("text", ["", "   ", "\n\t  \n"])
    def test_empty_or_whitespace_returns_no_chunks(self, text: str) -> None:
        assert chunk_text(text, chunk_size=50, chunk_overlap=10) == []

    def test_short_text_is_single_normalized_chunk(self) -> None:
        result = chunk_text("This is a short text.", chunk_size=700, chunk_overlap=100)

        assert result == [TextChunk(text="This is a short text.", index=0)]

    def test_text_exactly_chunk_size_is_single_chunk(self) -> None:
        text = "a" * 50

        assert chunk_text(text, chunk_size=50, chunk_overlap=10) == [TextChunk(text=text, index=0)]

    def test_whitespace_is_collapsed(self) -> None:
        result = chunk_text("This   has \n\n multiple \t    spaces.", chunk_size=700, chunk_overlap=100)

        assert result[0].text == "This has multiple spaces."

    def test_normalize_text_trims(self) -> None:
        assert normalize_text("  a \n b  ") == "a b"


class TestChunkBoundaries:
    def test_long_text_is_split_with_sequential_indices(self) -> None:
        result = chunk_text("A" * 1000, chunk_size=700, chunk_overlap=100)

        assert len(result) > 1
        _assert_well_formed(result)

    def test_prefers_sentence_boundary(self) -> None:
        text = "First sentence here. " + "word " * 30
        result = chunk_text(text, chunk_size=40, chunk_overlap=5)

        assert result[0].text == "First sentence here."

    def test_full_width_sentence_boundary(self) -> None:
        text = "これは最初の文です。" + "B" * 700 + "これは二番目の文です。"
        result = chunk_text(text, chunk_size=700, chunk_overlap=100)

        assert len(result) > 1
        assert result[0].text == "これは最初の文です。"

    def test_falls_back_to_word_boundary(self) -> None:
        text = "alpha beta gamma delta epsilon zeta eta theta"
        result = chunk_text(text, chunk_size=20, chunk_overlap=0)

        assert result[0].text == "alpha beta gamma"
        assert all(len(chunk.text) <= 20 for chunk in result)

    def test_hard_cut_without_boundaries(self) -> None:
        result = chunk_text("x" * 25, chunk_size=10, chunk_overlap=0)

        assert [chunk.text for chunk in result] == ["x" * 10, "x" * 10, "x" * 5]

    def test_overlap_repeats_tail_of_previous_chunk(self) -> None:
        result = chunk_text("abcdefghijklmnopqrstuvwxyz", chunk_size=10, chunk_overlap=3)

        assert result[0].text == "abcdefghij"
        assert result[1].text.startswith("hij")

    def test_last_chunk_reaches_end_of_text(self) -> None:
        text = "one two three four five six seven eight nine ten eleven twelve"
        result = chunk_text(text, chunk_size=15, chunk_overlap=4)

        assert text.endswith(result[-1].text)


class TestChunkTermination:
    @pytest.mark.parametrize(
        ("chunk_size", "chunk_overlap"),
        [(10, 10), (10, 50), (5, 4), (1, 0), (1, 5), (7, 3)],
    )
    def test_terminates_and_stays_well_formed(self, chunk_size: int, chunk_overlap: int) -> None:
        text = "Lorem ipsum dolor sit amet. Consectetur adipiscing elit! Sed do eiusmod? " * 3
        result = chunk_text(text, chunk_size=chunk_size, chunk_overlap=chunk_overlap)

        assert result
        _assert_well_formed(result)
        assert all(len(chunk.text) <= chunk_size for chunk in result)

    def test_overlap_not_smaller_than_size_advances_one_char(self) -> None:
        result = chunk_text("x" * 12, chunk_size=10, chunk_overlap=10)

        assert [chunk.text for chunk in result] == ["x" * 10, "x" * 10, "x" * 10]
