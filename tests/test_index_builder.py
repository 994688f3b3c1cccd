"""
Unit tests for IndexBuilder and the on-disk build.
"""

import pytest

from conftest import SAMPLE_DOC_NOS
from newsindex.index_builder import IndexBuilder, build_index
from newsindex.index_store import (
    COMPLETE_MARKER,
    DOC_LENGTHS_FILE,
    INVERTED_INDEX_FILE,
    LEXICON_FILE,
    load_index,
)
from newsindex.posting import Posting
from newsindex.segmenter import RawRecord


def make_record(doc_no: str, text: str, headline: str = "") -> RawRecord:
    body = f"<DOC>\n<DOCNO> {doc_no} </DOCNO>\n<TEXT>\n<P>\n{text}\n</P>\n</TEXT>\n</DOC>\n"
    return RawRecord(doc_no=doc_no, date="", headline=headline, body=body)


class TestIndexBuilder:
    """Test in-memory indexing of records"""

    def test_internal_ids_are_dense(self):
        builder = IndexBuilder()
        metas = [builder.add_record(make_record(f"D-{i}", "word")) for i in range(3)]

        assert [m.internal_id for m in metas] == [1, 2, 3]
        assert builder.num_docs == 3

    def test_term_ids_follow_first_occurrence(self):
        builder = IndexBuilder()
        builder.add_record(make_record("D-1", "zebra apple zebra"))
        builder.add_record(make_record("D-2", "mango apple"))

        assert list(builder.lexicon.items()) == [("zebra", 1), ("apple", 2), ("mango", 3)]

    def test_posting_counts_sum_to_doc_length(self):
        builder = IndexBuilder()
        builder.add_record(make_record("D-1", "the cat and the hat and the bat"))

        total = sum(
            p.count
            for _, postings in builder.inverted_index.items()
            for p in postings
            if p.doc_id == 1
        )
        assert total == builder.doc_lengths[0] == 8

    def test_postings_in_document_order(self):
        builder = IndexBuilder()
        builder.add_record(make_record("D-1", "apple"))
        builder.add_record(make_record("D-2", "pear"))
        builder.add_record(make_record("D-3", "apple apple"))

        apple = builder.lexicon.get("apple")
        assert builder.inverted_index.get_postings(apple) == [Posting(1, 1), Posting(3, 2)]

    def test_empty_document_still_gets_an_id(self):
        builder = IndexBuilder()
        builder.add_record(make_record("D-1", "..."))
        builder.add_record(make_record("D-2", "word"))

        assert builder.doc_lengths == [0, 1]
        assert builder.inverted_index.get_postings(builder.lexicon.get("word")) == [Posting(2, 1)]

    def test_stemming_conflates_terms(self):
        builder = IndexBuilder(stem=True)
        builder.add_record(make_record("D-1", "cats cat running"))

        assert list(builder.lexicon) == ["cat", "run"]
        assert builder.inverted_index.get_postings(1) == [Posting(1, 2)]

    def test_builders_are_independent(self):
        first = IndexBuilder()
        second = IndexBuilder()
        first.add_record(make_record("D-1", "alpha beta"))
        second.add_record(make_record("D-9", "gamma"))

        assert list(first.lexicon) == ["alpha", "beta"]
        assert list(second.lexicon) == ["gamma"]
        assert second.metadata[0].internal_id == 1

    def test_to_store(self):
        builder = IndexBuilder()
        builder.add_record(make_record("D-1", "alpha beta"))
        builder.add_record(make_record("D-2", "beta"))
        store = builder.to_store()

        assert store.total_docs == 2
        assert store.average_doc_length == pytest.approx(1.5)
        assert store.doc_no(2) == "D-2"


class TestBuildIndex:
    """Test the index directory written for the sample corpus"""

    def test_summary(self, tmp_path, corpus_path):
        summary = build_index(corpus_path, tmp_path / "idx")

        assert summary.num_docs == 3
        assert summary.num_terms == 26

    def test_artifacts_written(self, index_dir):
        for relative in (LEXICON_FILE, INVERTED_INDEX_FILE, DOC_LENGTHS_FILE, COMPLETE_MARKER, "docnos.txt"):
            assert (index_dir / relative).exists()

    def test_doc_lengths_file(self, index_dir):
        assert (index_dir / DOC_LENGTHS_FILE).read_text(encoding="utf-8") == "13\n10\n15\n"

    def test_lexicon_file_starts_in_corpus_order(self, index_dir):
        lines = (index_dir / LEXICON_FILE).read_text(encoding="utf-8").splitlines()
        assert lines[:4] == ["cat:1", "news:2", "the:3", "sat:4"]
        assert len(lines) == 26

    def test_inverted_index_file_format(self, index_dir):
        text = (index_dir / INVERTED_INDEX_FILE).read_text(encoding="utf-8")
        assert text.startswith(
            "Term ID: 1\n"
            "    DocID: 1, Count: 3\n"
            "    DocID: 3, Count: 1\n"
            "----------\n"
            "Term ID: 2\n"
        )

    def test_documents_stored_by_date(self, index_dir, corpus_text):
        stored = index_dir / "89" / "01" / "01" / "LA010189-0001.txt"
        assert stored.read_text(encoding="utf-8") == corpus_text.split("</DOC>\n")[0] + "</DOC>\n"

    def test_docnos_file(self, index_dir):
        lines = (index_dir / "docnos.txt").read_text(encoding="utf-8").splitlines()
        assert [line.split(" ", 1)[0] for line in lines] == SAMPLE_DOC_NOS
        assert lines[1].endswith("LA010289-0002.txt")

    def test_metadata_files(self, index_dir):
        meta = (index_dir / "metadata" / "LA010189-0001-metadata.txt").read_text(encoding="utf-8")
        assert meta == "docno: LA010189-0001 internal id: 1 date: January 1, 1989 headline: Cat News\n"

    def test_completion_marker(self, index_dir):
        marker = (index_dir / COMPLETE_MARKER).read_text(encoding="utf-8")
        assert marker == "stemmed: false\ndocuments: 3\nterms: 26\n"

    def test_output_directory_must_not_exist(self, tmp_path, corpus_path):
        output = tmp_path / "idx"
        output.mkdir()

        with pytest.raises(FileExistsError):
            build_index(corpus_path, output)

    def test_missing_corpus(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            build_index(tmp_path / "missing.gz", tmp_path / "idx")
        assert not (tmp_path / "idx").exists()

    def test_stemmed_build(self, tmp_path, corpus_path):
        output = tmp_path / "idx-stem"
        build_index(corpus_path, output, stem=True)
        store = load_index(output)

        assert store.stemmed
        assert store.postings_for("cat") == [Posting(1, 3), Posting(3, 2)]
        assert "cats" not in store.lexicon
