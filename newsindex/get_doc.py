"""
Look up a stored document by docNo or internal id and render it with its
metadata, using docnos.txt and the metadata/ files of an index directory.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .index_store import load_docno_mapping, metadata_path, parse_metadata_line
from .posting import DocumentMetadata

logger = logging.getLogger(__name__)

IDENTIFIER_TYPES = ("docno", "id")


class DocumentNotFound(LookupError):
    pass


@dataclass
class StoredDocument:
    doc_no: str
    path: Path
    metadata: DocumentMetadata | None
    raw: str


def resolve_path(index_dir: Path, id_type: str, identifier: str) -> tuple[str, Path]:
    """Map a docNo or 1-based internal id to (docNo, stored path)."""
    if id_type not in IDENTIFIER_TYPES:
        raise ValueError(f"identifier type must be one of {IDENTIFIER_TYPES}, got {id_type!r}")
    mapping = load_docno_mapping(index_dir)
    if id_type == "docno":
        for doc_no, path in mapping.values():
            if doc_no == identifier:
                return doc_no, path
        raise DocumentNotFound(f"No document with docno {identifier}")
    try:
        internal_id = int(identifier)
    except ValueError:
        raise DocumentNotFound(f"Internal id must be an integer, got {identifier!r}") from None
    if internal_id not in mapping:
        raise DocumentNotFound(f"No document with id {internal_id}")
    return mapping[internal_id]


def get_document(index_dir: Path, id_type: str, identifier: str) -> StoredDocument:
    index_dir = Path(index_dir)
    doc_no, path = resolve_path(index_dir, id_type, identifier)
    if not path.exists():
        raise DocumentNotFound(f"Document {doc_no} is listed but missing at {path}")

    meta = None
    meta_file = metadata_path(index_dir, doc_no)
    if meta_file.exists():
        for line in meta_file.read_text(encoding="utf-8").splitlines():
            outcome = parse_metadata_line(line)
            if outcome.ok:
                meta = outcome.value
                break
            logger.warning("%s: unreadable metadata line (%s)", meta_file, outcome.reason)
    return StoredDocument(doc_no=doc_no, path=path, metadata=meta, raw=path.read_text(encoding="utf-8"))


def format_document(doc: StoredDocument) -> str:
    lines: list[str] = []
    if doc.metadata is not None:
        lines.append(f"docno: {doc.metadata.doc_no}")
        lines.append(f"internal id: {doc.metadata.internal_id}")
        lines.append(f"date: {doc.metadata.date}")
        lines.append(f"headline: {doc.metadata.headline}")
    lines.append("raw document: ")
    lines.append(doc.raw.rstrip("\n"))
    return "\n".join(lines)
