"""Cross-reference breaking changes against a documentation corpus."""

import fnmatch
from collections.abc import Iterable, Mapping
from pathlib import Path

from surfacecheck.core.models import BreakingChange, DocumentRef
from surfacecheck.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DOC_EXTENSIONS = (".md", ".mdx", ".rst", ".txt")

_DOC_TYPES = {
    ".md": "markdown",
    ".mdx": "mdx",
    ".rst": "restructuredtext",
    ".txt": "text",
    ".html": "html",
    ".adoc": "asciidoc",
}


def _as_document(doc: DocumentRef | Mapping) -> DocumentRef:
    if isinstance(doc, DocumentRef):
        return doc
    return DocumentRef.model_validate(doc)


def _search_terms(name: str) -> list[str]:
    terms = [name, *name.split(".")]
    return [term for term in dict.fromkeys(terms) if term]


def _documents_mentioning(
    change: BreakingChange, docs: list[DocumentRef]
) -> list[str]:
    terms = _search_terms(change.name)
    return [
        doc.path for doc in docs if any(term in doc.content for term in terms)
    ]


def analyze_documentation_impact(
    changes: Iterable[BreakingChange],
    docs: Iterable[DocumentRef | Mapping],
) -> list[str]:
    """Find documents that mention any changed symbol.

    A document is affected when its content contains the change name or any
    dot-separated part of it (``foo.bar`` searches ``foo.bar``, ``foo`` and
    ``bar``). Matching is plain, case-sensitive substring containment.

    Args:
        changes: Breaking changes to look up.
        docs: Documentation corpus, as ``DocumentRef`` or plain mappings.

    Returns:
        Affected document paths, deduplicated in first-match order.
    """
    corpus = [_as_document(doc) for doc in docs]
    affected: list[str] = []

    for change in changes:
        for path in _documents_mentioning(change, corpus):
            if path not in affected:
                affected.append(path)

    return affected


def annotate_documentation_impact(
    changes: Iterable[BreakingChange],
    docs: Iterable[DocumentRef | Mapping],
) -> list[str]:
    """Fill ``affected_documentation`` on each change.

    Returns:
        The combined affected paths, as ``analyze_documentation_impact``.
    """
    corpus = [_as_document(doc) for doc in docs]
    changes = list(changes)

    for change in changes:
        change.affected_documentation = _documents_mentioning(change, corpus)

    return analyze_documentation_impact(changes, corpus)


def load_documents(
    paths: Iterable[str | Path],
    extensions: Iterable[str] = DEFAULT_DOC_EXTENSIONS,
    exclude_patterns: Iterable[str] = (),
) -> list[DocumentRef]:
    """Build a documentation corpus from files on disk.

    Args:
        paths: Files or directories to read. Directories are walked recursively.
        extensions: File suffixes to include when walking directories.
        exclude_patterns: Glob patterns matched against each file path.

    Returns:
        Documents sorted by path within each input path.
    """
    suffixes = {ext if ext.startswith(".") else f".{ext}" for ext in extensions}
    excludes = list(exclude_patterns)
    documents: list[DocumentRef] = []

    for root in paths:
        root = Path(root)
        if root.is_file():
            candidates = [root]
        elif root.is_dir():
            candidates = sorted(
                p for p in root.rglob("*") if p.is_file() and p.suffix in suffixes
            )
        else:
            logger.warning(f"Documentation path not found: {root}")
            continue

        for file_path in candidates:
            path_str = file_path.as_posix()
            if any(
                fnmatch.fnmatch(path_str, pattern) or fnmatch.fnmatch(file_path.name, pattern)
                for pattern in excludes
            ):
                continue
            try:
                content = file_path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning(f"Could not read {path_str}: {e}")
                continue
            documents.append(
                DocumentRef(
                    path=path_str,
                    content=content,
                    type=_DOC_TYPES.get(file_path.suffix.lower(), "unknown"),
                )
            )

    logger.debug(f"Loaded {len(documents)} documents")
    return documents
