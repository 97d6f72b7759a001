"""
Document identification hook.

Document types that generate their own id implement :class:`Identifiable`;
the client calls ``assign_id()`` on each of them before upload. Plain
mappings are sent as-is.
"""

from typing import Any, List, Mapping, Protocol, runtime_checkable


@runtime_checkable
class Identifiable(Protocol):
    """A document that can assign its own id."""

    def assign_id(self) -> None:
        ...


def identify_documents(docs: Any) -> List[Any]:
    """
    Normalize ``docs`` to a list and assign ids where supported.

    Args:
        docs: A single document mapping or a sequence of documents

    Returns:
        List of documents, ready to serialize
    """
    if isinstance(docs, Mapping):
        docs = [docs]
    else:
        docs = list(docs)

    for doc in docs:
        if isinstance(doc, Identifiable):
            doc.assign_id()
    return docs
