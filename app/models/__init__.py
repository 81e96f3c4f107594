from .stored_document import StoredDocument
from .document_unique_key import DocumentUniqueKey

__all__ = [
    "StoredDocument",
    "DocumentUniqueKey"
]
