"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from incident_docs.boundary.db.CRUD import document_crud

    document = await document_crud.get_by_id(db, document_id)
"""

from incident_docs.boundary.db.CRUD.base_crud import BaseCRUD
from incident_docs.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from incident_docs.boundary.db.CRUD.temp_upload_crud import TempUploadCRUD, temp_upload_crud

__all__ = [
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
    "TempUploadCRUD",
    "temp_upload_crud",
]
