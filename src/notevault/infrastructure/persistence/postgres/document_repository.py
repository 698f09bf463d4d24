"""PostgreSQL document repository implementation."""

from datetime import datetime
from uuid import UUID

from psycopg import AsyncConnection

from notevault.domain.entities import Document
from notevault.domain.value_objects import ApprovalStatus, FileReference, MaterialType

_COLUMNS = (
    "id, title, owner_id, material_type, is_free, approval_status, file_url, storage_handle, "
    "rejection_reason, view_count, created_at, updated_at, expires_at, processed_at, "
    "course, subject, field, university_name"
)


def _row_to_document(r: tuple) -> Document:
    return Document(
        id=r[0],
        title=r[1],
        owner_id=r[2],
        material_type=MaterialType(r[3]),
        is_free=r[4],
        approval_status=ApprovalStatus(r[5]),
        file=FileReference(url=r[6], storage_handle=r[7]),
        rejection_reason=r[8],
        view_count=r[9],
        created_at=r[10],
        updated_at=r[11],
        expires_at=r[12],
        processed_at=r[13],
        course=r[14],
        subject=r[15],
        field=r[16],
        university_name=r[17],
    )


class PostgresDocumentRepository:
    """Document repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, document_id: UUID, for_update: bool = False) -> Document | None:
        """Get document by id. ``for_update`` locks the row until the transaction ends."""
        q = f"SELECT {_COLUMNS} FROM document WHERE id = %s"
        if for_update:
            q += " FOR UPDATE"
        cur = await self._conn.execute(q, (document_id,))
        r = await cur.fetchone()
        if not r:
            return None
        return _row_to_document(r)

    async def list_pending(self, *, limit: int = 50) -> list[Document]:
        """Pending documents, oldest first."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM document WHERE approval_status = %s ORDER BY created_at, id LIMIT %s",
            (ApprovalStatus.PENDING.value, limit),
        )
        rows = await cur.fetchall()
        return [_row_to_document(r) for r in rows]

    async def create(self, document: Document) -> Document:
        await self._conn.execute(
            f"INSERT INTO document ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                document.id,
                document.title,
                document.owner_id,
                document.material_type.value,
                document.is_free,
                document.approval_status.value,
                document.file.url,
                document.file.storage_handle,
                document.rejection_reason,
                document.view_count,
                document.created_at,
                document.updated_at,
                document.expires_at,
                document.processed_at,
                document.course,
                document.subject,
                document.field,
                document.university_name,
            ),
        )
        return document

    async def update(self, document: Document) -> Document:
        """Update mutable fields. View count is only changed by increment_view_count."""
        await self._conn.execute(
            "UPDATE document SET title=%s, is_free=%s, approval_status=%s, file_url=%s, "
            "storage_handle=%s, rejection_reason=%s, updated_at=%s, expires_at=%s, processed_at=%s "
            "WHERE id=%s",
            (
                document.title,
                document.is_free,
                document.approval_status.value,
                document.file.url,
                document.file.storage_handle,
                document.rejection_reason,
                document.updated_at,
                document.expires_at,
                document.processed_at,
                document.id,
            ),
        )
        return document

    async def delete(self, document_id: UUID) -> None:
        """Hard delete; versions, favorites and view logs cascade."""
        await self._conn.execute("DELETE FROM document WHERE id = %s", (document_id,))

    async def increment_view_count(self, document_id: UUID) -> None:
        await self._conn.execute(
            "UPDATE document SET view_count = view_count + 1 WHERE id = %s",
            (document_id,),
        )

    async def mark_processed(self, document_id: UUID, processed_at: datetime) -> bool:
        """Record finished provenance stamping. Returns False if the row is gone."""
        cur = await self._conn.execute(
            "UPDATE document SET processed_at = %s WHERE id = %s AND processed_at IS NULL",
            (processed_at, document_id),
        )
        if cur.rowcount:
            return True
        cur = await self._conn.execute("SELECT 1 FROM document WHERE id = %s", (document_id,))
        return await cur.fetchone() is not None
