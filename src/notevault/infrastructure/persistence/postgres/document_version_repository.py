"""PostgreSQL document version repository implementation."""

from datetime import datetime
from uuid import UUID

from psycopg import AsyncConnection

from notevault.domain.entities import DocumentVersion
from notevault.domain.value_objects import FileReference, VersionStatus

_COLUMNS = (
    "id, document_id, uploader_id, title, file_url, storage_handle, content_hash, status, "
    "uploaded_at, is_current_live, previous_version_id, processed_at"
)


def _row_to_version(r: tuple) -> DocumentVersion:
    return DocumentVersion(
        id=r[0],
        document_id=r[1],
        uploader_id=r[2],
        title=r[3],
        file=FileReference(url=r[4], storage_handle=r[5]),
        content_hash=r[6],
        status=VersionStatus(r[7]),
        uploaded_at=r[8],
        is_current_live=r[9],
        previous_version_id=r[10],
        processed_at=r[11],
    )


class PostgresDocumentVersionRepository:
    """Document version repository implementation.

    At most one live version per document is enforced by the partial unique
    index ``ux_document_version_live``.
    """

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, version_id: UUID, for_update: bool = False) -> DocumentVersion | None:
        q = f"SELECT {_COLUMNS} FROM document_version WHERE id = %s"
        if for_update:
            q += " FOR UPDATE"
        cur = await self._conn.execute(q, (version_id,))
        r = await cur.fetchone()
        if not r:
            return None
        return _row_to_version(r)

    async def list_by_document(self, document_id: UUID) -> list[DocumentVersion]:
        """Versions of a document, newest first."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM document_version WHERE document_id = %s "
            "ORDER BY uploaded_at DESC, id",
            (document_id,),
        )
        rows = await cur.fetchall()
        return [_row_to_version(r) for r in rows]

    async def get_current_live(self, document_id: UUID) -> DocumentVersion | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM document_version WHERE document_id = %s AND is_current_live",
            (document_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return _row_to_version(r)

    async def clear_current_live(self, document_id: UUID) -> None:
        await self._conn.execute(
            "UPDATE document_version SET is_current_live = FALSE "
            "WHERE document_id = %s AND is_current_live",
            (document_id,),
        )

    async def create(self, version: DocumentVersion) -> DocumentVersion:
        await self._conn.execute(
            f"INSERT INTO document_version ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                version.id,
                version.document_id,
                version.uploader_id,
                version.title,
                version.file.url,
                version.file.storage_handle,
                version.content_hash,
                version.status.value,
                version.uploaded_at,
                version.is_current_live,
                version.previous_version_id,
                version.processed_at,
            ),
        )
        return version

    async def update(self, version: DocumentVersion) -> DocumentVersion:
        await self._conn.execute(
            "UPDATE document_version SET title=%s, status=%s, is_current_live=%s, processed_at=%s "
            "WHERE id=%s",
            (
                version.title,
                version.status.value,
                version.is_current_live,
                version.processed_at,
                version.id,
            ),
        )
        return version

    async def delete(self, version_id: UUID) -> None:
        await self._conn.execute("DELETE FROM document_version WHERE id = %s", (version_id,))

    async def mark_processed(self, version_id: UUID, processed_at: datetime) -> bool:
        """Record finished provenance stamping. Returns False if the row is gone."""
        cur = await self._conn.execute(
            "UPDATE document_version SET processed_at = %s WHERE id = %s AND processed_at IS NULL",
            (processed_at, version_id),
        )
        if cur.rowcount:
            return True
        cur = await self._conn.execute("SELECT 1 FROM document_version WHERE id = %s", (version_id,))
        return await cur.fetchone() is not None

    async def list_storage_handles(self, document_id: UUID) -> list[str]:
        cur = await self._conn.execute(
            "SELECT DISTINCT storage_handle FROM document_version WHERE document_id = %s",
            (document_id,),
        )
        rows = await cur.fetchall()
        return [r[0] for r in rows]
