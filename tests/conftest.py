"""Pytest fixtures for NoteVault tests."""

from __future__ import annotations

import asyncio
import hashlib
import io
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from PIL import Image
from pypdf import PdfReader, PdfWriter
from reportlab.lib.pagesizes import A4, letter
from reportlab.pdfgen import canvas

from notevault.application.background import BackgroundTasks
from notevault.application.dto.document_dto import Actor
from notevault.application.ports import DeadLetter, StoredObject
from notevault.domain.entities import (
    Document,
    DocumentVersion,
    Favorite,
    Notification,
    ViewLogEntry,
)
from notevault.domain.exceptions import NotFound, StorageUnavailable
from notevault.domain.value_objects import (
    ApprovalStatus,
    ContentHash,
    FileReference,
    MaterialType,
    VersionStatus,
)
from notevault.infrastructure.watermark import PdfWatermarker


# --- PDF helpers ---


def make_pdf(pages: int = 1, text: str = "Lecture notes", pagesize=letter) -> bytes:
    """Small deterministic PDF with one line of text per page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=pagesize, invariant=1)
    for number in range(1, pages + 1):
        c.setFont("Helvetica", 12)
        c.drawString(72, pagesize[1] - 72, f"{text} - page {number}")
        c.showPage()
    c.save()
    return buf.getvalue()


def make_empty_pdf() -> bytes:
    """Structurally valid PDF with zero pages."""
    buf = io.BytesIO()
    PdfWriter().write(buf)
    return buf.getvalue()


def make_logo_png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (40, 20), (200, 30, 30, 255)).save(buf, format="PNG")
    return buf.getvalue()


def page_strings(data: bytes, index: int = 0) -> list[str]:
    """Text shown by Tj/TJ operators on one page."""
    page = PdfReader(io.BytesIO(data)).pages[index]
    contents = page.get_contents()
    if contents is None:
        return []
    shown = []
    for operands, operator in contents.operations:
        if operator == b"Tj":
            shown.append(str(operands[0]))
        elif operator == b"TJ":
            shown.append("".join(str(item) for item in operands[0] if isinstance(item, str)))
    return shown


# --- Fake persistence ---


class FakeDatabase:
    """Shared in-memory tables. Every unit of work reads and writes these."""

    def __init__(self) -> None:
        self.documents: dict[UUID, Document] = {}
        self.versions: dict[UUID, DocumentVersion] = {}
        self.favorites: dict[tuple[str, UUID], Favorite] = {}
        self.view_logs: list[ViewLogEntry] = []
        self.notifications: list[tuple[Notification, list[str]]] = []
        self.row_locks: dict[UUID, asyncio.Lock] = {}
        self.commits = 0
        self.rollbacks = 0

    def lock_for(self, key: UUID) -> asyncio.Lock:
        if key not in self.row_locks:
            self.row_locks[key] = asyncio.Lock()
        return self.row_locks[key]


class FakeDocumentRepository:
    """In-memory document repository."""

    def __init__(self, db: FakeDatabase, uow: FakeUnitOfWork) -> None:
        self._db = db
        self._uow = uow

    async def get_by_id(self, document_id: UUID, for_update: bool = False) -> Document | None:
        if for_update:
            await self._uow.lock(document_id)
        await asyncio.sleep(0)
        return self._db.documents.get(document_id)

    async def list_pending(self, *, limit: int = 50) -> list[Document]:
        pending = [
            d for d in self._db.documents.values() if d.approval_status is ApprovalStatus.PENDING
        ]
        pending.sort(key=lambda d: (d.created_at, d.id))
        return pending[:limit]

    async def create(self, document: Document) -> Document:
        if document.id in self._db.documents:
            raise RuntimeError(f"duplicate key document {document.id}")
        self._db.documents[document.id] = document
        self._uow.on_rollback(lambda: self._db.documents.pop(document.id, None))
        return document

    async def update(self, document: Document) -> Document:
        previous = self._db.documents[document.id]
        self._db.documents[document.id] = document
        self._uow.on_rollback(lambda: self._db.documents.__setitem__(document.id, previous))
        return document

    async def delete(self, document_id: UUID) -> None:
        document = self._db.documents.pop(document_id, None)
        if document is None:
            return
        versions = {k: v for k, v in self._db.versions.items() if v.document_id == document_id}
        favorites = {k: f for k, f in self._db.favorites.items() if f.document_id == document_id}
        for key in versions:
            del self._db.versions[key]
        for key in favorites:
            del self._db.favorites[key]

        def undo() -> None:
            self._db.documents[document_id] = document
            self._db.versions.update(versions)
            self._db.favorites.update(favorites)

        self._uow.on_rollback(undo)

    async def increment_view_count(self, document_id: UUID) -> None:
        document = self._db.documents.get(document_id)
        if document is not None:
            await self.update(replace(document, view_count=document.view_count + 1))

    async def mark_processed(self, document_id: UUID, processed_at: datetime) -> bool:
        document = self._db.documents.get(document_id)
        if document is None:
            return False
        if document.processed_at is None:
            await self.update(replace(document, processed_at=processed_at))
        return True


class FakeDocumentVersionRepository:
    """In-memory version repository. Enforces one live version per document."""

    def __init__(self, db: FakeDatabase, uow: FakeUnitOfWork) -> None:
        self._db = db
        self._uow = uow

    async def get_by_id(self, version_id: UUID, for_update: bool = False) -> DocumentVersion | None:
        if for_update:
            await self._uow.lock(version_id)
        await asyncio.sleep(0)
        return self._db.versions.get(version_id)

    async def list_by_document(self, document_id: UUID) -> list[DocumentVersion]:
        versions = [v for v in self._db.versions.values() if v.document_id == document_id]
        versions.sort(key=lambda v: v.uploaded_at, reverse=True)
        return versions

    async def get_current_live(self, document_id: UUID) -> DocumentVersion | None:
        for version in self._db.versions.values():
            if version.document_id == document_id and version.is_current_live:
                return version
        return None

    async def clear_current_live(self, document_id: UUID) -> None:
        for version in list(self._db.versions.values()):
            if version.document_id == document_id and version.is_current_live:
                await self._put(version.retire())

    async def create(self, version: DocumentVersion) -> DocumentVersion:
        if version.document_id not in self._db.documents:
            raise RuntimeError(f"foreign key violation: document {version.document_id}")
        self._check_single_live(version)
        self._db.versions[version.id] = version
        self._uow.on_rollback(lambda: self._db.versions.pop(version.id, None))
        return version

    async def update(self, version: DocumentVersion) -> DocumentVersion:
        self._check_single_live(version)
        await self._put(version)
        return version

    async def delete(self, version_id: UUID) -> None:
        version = self._db.versions.pop(version_id, None)
        if version is not None:
            self._uow.on_rollback(lambda: self._db.versions.__setitem__(version_id, version))

    async def mark_processed(self, version_id: UUID, processed_at: datetime) -> bool:
        version = self._db.versions.get(version_id)
        if version is None:
            return False
        if version.processed_at is None:
            await self._put(replace(version, processed_at=processed_at))
        return True

    async def list_storage_handles(self, document_id: UUID) -> list[str]:
        return sorted(
            {v.file.storage_handle for v in self._db.versions.values() if v.document_id == document_id}
        )

    async def _put(self, version: DocumentVersion) -> None:
        previous = self._db.versions[version.id]
        await asyncio.sleep(0)
        self._db.versions[version.id] = version
        self._uow.on_rollback(lambda: self._db.versions.__setitem__(version.id, previous))

    def _check_single_live(self, version: DocumentVersion) -> None:
        if not version.is_current_live:
            return
        for other in self._db.versions.values():
            if other.id != version.id and other.document_id == version.document_id and other.is_current_live:
                raise RuntimeError("unique violation: ux_document_version_live")


class FakeFavoriteRepository:
    def __init__(self, db: FakeDatabase, uow: FakeUnitOfWork) -> None:
        self._db = db
        self._uow = uow

    async def add(self, favorite: Favorite) -> None:
        key = (favorite.user_id, favorite.document_id)
        if key in self._db.favorites:
            return
        self._db.favorites[key] = favorite
        self._uow.on_rollback(lambda: self._db.favorites.pop(key, None))

    async def remove(self, user_id: str, document_id: UUID) -> None:
        self._db.favorites.pop((user_id, document_id), None)

    async def is_favorite(self, user_id: str, document_id: UUID) -> bool:
        return (user_id, document_id) in self._db.favorites

    async def list_user_ids(self, document_id: UUID) -> list[str]:
        favorites = [f for f in self._db.favorites.values() if f.document_id == document_id]
        favorites.sort(key=lambda f: f.created_at)
        return [f.user_id for f in favorites]


class FakeViewLogRepository:
    def __init__(self, db: FakeDatabase) -> None:
        self._db = db

    async def record(self, entry: ViewLogEntry) -> None:
        self._db.view_logs.append(entry)


class FakeNotificationRepository:
    def __init__(self, db: FakeDatabase) -> None:
        self._db = db

    async def create(self, notification: Notification, user_ids: list[str]) -> None:
        self._db.notifications.append((notification, list(user_ids)))


class FakeUnitOfWork:
    """Fake UoW over a FakeDatabase. Row locks are held until the UoW ends."""

    def __init__(self, db: FakeDatabase) -> None:
        self._db = db
        self._undo: list[Callable[[], object]] = []
        self._held: list[asyncio.Lock] = []
        self.documents = FakeDocumentRepository(db, self)
        self.versions = FakeDocumentVersionRepository(db, self)
        self.favorites = FakeFavoriteRepository(db, self)
        self.view_logs = FakeViewLogRepository(db)
        self.notifications = FakeNotificationRepository(db)

    async def lock(self, key: UUID) -> None:
        lock = self._db.lock_for(key)
        if any(held is lock for held in self._held):
            return
        await lock.acquire()
        self._held.append(lock)

    def on_rollback(self, undo: Callable[[], object]) -> None:
        self._undo.append(undo)

    async def commit(self) -> None:
        self._undo.clear()
        self._db.commits += 1

    async def rollback(self) -> None:
        for undo in reversed(self._undo):
            undo()
        self._undo.clear()
        self._db.rollbacks += 1

    def release(self) -> None:
        for lock in self._held:
            lock.release()
        self._held.clear()


def make_uow_factory(db: FakeDatabase):
    """UoW factory with commit-or-rollback semantics, like the Postgres one."""

    @asynccontextmanager
    async def factory():
        uow = FakeUnitOfWork(db)
        try:
            yield uow
            await uow.commit()
        except BaseException:
            await uow.rollback()
            raise
        finally:
            uow.release()

    return factory


# --- Fake object store and queue ---


class FakeObjectStore:
    """In-memory blob store with switchable failures."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.overwrites: list[str] = []
        self.fail_puts = False
        self.fail_gets = 0
        self._counter = 0

    async def put(
        self,
        data: bytes,
        *,
        owner_id: str,
        filename: str,
        content_type: str = "application/pdf",
    ) -> StoredObject:
        if self.fail_puts:
            raise StorageUnavailable("put timed out")
        self._counter += 1
        handle = f"notes/{owner_id}_{self._counter}_{filename}"
        self.blobs[handle] = data
        return StoredObject(
            handle=handle,
            url=f"https://files.test/{handle}",
            sha256=hashlib.sha256(data).hexdigest(),
            size_bytes=len(data),
        )

    async def get(self, handle: str) -> bytes:
        if self.fail_gets:
            self.fail_gets -= 1
            raise StorageUnavailable("get timed out")
        if handle not in self.blobs:
            raise NotFound(f"Object {handle} not found")
        return self.blobs[handle]

    async def overwrite(self, handle: str, data: bytes) -> None:
        if handle not in self.blobs:
            raise NotFound(f"Object {handle} not found")
        self.blobs[handle] = data
        self.overwrites.append(handle)

    async def delete(self, handle: str) -> None:
        if handle not in self.blobs:
            raise NotFound(f"Object {handle} not found")
        del self.blobs[handle]
        self.deleted.append(handle)


class FakeJobQueue:
    """Records enqueued jobs; dead letters are seeded by tests."""

    def __init__(self) -> None:
        self.jobs: list = []
        self.dead: dict[str, DeadLetter] = {}
        self.replayed: list[str] = []
        self.fail_enqueue = False

    async def enqueue(self, job) -> str:
        if self.fail_enqueue:
            raise ConnectionError("redis is down")
        self.jobs.append(job)
        return f"job-{len(self.jobs)}"

    async def list_dead_letters(self, limit: int = 50) -> list[DeadLetter]:
        return list(self.dead.values())[:limit]

    async def replay_dead_letter(self, job_id: str) -> bool:
        if self.dead.pop(job_id, None) is None:
            return False
        self.replayed.append(job_id)
        return True


# --- Builders ---


MEMBER = Actor(user_id="user-1", username="alice")
OTHER_MEMBER = Actor(user_id="user-2", username="bob")
ADMIN = Actor(user_id="admin-1", username="root", is_admin=True)


def build_document(
    *,
    owner_id: str = MEMBER.user_id,
    status: ApprovalStatus = ApprovalStatus.APPROVED,
    handle: str = "notes/master.pdf",
    processed: bool = True,
    title: str = "Linear Algebra",
    **kwargs,
) -> Document:
    now = datetime.now(UTC)
    return Document(
        id=kwargs.pop("id", None) or uuid4(),
        title=title,
        owner_id=owner_id,
        material_type=MaterialType.PERSONAL,
        is_free=False,
        approval_status=status,
        file=FileReference(url=f"https://files.test/{handle}", storage_handle=handle),
        created_at=now,
        updated_at=now,
        processed_at=now if processed else None,
        **kwargs,
    )


def build_version(
    document: Document,
    *,
    handle: str,
    processed: bool = True,
    live: bool = False,
    title: str = "Linear Algebra v2",
    data: bytes = b"%PDF-version",
) -> DocumentVersion:
    now = datetime.now(UTC)
    return DocumentVersion(
        id=uuid4(),
        document_id=document.id,
        uploader_id=document.owner_id,
        title=title,
        file=FileReference(url=f"https://files.test/{handle}", storage_handle=handle),
        content_hash=str(ContentHash.of(data)),
        status=VersionStatus.APPROVED if live else VersionStatus.PENDING,
        uploaded_at=now,
        is_current_live=live,
        processed_at=now if processed else None,
    )


# --- Fixtures ---


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def uow_factory(db: FakeDatabase):
    return make_uow_factory(db)


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def job_queue() -> FakeJobQueue:
    return FakeJobQueue()


@pytest.fixture
def watermarker() -> PdfWatermarker:
    return PdfWatermarker()


@pytest_asyncio.fixture
async def background() -> AsyncIterator[BackgroundTasks]:
    tasks = BackgroundTasks()
    yield tasks
    await tasks.drain()


@pytest.fixture
def pdf_bytes() -> bytes:
    return make_pdf(pages=2)


@pytest.fixture
def a4_pdf_bytes() -> bytes:
    return make_pdf(pages=1, pagesize=A4)


@pytest.fixture
def logo_png() -> bytes:
    return make_logo_png()
