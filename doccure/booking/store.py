"""
Document Store — collections of JSON documents persisted as GCS objects.

Each document lives at ``<database>/<collection>/<_id>.json``.  Writes that
must not interleave with other writers (in this process or any other) use
GCS generation-match preconditions: a document is read together with its
generation, and the write or delete is only accepted if the generation is
unchanged.  A rejected write re-reads and tries again.

Every call is a coroutine; the blocking GCS client runs in a worker thread.

Lifecycle: ``connect()`` during app startup, ``close()`` on shutdown.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from typing import Any, Callable, Optional

from google.api_core.exceptions import NotFound, PreconditionFailed

from doccure.booking.errors import (
    NotFoundError,
    StoreConflictError,
    StoreUnavailableError,
)
from doccure.booking.models import new_id

logger = logging.getLogger("doccure.store")

Document = dict[str, Any]
Predicate = Callable[[Document], bool]

# Generation 0 means "the object must not exist yet".
_MUST_NOT_EXIST = 0


class DocumentStore:
    """
    Named collections of documents keyed by ``_id``.

    Documents are serialized on every write and parsed on every read, so
    callers never share mutable state with the store.
    """

    # HTTP timeout for individual GCS operations (seconds)
    GCS_TIMEOUT = 30
    # Attempts at a conditional write before giving up on a contended document
    MAX_WRITE_ATTEMPTS = 64

    def __init__(self, gcs_bucket_manager, database_name: str = "doccure") -> None:
        self._gcs = gcs_bucket_manager
        self.database_name = database_name
        self._connected = False

    # ── Lifecycle ──

    async def connect(self) -> None:
        await asyncio.to_thread(self._gcs._ensure_initialized)
        self._connected = True
        logger.info("Document store '%s' connected", self.database_name)

    async def close(self) -> None:
        self._connected = False
        logger.info("Document store '%s' closed", self.database_name)

    @property
    def connected(self) -> bool:
        return self._connected

    # ── Reads ──

    async def find_one(self, collection: str, doc_id: str) -> Optional[Document]:
        doc, _ = await self._run(self._read, collection, doc_id)
        return doc

    async def find(
        self, collection: str, predicate: Predicate | None = None
    ) -> list[Document]:
        docs = await self._run(self._scan, collection)
        return [doc for doc in docs if predicate is None or predicate(doc)]

    # ── Writes ──

    async def insert_one(self, collection: str, doc: Document) -> Document:
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", new_id())
        try:
            await self._run(self._write, collection, stored["_id"], stored, _MUST_NOT_EXIST)
        except PreconditionFailed:
            raise ValueError(f"Duplicate _id {stored['_id']} in {collection}") from None
        return stored

    async def update_one(
        self, collection: str, doc_id: str, fields: Document
    ) -> Optional[Document]:
        """Set ``fields`` on a document.  Returns the updated copy or None."""
        for _ in range(self.MAX_WRITE_ATTEMPTS):
            doc, generation = await self._run(self._read, collection, doc_id)
            if doc is None:
                return None
            doc.update(copy.deepcopy(fields))
            try:
                await self._run(self._write, collection, doc_id, doc, generation)
            except (PreconditionFailed, NotFound):
                continue
            return doc
        raise self._contended(collection, doc_id)

    async def delete_one(self, collection: str, doc_id: str) -> Optional[Document]:
        """
        Remove a document and return it as it was at the moment of removal.

        Returns None when the document does not exist (or another caller
        removed it first).
        """
        for _ in range(self.MAX_WRITE_ATTEMPTS):
            doc, generation = await self._run(self._read, collection, doc_id)
            if doc is None:
                return None
            try:
                await self._run(self._remove, collection, doc_id, generation)
            except PreconditionFailed:
                continue
            except NotFound:
                return None
            return doc
        raise self._contended(collection, doc_id)

    async def conditional_increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        delta: int,
        guard: Predicate,
    ) -> Optional[Document]:
        """
        Atomically add ``delta`` to an integer field when ``guard(doc)`` holds.

        The guard is evaluated against the same generation the write is
        conditioned on, so no other writer can slip in between check and
        apply.  Returns the updated document, or None when the guard refused.
        Raises NotFoundError if the document does not exist.
        """
        for _ in range(self.MAX_WRITE_ATTEMPTS):
            doc, generation = await self._run(self._read, collection, doc_id)
            if doc is None:
                raise NotFoundError(f"No document {doc_id} in {collection}")
            if not guard(doc):
                return None
            doc[field] = int(doc.get(field) or 0) + delta
            try:
                await self._run(self._write, collection, doc_id, doc, generation)
            except PreconditionFailed:
                continue
            except NotFound:
                raise NotFoundError(f"No document {doc_id} in {collection}") from None
            return doc
        raise self._contended(collection, doc_id)

    # ── Seeding ──

    async def seed(self, collection: str, docs: list[Document]) -> int:
        """Insert fixture documents, leaving any that already exist untouched."""
        inserted = 0
        for doc in docs:
            try:
                await self.insert_one(collection, doc)
            except ValueError:
                logger.debug("Seed document %s already in %s", doc.get("_id"), collection)
                continue
            inserted += 1
        logger.info("Seeded %d/%d documents into %s", inserted, len(docs), collection)
        return inserted

    async def seed_from_file(self, path: str) -> int:
        """Load ``{"collection": [docs...]}`` fixtures from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            fixtures = json.load(f)
        total = 0
        for collection, docs in fixtures.items():
            total += await self.seed(collection, docs)
        return total

    # ── Internal ──

    async def _run(self, fn, *args):
        if not self._connected:
            raise StoreUnavailableError(
                f"Document store '{self.database_name}' is not connected"
            )
        return await asyncio.to_thread(fn, *args)

    def _prefix(self, collection: str) -> str:
        return f"{self.database_name}/{collection}/"

    def _blob(self, collection: str, doc_id: str):
        return self._gcs.bucket.blob(f"{self._prefix(collection)}{doc_id}.json")

    def _read(self, collection: str, doc_id: str) -> tuple[Optional[Document], int]:
        blob = self._blob(collection, doc_id)
        try:
            content = blob.download_as_text(timeout=self.GCS_TIMEOUT)
        except NotFound:
            return None, _MUST_NOT_EXIST
        return json.loads(content), blob.generation or 0

    def _scan(self, collection: str) -> list[Document]:
        docs = []
        for blob in self._gcs.bucket.list_blobs(
            prefix=self._prefix(collection), timeout=self.GCS_TIMEOUT
        ):
            try:
                docs.append(json.loads(blob.download_as_text(timeout=self.GCS_TIMEOUT)))
            except NotFound:
                # Deleted between listing and download
                continue
        return docs

    def _write(self, collection: str, doc_id: str, doc: Document, generation: int) -> None:
        self._blob(collection, doc_id).upload_from_string(
            json.dumps(doc),
            content_type="application/json",
            if_generation_match=generation,
            timeout=self.GCS_TIMEOUT,
        )

    def _remove(self, collection: str, doc_id: str, generation: int) -> None:
        self._blob(collection, doc_id).delete(
            if_generation_match=generation, timeout=self.GCS_TIMEOUT
        )

    def _contended(self, collection: str, doc_id: str) -> StoreConflictError:
        logger.error(
            "Gave up writing %s/%s after %d conflicting attempts",
            collection, doc_id, self.MAX_WRITE_ATTEMPTS,
        )
        return StoreConflictError(f"Document {doc_id} in {collection} is busy, retry later")
