"""File registration and verification service.

register: validate → hash → dedup check → persist → best-effort chain write
verify:   look up by hash → optional on-chain cross-check

The local write is committed before any chain interaction. Chain failures
are logged and degrade to "no handle" / "unconfirmed"; they never undo or
block a stored record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Union

from pydantic import BaseModel
from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_exponential

from fileproof.clients.starknet import StarknetClient, Submitted, Success, TransportFailure
from fileproof.config import Settings
from fileproof.errors import DuplicateContent, InvalidInput, StoreConflict
from fileproof.felt import FieldElement
from fileproof.hasher import ContentHasher
from fileproof.store import FileRecord, RecordStore

log = logging.getLogger("fileproof.service")


class FileMetadata(BaseModel):
    filename: str
    file_type: str = "application/octet-stream"


@dataclass(frozen=True)
class NotFound:
    content_hash: FieldElement


@dataclass(frozen=True)
class Found:
    record: FileRecord
    chain_cross_check: bool | None = None


VerificationResult = Union[NotFound, Found]


class FileService:
    """Composes hasher, record store, and Starknet client."""

    def __init__(
        self,
        store: RecordStore,
        chain: StarknetClient,
        hasher: ContentHasher | None = None,
        settings: Settings | None = None,
    ):
        self.store = store
        self.chain = chain
        self.hasher = hasher or ContentHasher()
        self.settings = settings or Settings()

    # ── Register ─────────────────────────────────────────────────────

    async def register(self, data: bytes, author_address: str, metadata: FileMetadata) -> FileRecord:
        """Store a new content record and attempt on-chain registration.

        Raises InvalidInput for empty/oversized data, DuplicateContent when
        the hash is already stored (including a StoreConflict from a racing
        insert). Chain problems never raise.
        """
        size = len(data)
        if size == 0:
            raise InvalidInput("File cannot be empty")
        if size > self.settings.max_file_size_bytes:
            raise InvalidInput(
                f"File size {size} exceeds limit of {self.settings.max_file_size_bytes} bytes"
            )

        content_hash = self.hasher.hash(data)
        if self.store.exists(content_hash):
            raise DuplicateContent(
                f"File with hash {content_hash.to_hex()} already exists",
                content_hash=content_hash.to_hex(),
            )

        try:
            record = self.store.insert(
                FileRecord(
                    filename=metadata.filename,
                    file_type=metadata.file_type,
                    file_size_bytes=size,
                    content_hash=content_hash,
                    author_address=author_address,
                    created_at=datetime.now(timezone.utc),
                )
            )
        except StoreConflict as e:
            raise DuplicateContent(str(e), content_hash=e.content_hash) from e
        log.info("Stored %s as %s (author %s)", record.filename, content_hash.to_hex(), author_address)

        handle = await self._register_on_chain(record)
        if handle is None:
            return record

        self.store.update_chain_handle(record.id, handle)
        return self.store.find_by_hash(content_hash) or record.model_copy(
            update={"chain_tx_handle": handle}
        )

    async def _register_on_chain(self, record: FileRecord) -> str | None:
        """Best-effort chain write. Returns the handle or None; never raises."""
        try:
            result = await self.chain.register_file(
                record.content_hash,
                record.filename,
                record.file_type,
                record.file_size_bytes,
            )
        except Exception as e:
            log.warning("Chain registration failed for %s: %s", record.content_hash.to_hex(), e)
            return None

        if isinstance(result, Submitted):
            log.info("Chain registration handle for %s: %s", record.content_hash.to_hex(), result.handle)
            return result.handle

        log.warning("Chain registration failed for %s: %s", record.content_hash.to_hex(), result)
        return None

    # ── Verify ───────────────────────────────────────────────────────

    async def verify(self, content_hash: FieldElement) -> VerificationResult:
        record = self.store.find_by_hash(content_hash)
        if record is None:
            return NotFound(content_hash)

        if not self.settings.cross_check_on_verify:
            return Found(record)

        return Found(record, chain_cross_check=await self._cross_check(content_hash))

    async def _cross_check(self, content_hash: FieldElement) -> bool | None:
        """is_file_registered → True when confirmed, None for anything else.

        Transport failures are retried up to cross_check_attempts in total.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.cross_check_attempts),
            wait=wait_exponential(multiplier=self.settings.cross_check_backoff_seconds, max=10),
            retry=retry_if_result(lambda r: isinstance(r, TransportFailure)),
            retry_error_callback=lambda state: state.outcome.result(),
        )
        result = await retrying(self.chain.call, "is_file_registered", [content_hash])

        if isinstance(result, Success) and result.values == (FieldElement(1),):
            return True
        log.info("Cross-check for %s unconfirmed: %s", content_hash.to_hex(), result)
        return None

    # ── Listing / chain detail ───────────────────────────────────────

    def list_files(self) -> list[FileRecord]:
        return self.store.list_all()

    def files_by_author(self, author_address: str) -> list[FileRecord]:
        return self.store.list_by_author(author_address)

    async def chain_details(self, content_hash: FieldElement) -> dict[str, Any] | None:
        """Decoded verify_file data from the contract, or None if unavailable."""
        return await self.chain.get_file_details(content_hash)
