"""
HTTP API for storing and decrypting secure transaction records.

Routes:
    GET  /                 health check
    POST /tx/encrypt       encrypt {"partyId", "payload"} and store the record
    GET  /tx/{id}          fetch a stored record
    POST /tx/{id}/decrypt  decrypt a stored record and return its payload

Decryption failures are reported with one generic message; the reason is only
logged server side.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .crypto import KeyLike, key_bytes
from .envelope import encrypt_envelope, open_envelope
from .errors import ConfigError, EnvelopeError, StorageError
from .storage import InMemoryRecordStore, RecordStore

logger = logging.getLogger(__name__)


class MasterKeyProvider:
    """
    Resolves the master key once and reuses it.

    An explicit key wins over settings. A missing or invalid key raises
    ConfigError on every use, so health checks keep working without one.
    """

    def __init__(self, settings: Settings, master_key: Optional[KeyLike] = None) -> None:
        self._settings = settings
        self._master_key: Optional[bytes] = (
            key_bytes(master_key) if master_key is not None else None
        )

    def get(self) -> bytes:
        if self._master_key is None:
            self._master_key = self._settings.master_key()
        return self._master_key

    def check(self) -> None:
        """Log the master key status without raising."""
        if self._master_key is None and not self._settings.master_key_hex:
            logger.warning("MASTER_KEY not set at startup - crypto operations will fail")
            return
        try:
            self.get()
        except ConfigError as e:
            logger.error("Master key validation failed: %s", e)
        else:
            logger.info("Master key validated successfully")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_master_key_provider(request: Request) -> MasterKeyProvider:
    return request.app.state.master_key_provider


def _validate_encrypt_body(body: Any) -> Optional[str]:
    """Return a client error message, or None when the body is acceptable."""
    if not isinstance(body, dict):
        return "Request body must be a valid JSON object"
    party_id = body.get("partyId")
    if party_id is None:
        return "partyId is required"
    if not isinstance(party_id, str):
        return "partyId must be a string"
    try:
        party_id.encode("utf-8")
    except UnicodeEncodeError:
        return "partyId must be a valid UTF-8 string"
    if not party_id.strip():
        return "partyId cannot be empty"
    if "payload" not in body:
        return "payload is required"
    return None


def create_app(
    store: Optional[RecordStore] = None,
    master_key: Optional[KeyLike] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Record store; a fresh InMemoryRecordStore by default
        master_key: Explicit 32-byte master key, overriding settings
        settings: Settings; loaded from the environment by default
    """
    settings = settings if settings is not None else load_settings()
    provider = MasterKeyProvider(settings, master_key)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        provider.check()
        yield

    app = FastAPI(title="Secure Envelope API", lifespan=lifespan)
    app.state.store = store if store is not None else InMemoryRecordStore()
    app.state.master_key_provider = provider

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        allow_credentials=False,
    )

    @app.get("/")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/tx/encrypt")
    async def encrypt_transaction(
        request: Request,
        store: RecordStore = Depends(get_store),
        keys: MasterKeyProvider = Depends(get_master_key_provider),
    ):
        try:
            body = await request.json()
        except ValueError:
            body = None

        problem = _validate_encrypt_body(body)
        if problem is not None:
            return _error(400, problem)

        party_id = body["partyId"]
        logger.info("Encrypt request received (partyId=%s)", party_id)

        try:
            record = encrypt_envelope(party_id, body["payload"], keys.get())
            await store.put(record)
        except ConfigError as e:
            logger.error("Encryption refused, configuration error: %s", e)
            return _error(500, "Server configuration error")
        except StorageError as e:
            logger.error("Failed to store record for partyId=%s: %s", party_id, e)
            return _error(500, "Failed to store transaction")
        except EnvelopeError as e:
            logger.error(
                "Encryption operation failed (partyId=%s): %s", party_id, type(e).__name__
            )
            return _error(400, "Encryption failed")

        logger.info("Transaction encrypted and stored (txId=%s, partyId=%s)", record.id, party_id)
        return record.to_dict()

    @app.get("/tx/{tx_id}")
    async def get_transaction(tx_id: str, store: RecordStore = Depends(get_store)):
        record = await store.get(tx_id)
        if record is None:
            logger.warning("Transaction not found (txId=%s)", tx_id)
            return _error(404, "Transaction not found")

        logger.info("Transaction retrieved (txId=%s)", tx_id)
        return record.to_dict()

    @app.post("/tx/{tx_id}/decrypt")
    async def decrypt_transaction(
        tx_id: str,
        store: RecordStore = Depends(get_store),
        keys: MasterKeyProvider = Depends(get_master_key_provider),
    ):
        logger.info("Decrypt request received (txId=%s)", tx_id)

        record = await store.get(tx_id)
        if record is None:
            logger.warning("Transaction not found for decryption (txId=%s)", tx_id)
            return _error(404, "Transaction not found")

        try:
            payload = open_envelope(record, keys.get())
        except ConfigError as e:
            logger.error("Decryption refused, configuration error: %s", e)
            return _error(500, "Server configuration error")
        except EnvelopeError as e:
            logger.warning(
                "Decryption failed - possible tampering or data corruption (txId=%s, %s: %s)",
                tx_id,
                type(e).__name__,
                e,
            )
            return _error(400, "Decryption failed")

        logger.info("Transaction decrypted successfully (txId=%s)", tx_id)
        return {"payload": payload}

    return app
