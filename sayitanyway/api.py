"""
sayitanyway/api.py
─────────────────────────────────────────────────────────────────────────────
Say It Anyway core — dual-mode API layer

TWO USAGE MODES:
  1. Importable facade (UI layer calls it directly):
         from sayitanyway.api import SayItAnywayAPI
         api = SayItAnywayAPI(store=MemoryStore())
         verdict = api.screen("...")
         ok = await api.deduct(90)

  2. FastAPI HTTP server (local UI via fetch()):
         python -m sayitanyway.api                # default: port 8765
         uvicorn sayitanyway.api:app --port 8765

ENDPOINTS:
  POST /screen                     — screen text, return verdict
  GET  /recording-time             — ledger record (lazy monthly reset applied)
  GET  /recording-time/total       — total seconds available
  GET  /recording-time/next-pool   — pool the next deduction draws from
  POST /recording-time/deduct      — all-or-nothing deduction
  GET  /subscription               — tier + ad visibility
  POST /subscription/activate      — store billing activation
  POST /subscription/deactivate    — store billing deactivation
  POST /subscription/extra-time    — extra-time purchase (+60 min)
  POST /subscription/unlock        — access-code unlock
  POST /messages                   — save a message (charge, screen)
  GET  /messages                   — list saved messages
  POST /messages/{id}/hidden       — hide / unhide a message
  DELETE /messages/{id}            — delete a message
  GET  /support-resources          — crisis resources
  GET  /health                     — health check

PRIVACY NOTE:
  All data stays on-device. The server binds to 127.0.0.1 by default.
  Message text is never logged.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from sayitanyway import __version__
from sayitanyway.compose.workflow import ComposeService, InsufficientRecordingTimeError
from sayitanyway.config import build_store, load_config
from sayitanyway.entitlements.ledger import RecordingTimeLedger
from sayitanyway.entitlements.subscription import (
    BillingUnavailableError,
    SubscriptionManager,
)
from sayitanyway.screening.engine import screen
from sayitanyway.storage.base import KeyValueStore, StorageError
from sayitanyway.support_resources import get_support_resources

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# IMPORTABLE CLASS: UI layer interface
# ═══════════════════════════════════════════════════════════════════════════

class SayItAnywayAPI:
    """
    Pure-Python facade over the screening engine, ledger, subscription
    manager and compose workflow. Every method returns plain data.

    Usage:
        api = SayItAnywayAPI(store=JsonFileStore(Path("data")))
        verdict = api.screen("I miss you so much")
        balance = await api.get_recording_time()
        ok      = await api.deduct(120)
    """

    def __init__(
        self,
        store:             KeyValueStore,
        billing_available: bool = True,
        clock:             Optional[Callable[[], datetime]] = None,
    ):
        self.store         = store
        self.ledger        = RecordingTimeLedger(store, clock=clock)
        self.subscriptions = SubscriptionManager(
            store, ledger=self.ledger, billing_available=billing_available,
        )
        self.composer      = ComposeService(store, ledger=self.ledger)

    # ── SCREENING ─────────────────────────────────────────────────────────

    @staticmethod
    def screen(text: str) -> Dict[str, Any]:
        return screen(text).to_dict()

    # ── LEDGER ────────────────────────────────────────────────────────────

    async def get_recording_time(self) -> Dict[str, Any]:
        record = await self.ledger.get_recording_time()
        return {**record.to_dict(), 'total': record.total}

    async def get_total(self) -> int:
        return await self.ledger.get_total_recording_time()

    async def get_next_pool(self) -> Dict[str, Any]:
        info = await self.ledger.get_next_pool_info()
        return info.to_dict()

    async def deduct(self, seconds: int) -> bool:
        return await self.ledger.deduct_recording_time(seconds)

    # ── SUBSCRIPTION ──────────────────────────────────────────────────────

    async def get_subscription(self, screen_name: Optional[str] = None) -> Dict[str, Any]:
        status = await self.subscriptions.get_status()
        return {
            **status.to_dict(),
            'isSubscriber':  status.is_subscriber,
            'shouldShowAds': await self.subscriptions.should_show_ads(screen_name),
        }

    async def activate_subscription(self) -> Dict[str, Any]:
        status = await self.subscriptions.activate_subscription()
        return status.to_dict()

    async def deactivate_subscription(self) -> Dict[str, Any]:
        status = await self.subscriptions.deactivate_subscription()
        return status.to_dict()

    async def purchase_extra_time(self) -> Dict[str, Any]:
        record = await self.subscriptions.purchase_extra_time()
        return {**record.to_dict(), 'total': record.total}

    async def unlock(self, code: str) -> bool:
        return await self.subscriptions.unlock_with_code(code)

    # ── MESSAGES ──────────────────────────────────────────────────────────

    async def save_message(self, **kwargs: Any) -> Dict[str, Any]:
        outcome = await self.composer.save_message(**kwargs)
        return {
            'message':           outcome.message.to_dict(),
            'screening':         outcome.screening.to_dict(),
            'redirectToSupport': outcome.redirect_to_support,
        }

    async def list_messages(
        self,
        recipient_id:   Optional[str] = None,
        include_hidden: bool          = True,
    ) -> List[Dict[str, Any]]:
        messages = await self.composer.list_messages(recipient_id, include_hidden=include_hidden)
        return [m.to_dict() for m in messages]

    async def set_message_hidden(self, message_id: str, hidden: bool = True) -> Optional[Dict[str, Any]]:
        message = await self.composer.set_message_hidden(message_id, hidden)
        return message.to_dict() if message else None

    async def delete_message(self, message_id: str) -> bool:
        return await self.composer.delete_message(message_id)


# ═══════════════════════════════════════════════════════════════════════════
# FASTAPI HTTP APP
# ═══════════════════════════════════════════════════════════════════════════

class ScreenRequest(BaseModel):
    text: str = ""


class DeductRequest(BaseModel):
    seconds: int = Field(..., ge=0)


class UnlockRequest(BaseModel):
    code: str


class HideRequest(BaseModel):
    hidden: bool = True


class MessageRequest(BaseModel):
    recipient_id:     str
    type:             str = "text"
    text_content:     Optional[str] = None
    audio_uri:        Optional[str] = None
    duration_seconds: int = Field(0, ge=0)


def build_app(
    api:    Optional[SayItAnywayAPI] = None,
    config: Optional[Dict[str, Any]] = None,
) -> FastAPI:
    """
    Build and return the FastAPI application instance.
    If no facade is given, one is built from config (or the config file).
    """
    if api is None:
        config = config or load_config()
        api = SayItAnywayAPI(
            store             = build_store(config),
            billing_available = bool(config.get("billing_available", True)),
        )
    _api = api

    _app = FastAPI(
        title       = "Say It Anyway Core API",
        description = "Message screening and recording-time ledger — local API for the app UI",
        version     = __version__,
        docs_url    = "/docs",
        redoc_url   = None,
    )

    # CORS: only allow localhost origins
    _app.add_middleware(
        CORSMiddleware,
        allow_origins     = [
            "http://localhost",
            "http://localhost:8765",
            "http://127.0.0.1",
            "http://127.0.0.1:8765",
        ],
        allow_methods     = ["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers     = ["Content-Type"],
        allow_credentials = False,
    )

    # ── ENDPOINTS ───────────────────────────────────────────────────────

    @_app.post("/screen", summary="Screen text for self-harm risk")
    async def screen_text(req: ScreenRequest):
        """Pure rule-based screening. Never fails for any string."""
        return _api.screen(req.text)

    @_app.get("/recording-time", summary="Recording time balance")
    async def get_recording_time():
        try:
            return await _api.get_recording_time()
        except StorageError as exc:
            logger.error(f"Recording time read failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))

    @_app.get("/recording-time/total", summary="Total seconds available")
    async def get_total():
        try:
            return {"total": await _api.get_total()}
        except StorageError as exc:
            logger.error(f"Recording time read failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))

    @_app.get("/recording-time/next-pool", summary="Next pool to draw from")
    async def get_next_pool():
        try:
            return await _api.get_next_pool()
        except StorageError as exc:
            logger.error(f"Recording time read failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))

    @_app.post("/recording-time/deduct", summary="Deduct recording time")
    async def deduct(req: DeductRequest):
        """
        All-or-nothing. `deducted: false` means insufficient time —
        an expected outcome, so the status code stays 200.
        """
        try:
            ok = await _api.deduct(req.seconds)
            return {"deducted": ok, "total": await _api.get_total()}
        except StorageError as exc:
            logger.error(f"Deduction failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))

    @_app.get("/subscription", summary="Subscription status")
    async def get_subscription(
        screen_name: Optional[str] = Query(None, description="Screen asking about ad visibility"),
    ):
        try:
            return await _api.get_subscription(screen_name)
        except StorageError as exc:
            logger.error(f"Subscription read failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))

    @_app.post("/subscription/activate", summary="Store subscription activated")
    async def activate_subscription():
        try:
            return await _api.activate_subscription()
        except BillingUnavailableError as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        except StorageError as exc:
            logger.error(f"Activation failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))

    @_app.post("/subscription/deactivate", summary="Store subscription ended")
    async def deactivate_subscription():
        try:
            return await _api.deactivate_subscription()
        except StorageError as exc:
            logger.error(f"Deactivation failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))

    @_app.post("/subscription/extra-time", summary="Extra recording time purchased")
    async def purchase_extra_time():
        try:
            return await _api.purchase_extra_time()
        except BillingUnavailableError as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        except StorageError as exc:
            logger.error(f"Extra time purchase failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))

    @_app.post("/subscription/unlock", summary="Unlock with access code")
    async def unlock(req: UnlockRequest):
        try:
            unlocked = await _api.unlock(req.code)
        except StorageError as exc:
            logger.error(f"Unlock failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))
        if not unlocked:
            raise HTTPException(status_code=400, detail="Invalid access code")
        return {"unlocked": True, "subscription": await _api.get_subscription()}

    @_app.post("/messages", summary="Save a message")
    async def save_message(req: MessageRequest):
        """
        Audio saves are charged against recording time first; a shortfall
        returns 400 and nothing is saved. A flagged screening never blocks
        the save — it sets redirectToSupport.
        """
        try:
            return await _api.save_message(
                recipient_id     = req.recipient_id,
                message_type     = req.type,
                text_content     = req.text_content,
                audio_uri        = req.audio_uri,
                duration_seconds = req.duration_seconds,
            )
        except (ValueError, InsufficientRecordingTimeError) as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except StorageError as exc:
            logger.error(f"Message save failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))

    @_app.get("/messages", summary="List saved messages")
    async def list_messages(
        recipient_id:   Optional[str] = Query(None, description="Filter by recipient"),
        include_hidden: bool          = Query(True, description="Include hidden messages"),
    ):
        try:
            data = await _api.list_messages(recipient_id, include_hidden=include_hidden)
        except StorageError as exc:
            logger.error(f"Message list failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))
        return {"count": len(data), "messages": data}

    @_app.post("/messages/{message_id}/hidden", summary="Hide or unhide a message")
    async def set_message_hidden(message_id: str, req: HideRequest):
        try:
            message = await _api.set_message_hidden(message_id, req.hidden)
        except StorageError as exc:
            logger.error(f"Message update failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))
        if message is None:
            raise HTTPException(status_code=404, detail=f"Message not found: {message_id}")
        return message

    @_app.delete("/messages/{message_id}", summary="Delete a message")
    async def delete_message(message_id: str):
        try:
            deleted = await _api.delete_message(message_id)
        except StorageError as exc:
            logger.error(f"Message delete failed: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(exc))
        if not deleted:
            raise HTTPException(status_code=404, detail=f"Message not found: {message_id}")
        return {"deleted": True, "id": message_id}

    @_app.get("/support-resources", summary="Crisis resources")
    async def support_resources(urgent_only: bool = Query(False)):
        return {"resources": get_support_resources(urgent_only=urgent_only)}

    @_app.get("/health", summary="Health check")
    async def health():
        return {
            "status":  "ok",
            "store":   type(_api.store).__name__,
            "version": __version__,
        }

    return _app


# Module-level app instance, used by uvicorn sayitanyway.api:app
app = build_app()


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT: python -m sayitanyway.api
# ═══════════════════════════════════════════════════════════════════════════

def serve(host: str = "127.0.0.1", port: int = 8765, config: Optional[Dict[str, Any]] = None) -> None:
    import uvicorn

    server_app = build_app(config=config)
    logger.info(f"Serving Say It Anyway core API on http://{host}:{port}")
    uvicorn.run(server_app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        prog        = "sayitanyway.api",
        description = "Say It Anyway core API server — localhost only",
    )
    parser.add_argument("--port", type=int, default=8765,
                        help="Port to bind (default: 8765)")
    parser.add_argument("--host", type=str, default="127.0.0.1",
                        help="Host to bind — DO NOT change to 0.0.0.0 on shared networks")
    args = parser.parse_args()

    logging.basicConfig(
        level   = logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )
    serve(host=args.host, port=args.port)
