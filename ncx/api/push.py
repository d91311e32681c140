import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ncx.api.deps import get_dispatcher, get_store, require_push_secret
from ncx.core.errors import ValidationError
from ncx.core.rate_limit import ENROLLMENT_LIMIT, limiter
from ncx.schemas import NotifyRequest, PushPrefs
from ncx.services import FanoutDispatcher, SubscriptionStore

router = APIRouter(prefix="/api/push", tags=["push"])
log = logging.getLogger("ncx.push")


async def _json_body(request: Request) -> dict:
    """Boş/bozuk gövde -> {} (unsubscribe ve save DELETE gövdesiz gelebilir)."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@router.get("/vapidPublicKey")
def vapid_public_key(request: Request):
    identity = request.app.state.vapid.ensure_ready()
    return {"key": identity.public_key}


@router.post("/subscribe")
@limiter.limit(ENROLLMENT_LIMIT)
async def subscribe(request: Request, store: SubscriptionStore = Depends(get_store)):
    """
    İki gövde biçimi kabul edilir:
    { subscription: {endpoint, keys} } (tercih edilen) veya düz { endpoint, keys }.
    """
    body = await _json_body(request)
    sub = body.get("subscription") or body
    store.upsert(sub)
    log.info("push subscribe: %s", str(sub.get("endpoint", ""))[:80])
    return {"ok": True}


@router.post("/unsubscribe")
async def unsubscribe(request: Request, store: SubscriptionStore = Depends(get_store)):
    body = await _json_body(request)
    endpoint = body.get("endpoint")
    if isinstance(endpoint, str) and endpoint:
        store.remove(endpoint)
    return {"ok": True}


@router.post("/notify", dependencies=[Depends(require_push_secret)])
async def notify(request: Request, dispatcher: FanoutDispatcher = Depends(get_dispatcher)):
    body = await _json_body(request)
    try:
        req = NotifyRequest.model_validate(body)
    except ValueError as e:
        raise ValidationError(f"Invalid notify payload: {e}") from e
    sent = await dispatcher.broadcast(req.to_payload(), team=req.team)
    return {"sent": sent}


@router.get("/save")
def get_prefs(endpoint: str | None = None, store: SubscriptionStore = Depends(get_store)):
    """Endpoint verilmezse nötr varsayılan döner (kullanıcı<->endpoint eşlemesi yok)."""
    prefs = store.get_prefs(endpoint)
    return {"prefs": prefs.model_dump(by_alias=True)}


@router.post("/save")
@limiter.limit(ENROLLMENT_LIMIT)
async def save_prefs(request: Request, store: SubscriptionStore = Depends(get_store)):
    body = await _json_body(request)
    try:
        prefs = PushPrefs.model_validate(body.get("prefs") or {})
        store.upsert(body.get("subscription"), prefs=prefs)
    except (ValidationError, ValueError):
        return _bad_sub()
    return {"ok": True}


@router.delete("/save")
async def delete_prefs(request: Request, store: SubscriptionStore = Depends(get_store)):
    body = await _json_body(request)
    endpoint = body.get("endpoint") or request.query_params.get("endpoint")
    if isinstance(endpoint, str) and endpoint:
        store.remove(endpoint)
    return {"ok": True}


def _bad_sub() -> JSONResponse:
    return JSONResponse(status_code=400, content={"ok": False, "reason": "BAD_SUB"})
