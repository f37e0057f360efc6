from __future__ import annotations

import logging
import os
import re
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from lessonshop.constants import SORT_ASC, SORT_DESC, SORT_FIELDS
from lessonshop.services.api_client import LessonsApi
from lessonshop.services.receipt_pdf import generate_receipt_pdf, receipt_path
from lessonshop.services.storefront import CatalogLoadError, OrderResult, OrderSubmissionError, Storefront
from lessonshop.store.cart import CartIndexError
from lessonshop.utils.formatters import money
from lessonshop.utils.validators import is_valid_name, is_valid_phone

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

SESSION_COOKIE = "lessonshop_session"
ORDER_NO_RE = re.compile(r"[A-Z0-9]+")

app = FastAPI(title="Lesson Shop")

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["money"] = money

if STATIC_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@dataclass
class WebSession:
    """Everything one browser owns: its storefront and its placed orders."""

    store: Storefront
    orders: Dict[str, OrderResult] = field(default_factory=dict)
    load_error: str = ""


@app.on_event("startup")
async def _startup() -> None:
    # один http-клиент на всех, сессии у каждого браузера свои
    if getattr(app.state, "api", None) is None:
        app.state.api = LessonsApi()
    if getattr(app.state, "sessions", None) is None:
        app.state.sessions = {}


@app.on_event("shutdown")
async def _shutdown() -> None:
    for session in list(app.state.sessions.values()):
        await session.store.pending_sync()
    await app.state.api.aclose()


@app.middleware("http")
async def _session_cookie(request: Request, call_next):
    sid = request.cookies.get(SESSION_COOKIE)
    is_new = sid is None or sid not in app.state.sessions
    if is_new:
        sid = uuid.uuid4().hex
    request.state.session_id = sid

    response = await call_next(request)
    if is_new:
        response.set_cookie(SESSION_COOKIE, sid, httponly=True, samesite="lax")
    return response


async def _session(request: Request) -> WebSession:
    sid = request.state.session_id
    session = app.state.sessions.get(sid)
    if session is None:
        store = Storefront(api=app.state.api, catalog_source=getattr(app.state, "catalog_source", None))
        session = WebSession(store=store)
        app.state.sessions[sid] = session
        await _load(session)
    return session


async def _load(session: WebSession) -> None:
    try:
        await session.store.load_catalog()
        session.load_error = ""
    except CatalogLoadError as e:
        session.load_error = str(e)


def _redirect(url: str, msg: str = "") -> RedirectResponse:
    if msg:
        url = f"{url}?msg={quote(msg)}"
    return RedirectResponse(url=url, status_code=303)


def _render(request: Request, session: WebSession, name: str, ctx: Dict[str, Any]) -> HTMLResponse:
    base = {
        "cart_count": len(session.store.cart),
        "load_error": session.load_error,
        "message": request.query_params.get("msg", ""),
    }
    base.update(ctx)
    return templates.TemplateResponse(request, name, base)


# ---------------- lessons ----------------

@app.get("/", response_class=HTMLResponse)
async def index(request: Request, sort_by: Optional[str] = None, sort_order: Optional[str] = None):
    session = await _session(request)
    store = session.store
    store.show_cart = False
    try:
        store.set_sort(sort_by, sort_order)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _render(
        request,
        session,
        "index.html",
        {
            "lessons": store.sorted_lessons(),
            "sort_by": store.sort_by,
            "sort_order": store.sort_order,
            "sort_fields": SORT_FIELDS,
            "sort_orders": (SORT_ASC, SORT_DESC),
            "unique_locations": store.catalog.unique_locations(),
            "total_spaces": store.catalog.total_spaces(),
        },
    )


@app.post("/lessons/reload")
async def lessons_reload(request: Request):
    await _load(await _session(request))
    return _redirect("/")


# ---------------- cart ----------------

@app.post("/cart/add")
async def cart_add(request: Request, lesson_id: str = Form(...)):
    store = (await _session(request)).store
    resolved = store.catalog.resolve_id(lesson_id)
    if resolved is None:
        return _redirect("/", f"Lesson not found: {lesson_id}")
    line = store.cart.add(resolved)
    if line is None:
        return _redirect("/", f"No spaces left: {lesson_id}")
    return _redirect("/")


@app.post("/cart/remove")
async def cart_remove(request: Request, index: int = Form(...)):
    store = (await _session(request)).store
    try:
        store.cart.remove(index)
    except CartIndexError as e:
        return _redirect("/cart", str(e))
    return _redirect("/cart")


@app.get("/cart", response_class=HTMLResponse)
async def cart_view(request: Request):
    session = await _session(request)
    store = session.store
    if len(store.cart) == 0:
        store.show_cart = False
        return _redirect("/")
    store.show_cart = True
    return _render(request, session, "cart.html", _cart_ctx(store))


def _cart_ctx(store: Storefront) -> Dict[str, Any]:
    return {
        "lines": list(enumerate(store.cart.lines)),
        "total": store.cart.total(),
        "name": store.form.name,
        "phone": store.form.phone,
        "name_ok": is_valid_name(store.form.name),
        "phone_ok": is_valid_phone(store.form.phone),
        "can_checkout": store.can_checkout,
    }


# ---------------- checkout ----------------

@app.post("/checkout")
async def checkout(request: Request, name: str = Form(""), phone: str = Form("")):
    session = await _session(request)
    store = session.store
    store.form.name = name
    store.form.phone = phone

    try:
        result = await store.submit_order()
    except OrderSubmissionError as e:
        return _redirect("/cart", str(e))

    if result is None:
        # форма невалидна или корзина пуста: просто показываем корзину снова
        return _redirect("/cart")

    _remember(session, result)
    return RedirectResponse(url=f"/order/done?n={result.number}", status_code=303)


def _remember(session: WebSession, result: OrderResult) -> None:
    try:
        generate_receipt_pdf(result)
    except OSError as e:
        logger.error("Receipt for order %s was not written: %s", result.number, e)
    session.orders[result.number] = result


@app.get("/order/done", response_class=HTMLResponse)
async def order_done(request: Request, n: str):
    session = await _session(request)
    result = session.orders.get(n)
    if result is None:
        raise HTTPException(status_code=404, detail="order not found")
    return _render(request, session, "order_done.html", {"result": result})


@app.get("/receipt/{number}", response_class=FileResponse)
async def receipt(request: Request, number: str):
    session = await _session(request)
    if not ORDER_NO_RE.fullmatch(number) or number not in session.orders:
        raise HTTPException(status_code=404, detail="receipt not found")
    path = receipt_path(number)
    if not os.path.exists(path):
        raise HTTPException(status_code=404, detail="receipt not found")
    return FileResponse(path, media_type="application/pdf", filename=os.path.basename(path))
