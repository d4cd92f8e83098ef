"""
FastAPI Web Application - Customer Review Wizard
=================================================

Serves the page behind each employee review link and a small JSON API
that drives the review wizard for that page visit.

    GET  /review/{link_id}                 review page (creates a session)
    GET  /api/sessions/{sid}               session snapshot
    POST /api/sessions/{sid}/experience    step 1
    POST /api/sessions/{sid}/attributes/toggle
    POST /api/sessions/{sid}/continue
    POST /api/sessions/{sid}/back
    POST /api/sessions/{sid}/text
    POST /api/sessions/{sid}/platforms/toggle
    POST /api/sessions/{sid}/regenerate
    POST /api/sessions/{sid}/submit
    POST /api/sessions/{sid}/destination
    DELETE /api/sessions/{sid}
"""

import html
import json
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from ..domain.models import Notification, ReviewContext
from ..infrastructure.config import get_settings
from ..infrastructure.llm import ReviewTextGenerator
from ..infrastructure.persistence import Database, SQLiteReviewStore, init_database
from ..infrastructure.scraper import AttributeProvider
from .sessions import ReviewSessionHandle, SessionRegistry

logger = logging.getLogger(__name__)

# ── Globals ────────────────────────────────────────────────────────
db: Optional[Database] = None
review_store: Optional[SQLiteReviewStore] = None
attribute_provider: Optional[AttributeProvider] = None
review_generator: Optional[ReviewTextGenerator] = None
registry = SessionRegistry(ttl_seconds=get_settings().wizard.session_ttl_minutes * 60)


# ── Lifespan ───────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    global db, review_store, attribute_provider, review_generator
    settings = get_settings()

    for issue in settings.validate():
        logger.warning(issue)

    db = init_database(str(settings.database_file), seed_demo=settings.seed_demo_data)
    review_store = SQLiteReviewStore(db)
    attribute_provider = AttributeProvider()
    review_generator = ReviewTextGenerator()
    logger.info("Database ready")
    yield


app = FastAPI(title="ReviewLink", description="Employee Review Link Collection", lifespan=lifespan)


# ── Request bodies ─────────────────────────────────────────────────

class ExperienceRequest(BaseModel):
    level: str


class AttributeRequest(BaseModel):
    attribute: str


class ReviewTextRequest(BaseModel):
    review_text: str = ""
    customer_name: Optional[str] = None


class PlatformRequest(BaseModel):
    platform: str


class ClipboardReport(BaseModel):
    """Which copy layers worked in the customer's browser. None = not attempted."""
    secure_api: Optional[bool] = None
    exec_command: Optional[bool] = None
    touch_selection: Optional[bool] = None
    is_touch: bool = False


class SubmitRequest(BaseModel):
    review_text: Optional[str] = None
    customer_name: Optional[str] = None
    clipboard: ClipboardReport = ClipboardReport()


class DestinationRequest(BaseModel):
    is_touch: bool = False
    popups_blocked: bool = False


# ══════════════════════════════════════════════════════════════════
#  PAGES
# ══════════════════════════════════════════════════════════════════

SHARED_CSS = """
    :root {
        --bg-dark: #0a0a14;
        --bg-card: rgba(255,255,255,0.035);
        --border: rgba(255,255,255,0.07);
        --border-hover: rgba(124,58,237,0.4);
        --text: #e2e8f0;
        --text-muted: #64748b;
        --accent-1: #7c3aed;
        --gradient: linear-gradient(135deg, #7c3aed 0%, #06b6d4 100%);
    }

    * { margin: 0; padding: 0; box-sizing: border-box; }

    body {
        font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif;
        background: var(--bg-dark);
        min-height: 100vh;
        color: var(--text);
    }

    .container { max-width: 640px; margin: 0 auto; padding: 40px 20px; }
    .header { text-align: center; margin-bottom: 28px; }
    .header h1 {
        font-size: 28px; font-weight: 800;
        background: var(--gradient);
        -webkit-background-clip: text; -webkit-text-fill-color: transparent;
    }
    .header p { color: var(--text-muted); margin-top: 6px; }

    .card {
        background: var(--bg-card);
        border: 1px solid var(--border);
        border-radius: 16px;
        padding: 28px;
    }
    .card h2 { font-size: 20px; margin-bottom: 18px; text-align: center; }

    .btn {
        background: var(--gradient); color: #fff; border: none;
        padding: 12px 28px; border-radius: 10px;
        font-weight: 600; font-size: 14px; cursor: pointer; font-family: inherit;
    }
    .btn:disabled { opacity: 0.5; cursor: default; }
    .btn-ghost { background: var(--bg-card); border: 1px solid var(--border); color: var(--text); }

    .choices { display: flex; flex-wrap: wrap; gap: 10px; justify-content: center; margin-bottom: 22px; }
    .chip {
        padding: 10px 18px; border-radius: 999px; cursor: pointer;
        border: 1px solid var(--border); background: var(--bg-card); color: var(--text);
        font-family: inherit; font-size: 14px;
    }
    .chip.selected { border-color: var(--accent-1); background: rgba(124,58,237,0.25); }

    .actions { display: flex; justify-content: space-between; gap: 10px; margin-top: 18px; }

    textarea, input[type="text"] {
        width: 100%; background: rgba(255,255,255,0.05);
        border: 1px solid var(--border); border-radius: 10px;
        padding: 12px 16px; color: var(--text); font-family: inherit; font-size: 14px;
    }
    textarea { min-height: 160px; resize: vertical; margin-bottom: 12px; }

    .alert { padding: 12px 18px; border-radius: 12px; margin-bottom: 14px; font-size: 14px; }
    .alert-info, .alert-success { background: rgba(124,58,237,0.1); border: 1px solid rgba(124,58,237,0.2); color: #c4b5fd; }
    .alert-warning, .alert-validation { background: rgba(251,191,36,0.1); border: 1px solid rgba(251,191,36,0.2); color: #fcd34d; }
    .alert-error { background: rgba(248,113,113,0.1); border: 1px solid rgba(248,113,113,0.2); color: #fca5a5; }

    .muted { color: var(--text-muted); font-size: 13px; text-align: center; }
"""

REVIEW_PAGE_SCRIPT = """
const API = '/api/sessions/' + SESSION.session_id;
const IS_TOUCH = ('ontouchstart' in window) || navigator.maxTouchPoints > 0;
let session = SESSION;

function esc(s) {
    const d = document.createElement('div');
    d.textContent = s == null ? '' : String(s);
    return d.innerHTML;
}

function showNotifications(items) {
    const box = document.getElementById('alerts');
    box.innerHTML = (items || []).map(n =>
        '<div class="alert alert-' + esc(n.level) + '"><strong>' + esc(n.title) + '</strong> ' + esc(n.message) + '</div>'
    ).join('');
}

async function call(path, body) {
    const res = await fetch(API + path, {
        method: 'POST',
        headers: {'Content-Type': 'application/json'},
        body: JSON.stringify(body || {})
    });
    if (res.status === 404) {
        showNotifications([{level: 'error', title: 'Session expired.', message: 'Please reload the page.'}]);
        return null;
    }
    const data = await res.json();
    session = data.session;
    showNotifications(data.notifications);
    render();
    return data;
}

function chips(options, selected, action) {
    return '<div class="choices">' + options.map(o =>
        '<button class="chip' + (selected.includes(o) ? ' selected' : '') + '" data-action="' + action +
        '" data-value="' + esc(o) + '">' + esc(o) + '</button>'
    ).join('') + '</div>';
}

function render() {
    const root = document.getElementById('wizard');
    const s = session;
    let out = '';
    if (s.state === 'rating_select') {
        out = '<h2>How was your experience?</h2>' +
            chips(['Poor', 'Moderate', 'Excellent'], s.experience_label ? [s.experience_label] : [], 'experience');
    } else if (s.state === 'attribute_select') {
        out = '<h2>What stood out?</h2>' + chips(s.candidates.primary, s.primary, 'attribute') +
            '<div class="actions"><button class="btn btn-ghost" data-action="back">Back</button>' +
            '<button class="btn" data-action="continue">Continue</button></div>';
    } else if (s.state === 'secondary_attribute_select') {
        out = '<h2>Anything else?</h2>' + chips(s.candidates.secondary, s.secondary, 'attribute') +
            '<div class="actions"><button class="btn btn-ghost" data-action="back">Back</button>' +
            '<button class="btn" data-action="continue">Continue</button></div>';
    } else if (s.state === 'review_edit') {
        const busy = s.generating || s.submitting;
        out = '<h2>' + (s.poor_branch ? 'Tell us what happened' : 'Your review') + '</h2>' +
            (s.generating ? '<p class="muted">Drafting your review...</p>' : '') +
            '<textarea id="review-text"' + (busy ? ' disabled' : '') + ' placeholder="Write your review here">' + esc(s.review_text) + '</textarea>' +
            '<input type="text" id="customer-name" placeholder="Your name (optional)" value="' + esc(s.customer_name || '') + '">' +
            '<p class="muted">Share on:</p>' + chips(['google', 'facebook', 'instagram'], s.platforms, 'platform') +
            '<div class="actions"><button class="btn btn-ghost" data-action="back"' + (busy ? ' disabled' : '') + '>Back</button>' +
            (!s.poor_branch && s.generation_state === 'failed' ? '<button class="btn btn-ghost" data-action="regenerate">Try again</button>' : '') +
            '<button class="btn" data-action="submit"' + (busy ? ' disabled' : '') + '>Copy &amp; Submit</button></div>';
    } else if (s.state === 'submitted') {
        out = '<h2>Thank you!</h2>' +
            '<p class="muted">' + (s.clipboard_copied ? 'Your review has been copied. Paste it on the next page.' : 'Please copy your review before posting it.') + '</p>' +
            '<textarea readonly>' + esc(s.review_text) + '</textarea>' +
            (s.destination_url ? '<div class="actions"><span></span><button class="btn" data-action="destination">Post on Google</button></div>' : '');
    }
    root.innerHTML = out;
}

async function copyLayers(text) {
    const report = {secure_api: null, exec_command: null, touch_selection: null, is_touch: IS_TOUCH};
    if (navigator.clipboard && window.isSecureContext) {
        try { await navigator.clipboard.writeText(text); report.secure_api = true; return report; }
        catch (e) { report.secure_api = false; }
    }
    try {
        const ta = document.createElement('textarea');
        ta.value = text; ta.setAttribute('readonly', '');
        ta.style.position = 'fixed'; ta.style.opacity = '0';
        document.body.appendChild(ta); ta.focus(); ta.select();
        report.exec_command = document.execCommand('copy');
        document.body.removeChild(ta);
        if (report.exec_command) return report;
    } catch (e) { report.exec_command = false; }
    if (IS_TOUCH) {
        try {
            const el = document.createElement('div');
            el.contentEditable = 'true'; el.textContent = text;
            document.body.appendChild(el);
            const range = document.createRange(); range.selectNodeContents(el);
            const sel = window.getSelection(); sel.removeAllRanges(); sel.addRange(range);
            report.touch_selection = document.execCommand('copy');
            document.body.removeChild(el);
        } catch (e) { report.touch_selection = false; }
    }
    return report;
}

// The draft request only answers once the draft is ready, so show the wait locally
function showDrafting() {
    session = Object.assign({}, session, {state: 'review_edit', generating: true, review_text: ''});
    render();
}

function currentText() {
    const t = document.getElementById('review-text');
    const n = document.getElementById('customer-name');
    return {review_text: t ? t.value : '', customer_name: n ? n.value : ''};
}

document.addEventListener('click', async (ev) => {
    const el = ev.target.closest('[data-action]');
    if (!el || el.disabled) return;
    const action = el.dataset.action;
    if (action === 'experience') await call('/experience', {level: el.dataset.value.toLowerCase()});
    else if (action === 'attribute') await call('/attributes/toggle', {attribute: el.dataset.value});
    else if (action === 'continue') {
        el.disabled = true;
        if (session.state === 'secondary_attribute_select' && session.secondary.length) showDrafting();
        await call('/continue');
    }
    else if (action === 'back') await call('/back');
    else if (action === 'platform') await call('/platforms/toggle', {platform: el.dataset.value});
    else if (action === 'regenerate') { showDrafting(); await call('/regenerate'); }
    else if (action === 'submit') {
        el.disabled = true;
        const body = currentText();
        body.clipboard = await copyLayers(body.review_text.trim());
        await call('/submit', body);
    } else if (action === 'destination') {
        const data = await call('/destination', {is_touch: IS_TOUCH});
        const nav = data && data.navigation;
        if (!nav) return;
        if (nav.mode === 'new_tab') {
            const w = window.open(nav.url, '_blank');
            if (!w) window.location.href = nav.url;
        } else {
            window.location.href = nav.url;
        }
    }
});

document.addEventListener('change', (ev) => {
    if (ev.target.id === 'review-text' || ev.target.id === 'customer-name') call('/text', currentText());
});

window.addEventListener('pagehide', () => {
    fetch(API, {method: 'DELETE', keepalive: true});
});

render();
"""


def render_review_page(context: ReviewContext, snapshot: dict) -> str:
    """Render the customer review wizard page."""
    company = html.escape(context.company_name)
    employee = html.escape(context.employee_name)
    initial = json.dumps(snapshot).replace("</", "<\\/")

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Review {company}</title>
    <style>{SHARED_CSS}</style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>{company}</h1>
            <p>Share your experience with {employee}</p>
        </div>
        <div id="alerts"></div>
        <div class="card" id="wizard"></div>
    </div>
    <script>
        const SESSION = {initial};
        {REVIEW_PAGE_SCRIPT}
    </script>
</body>
</html>"""


def render_not_found_page() -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Link not found</title>
    <style>{SHARED_CSS}</style>
</head>
<body>
    <div class="container">
        <div class="card">
            <h2>This review link is not valid</h2>
            <p class="muted">Please ask the business for a new link.</p>
        </div>
    </div>
</body>
</html>"""


# ══════════════════════════════════════════════════════════════════
#  ROUTES
# ══════════════════════════════════════════════════════════════════

def _get_session(session_id: str) -> ReviewSessionHandle:
    handle = registry.get(session_id)
    if handle is None:
        raise HTTPException(status_code=404, detail="Review session not found")
    return handle


def _respond(handle: ReviewSessionHandle, raised: Optional[List[Notification]] = None, **extra) -> dict:
    body = {
        "session": handle.wizard.snapshot(),
        "notifications": handle.drain_notifications(raised),
    }
    body.update(extra)
    return body


@app.get("/health")
async def health():
    return {"status": "ok", "sessions": len(registry)}


@app.get("/review/{link_id}", response_class=HTMLResponse)
async def review_page(link_id: str):
    settings = get_settings()
    context = await run_in_threadpool(
        db.get_review_context, link_id, settings.review.google_review_link
    )
    if context is None:
        logger.info(f"Unknown review link: {link_id}")
        return HTMLResponse(render_not_found_page(), status_code=404)

    candidates = await run_in_threadpool(attribute_provider.derive_attributes, context.website_url)

    handle = registry.create(
        context=context,
        candidates=candidates,
        drafter=review_generator,
        store=review_store,
        generation_timeout=settings.wizard.generation_timeout_seconds,
    )
    return render_review_page(context, handle.wizard.snapshot())


@app.get("/api/sessions/{session_id}")
async def get_session(session_id: str):
    return _respond(_get_session(session_id))


@app.delete("/api/sessions/{session_id}")
async def discard_session(session_id: str):
    if not registry.discard(session_id):
        raise HTTPException(status_code=404, detail="Review session not found")
    return {"discarded": True}


@app.post("/api/sessions/{session_id}/experience")
async def select_experience(session_id: str, body: ExperienceRequest):
    handle = _get_session(session_id)
    with handle.collecting() as raised:
        handle.wizard.select_experience(body.level)
    return _respond(handle, raised)


@app.post("/api/sessions/{session_id}/attributes/toggle")
async def toggle_attribute(session_id: str, body: AttributeRequest):
    handle = _get_session(session_id)
    with handle.collecting() as raised:
        handle.wizard.toggle_attribute(body.attribute)
    return _respond(handle, raised)


@app.post("/api/sessions/{session_id}/continue")
async def continue_step(session_id: str):
    handle = _get_session(session_id)
    with handle.collecting() as raised:
        await handle.wizard.advance()
    return _respond(handle, raised)


@app.post("/api/sessions/{session_id}/back")
async def back_step(session_id: str):
    handle = _get_session(session_id)
    with handle.collecting() as raised:
        handle.wizard.back()
    return _respond(handle, raised)


@app.post("/api/sessions/{session_id}/text")
async def update_text(session_id: str, body: ReviewTextRequest):
    handle = _get_session(session_id)
    with handle.collecting() as raised:
        handle.wizard.set_review_text(body.review_text)
        if body.customer_name is not None:
            handle.wizard.set_customer_name(body.customer_name)
    return _respond(handle, raised)


@app.post("/api/sessions/{session_id}/platforms/toggle")
async def toggle_platform(session_id: str, body: PlatformRequest):
    handle = _get_session(session_id)
    with handle.collecting() as raised:
        handle.wizard.toggle_platform(body.platform)
    return _respond(handle, raised)


@app.post("/api/sessions/{session_id}/regenerate")
async def regenerate(session_id: str):
    handle = _get_session(session_id)
    with handle.collecting() as raised:
        await handle.wizard.regenerate()
    return _respond(handle, raised)


@app.post("/api/sessions/{session_id}/submit")
async def submit_review(session_id: str, body: SubmitRequest):
    """Copy report + latest text in, submitted session (or the reason it wasn't) out."""
    handle = _get_session(session_id)
    wizard = handle.wizard

    with handle.collecting() as raised:
        # Sync the final edit unless a submit is already running
        if not wizard.is_submitting:
            if body.review_text is not None:
                wizard.set_review_text(body.review_text)
            if body.customer_name is not None:
                wizard.set_customer_name(body.customer_name)

        report = body.clipboard
        handle.platform.update(
            secure_api=report.secure_api,
            exec_command=report.exec_command,
            touch_selection=report.touch_selection,
            is_touch=report.is_touch,
        )
        await wizard.submit()
    return _respond(handle, raised)


@app.post("/api/sessions/{session_id}/destination")
async def open_destination(session_id: str, body: DestinationRequest):
    handle = _get_session(session_id)
    handle.platform.update(is_touch=body.is_touch, popups_blocked=body.popups_blocked)
    with handle.collecting() as raised:
        navigation = handle.wizard.open_destination()
    payload = None
    if navigation:
        payload = {"url": navigation.url, "mode": navigation.mode, "popup_blocked": navigation.popup_blocked}
    return _respond(handle, raised, navigation=payload)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
