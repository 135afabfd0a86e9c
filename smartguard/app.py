# ============================================================
# SmartGuard FastAPI App
# ------------------------------------------------------------
# This app wires everything together:
#   - Per-tab sessions (photo, avatar cache, location, consultation)
#   - Persona selection driving avatar + nearby-place lookups
#   - Support for Gemini, OpenAI, or Echo clients
# ============================================================

from fastapi import Depends, FastAPI, File, HTTPException, Response, UploadFile
from pydantic import BaseModel, Field
from typing import List, Optional

# --- Local imports ---
from smartguard.settings import settings
from smartguard.logs import configure_logging
from smartguard.gateway.factory import build_gateway
from smartguard.gateway.images import encode_image
from smartguard.gateway.types import PlaceResult
from smartguard.personas import ActionKind, PersonaConfig, PersonaKind
from smartguard.session import SessionController, SessionError, SessionStore

configure_logging(settings.LOG_LEVEL)

# ------------------------------------------------------------
# 🔧 Gateway + session registry
# ------------------------------------------------------------
gateway = build_gateway(settings)
store = SessionStore(
    gateway,
    emergency_number=settings.EMERGENCY_NUMBER,
    ttl_seconds=settings.SESSION_TTL_SECONDS,
    max_sessions=settings.MAX_SESSIONS,
)


def get_store() -> SessionStore:
    return store

# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
app = FastAPI(title="SmartGuard API", version="0.3")

# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class PersonaCard(BaseModel):
    id: PersonaKind
    title: str
    role_description: str
    color: str
    icon: str
    action_verbs: List[str]
    consultation_heading: str
    input_placeholder: str
    places_heading: str
    empty_places_hint: str

    @classmethod
    def of(cls, p: PersonaConfig) -> "PersonaCard":
        return cls(
            id=p.kind,
            title=p.title,
            role_description=p.role_description,
            color=p.color,
            icon=p.icon,
            action_verbs=list(p.action_verbs),
            consultation_heading=p.consultation_heading,
            input_placeholder=p.input_placeholder,
            places_heading=p.places_heading,
            empty_places_hint=p.empty_places_hint,
        )


class ActionView(BaseModel):
    kind: ActionKind
    href: str
    label: str


class LocationView(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ConsultationView(BaseModel):
    input_text: str
    has_image: bool
    result_text: Optional[str]
    consulting: bool


class SessionView(BaseModel):
    session_id: str
    persona: PersonaCard
    has_photo: bool
    display_image: Optional[str]
    cached_personas: List[PersonaKind]
    generating_avatar: bool
    location: Optional[LocationView]
    loading_places: bool
    places: List[PlaceResult]
    consultation: ConsultationView
    action: Optional[ActionView]


class SessionCreated(BaseModel):
    session_id: str


class SelectRequest(BaseModel):
    persona: PersonaKind


class ConsultationRequest(BaseModel):
    text: str = ""


class ConsultationReply(BaseModel):
    accepted: bool
    session: SessionView

# ------------------------------------------------------------
# 🧠 Helpers
# ------------------------------------------------------------
def _controller(session_id: str, sessions: SessionStore) -> SessionController:
    try:
        return sessions.get(session_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))


def _view(session_id: str, ctl: SessionController) -> SessionView:
    st = ctl.state
    action = ctl.action()
    return SessionView(
        session_id=session_id,
        persona=PersonaCard.of(ctl.active),
        has_photo=st.source_photo is not None,
        display_image=st.display_image,
        cached_personas=ctl.cached_personas(),
        generating_avatar=st.generating_avatar,
        location=LocationView(latitude=st.location.latitude, longitude=st.location.longitude) if st.location else None,
        loading_places=st.loading_places,
        places=list(st.places),
        consultation=ConsultationView(
            input_text=st.consultation.input_text,
            has_image=st.consultation.image is not None,
            result_text=st.consultation.result_text,
            consulting=st.consulting,
        ),
        action=ActionView(kind=action.kind, href=action.href, label=action.label) if action else None,
    )


async def _read_image(file: UploadFile) -> str:
    """Encode an uploaded image as a data URI."""
    content_type = (file.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=415, detail=f"Expected an image upload, got '{content_type or 'unknown'}'")
    raw = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if not raw:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(raw) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="Uploaded file is too large")
    return encode_image(raw, content_type)

# ------------------------------------------------------------
# 🎭 Personas
# ------------------------------------------------------------
@app.get("/personas", response_model=List[PersonaCard])
def list_personas(sessions: SessionStore = Depends(get_store)):
    return [PersonaCard.of(sessions.gateway.personas[kind]) for kind in PersonaKind]

# ------------------------------------------------------------
# 🗂️ Sessions
# ------------------------------------------------------------
@app.post("/sessions", response_model=SessionCreated, status_code=201)
def create_session(sessions: SessionStore = Depends(get_store)):
    return SessionCreated(session_id=sessions.create())


@app.get("/sessions/{session_id}", response_model=SessionView)
def get_session(session_id: str, sessions: SessionStore = Depends(get_store)):
    return _view(session_id, _controller(session_id, sessions))


@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str, sessions: SessionStore = Depends(get_store)):
    _controller(session_id, sessions)
    sessions.drop(session_id)
    return Response(status_code=204)


@app.post("/sessions/{session_id}/photo", response_model=SessionView)
async def upload_photo(session_id: str, file: UploadFile = File(...), sessions: SessionStore = Depends(get_store)):
    ctl = _controller(session_id, sessions)
    photo = await _read_image(file)
    try:
        ctl.capture_photo(photo)
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _view(session_id, ctl)


@app.put("/sessions/{session_id}/location", response_model=SessionView)
def update_location(session_id: str, loc: LocationView, sessions: SessionStore = Depends(get_store)):
    ctl = _controller(session_id, sessions)
    ctl.update_location(loc.latitude, loc.longitude)
    return _view(session_id, ctl)


@app.post("/sessions/{session_id}/persona", response_model=SessionView)
async def select_persona(session_id: str, req: SelectRequest, sessions: SessionStore = Depends(get_store)):
    ctl = _controller(session_id, sessions)
    await ctl.select(req.persona)
    return _view(session_id, ctl)

# ------------------------------------------------------------
# 💬 Consultation
# ------------------------------------------------------------
@app.post("/sessions/{session_id}/consultation", response_model=ConsultationReply)
async def consult(session_id: str, req: ConsultationRequest, sessions: SessionStore = Depends(get_store)):
    ctl = _controller(session_id, sessions)
    accepted = await ctl.submit_consultation(req.text)
    return ConsultationReply(accepted=accepted, session=_view(session_id, ctl))


@app.post("/sessions/{session_id}/consultation/image", response_model=SessionView)
async def attach_consultation_image(
    session_id: str, file: UploadFile = File(...), sessions: SessionStore = Depends(get_store)
):
    ctl = _controller(session_id, sessions)
    ctl.attach_consultation_image(await _read_image(file))
    return _view(session_id, ctl)


@app.delete("/sessions/{session_id}/consultation/image", response_model=SessionView)
def clear_consultation_image(session_id: str, sessions: SessionStore = Depends(get_store)):
    ctl = _controller(session_id, sessions)
    ctl.clear_consultation_image()
    return _view(session_id, ctl)

# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/healthz")
def healthz():
    return {
        "ok": True,
        "env": settings.ENV,
        "debug": settings.DEBUG,
        "app": settings.app_name,
        "provider": gateway.engine,
        "api_key_configured": settings.has_api_key,
    }

@app.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV}

@app.get("/")
def hello():
    return {"message": "SmartGuard service running."}
