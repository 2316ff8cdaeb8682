"""
Conecta Rua - Web Application

FastAPI application serving the map pages and the JSON API used by them:
report listing/filtering, report creation with photos, comments and the
session header.

Run with: uvicorn conecta_rua.api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

from conecta_rua import __version__
from conecta_rua.backend import Backend, UserSession, create_backend
from conecta_rua.core.config import settings
from conecta_rua.core.constants import ALL_CATEGORIES, category_options
from conecta_rua.core.exceptions import BackendError, ValidationError
from conecta_rua.core.logging import setup_logging
from conecta_rua.notifications import NotificationLevel, Notifier
from conecta_rua.reports import (
    CreateReportFlow,
    ErrorKind,
    GeolocationHelper,
    ImageSelection,
    ReportDetail,
    Report,
    ReportForm,
    ReportedLocationProvider,
    ReportStore,
    SelectedImage,
    SessionHeader,
    resolve_session,
)
from conecta_rua.api.pages import render_index_page, render_report_page
from conecta_rua.visualization import ReportMapView

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if not hasattr(app.state, "backend"):
        app.state.backend = create_backend(settings)
    logger.info(f"Conecta Rua {__version__} started against {settings.supabase_url}")
    yield
    await app.state.backend.aclose()


app = FastAPI(
    title="Conecta Rua",
    description="Denúncias de problemas de infraestrutura urbana em Ponta Grossa - PR",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models
# ============================================================================

class NotificationResponse(BaseModel):
    """Toast message."""
    level: str
    message: str
    created_at: str


class ReportResponse(BaseModel):
    """Single report."""
    id: str
    title: str
    description: str
    category: str
    category_label: str
    latitude: float
    longitude: float
    image_urls: List[str]
    created_at: str
    user_id: Optional[str]
    user_name: str


class ReportListResponse(BaseModel):
    """Filtered report list."""
    count: int
    total: int
    category: str
    reports: List[ReportResponse]


class CreateReportResponse(BaseModel):
    """Result of a successful report creation."""
    report: Optional[ReportResponse]
    image_count: int
    reports_count: int
    notifications: List[NotificationResponse]


class CommentResponse(BaseModel):
    """Single comment."""
    id: str
    content: str
    report_id: str
    created_at: str
    user_name: str


class CommentListResponse(BaseModel):
    """Comment thread of a report, oldest first."""
    report_id: str
    count: int
    can_comment: bool
    comments: List[CommentResponse]
    notifications: List[NotificationResponse] = []


class CommentCreateRequest(BaseModel):
    """Request to add a comment."""
    content: str = ""


class PhotoInfo(BaseModel):
    """A file picked in the browser; the bytes stay there until submission."""
    filename: str
    content_type: str = ""
    size: int = Field(ge=0)

    def to_image(self) -> SelectedImage:
        return SelectedImage(filename=self.filename, content_type=self.content_type, data=b"", size=self.size)


class PhotoSelectionRequest(BaseModel):
    """One selection event: newly picked files, or the removal of a pending one."""
    pending: List[PhotoInfo] = []
    added: List[PhotoInfo] = []
    remove: Optional[int] = None


class PhotoSelectionResponse(BaseModel):
    """Positions, in pending + added order, of the files that stay selected."""
    kept: List[int]
    notifications: List[NotificationResponse]


class LocationRequest(BaseModel):
    """Position (or error) obtained by the browser's geolocation API."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy_m: Optional[float] = None
    error: Optional[str] = None


class LocationResponse(BaseModel):
    """Coordinates to put in the creation form."""
    latitude: float
    longitude: float
    located: bool
    notifications: List[NotificationResponse]


class LoginRequest(BaseModel):
    email: str
    password: str


class SignupRequest(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None


class SessionResponse(BaseModel):
    """Header state."""
    authenticated: bool
    user: Optional[dict] = None
    notifications: List[NotificationResponse] = []


class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    supabase_url: str
    anon_key_configured: bool


# ============================================================================
# Dependencies
# ============================================================================

def get_backend(request: Request) -> Backend:
    return request.app.state.backend


def get_notifier() -> Notifier:
    return Notifier()


def get_access_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return request.cookies.get(settings.session_cookie_name)


async def get_session(
    token: Optional[str] = Depends(get_access_token),
    backend: Backend = Depends(get_backend),
) -> Optional[UserSession]:
    return await resolve_session(backend.auth, token)


def get_report_store(
    backend: Backend = Depends(get_backend),
    notifier: Notifier = Depends(get_notifier),
    session: Optional[UserSession] = Depends(get_session),
) -> ReportStore:
    return ReportStore(backend.data, notifier, access_token=session.access_token if session else None)


def get_session_header(
    backend: Backend = Depends(get_backend),
    notifier: Notifier = Depends(get_notifier),
    session: Optional[UserSession] = Depends(get_session),
) -> SessionHeader:
    return SessionHeader(backend.auth, notifier, session=session)


# ============================================================================
# Helper Functions
# ============================================================================

def error_response(status_code: int, detail: str, notifier: Notifier) -> JSONResponse:
    """Error body carrying the toasts raised so far."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "notifications": notifier.drain()},
    )


OUTCOME_STATUS = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.UNEXPECTED: 500,
}


def report_detail_url(report) -> str:
    return f"/reports/{report.id}"


async def load_store(store: ReportStore, category: Optional[str]) -> ReportStore:
    """Select the filter and fetch the reports, or raise the matching HTTP error."""
    try:
        store.select_category(category)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if not await store.refresh():
        raise HTTPException(status_code=502, detail="Erro ao carregar denúncias")
    return store


async def fetch_report(store: ReportStore, report_id: str) -> Report:
    """One report by id, or the matching HTTP error."""
    try:
        report = await store.fetch(report_id)
    except BackendError as e:
        logger.error(f"Error fetching report {report_id}: {e.message}")
        raise HTTPException(status_code=502, detail="Erro ao carregar denúncia")
    if not report:
        raise HTTPException(status_code=404, detail="Denúncia não encontrada")
    return report


async def open_detail(
    report_id: str,
    store: ReportStore,
    backend: Backend,
    notifier: Notifier,
    session: Optional[UserSession],
) -> ReportDetail:
    report = await fetch_report(store, report_id)
    detail = ReportDetail(report, backend.data, notifier, session=session)
    await detail.open()
    return detail


def session_cookie_kwargs() -> dict:
    return dict(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


# ============================================================================
# Pages
# ============================================================================

@app.get("/", response_class=HTMLResponse, tags=["Pages"])
async def index(
    category: str = Query(default=ALL_CATEGORIES),
    store: ReportStore = Depends(get_report_store),
    header: SessionHeader = Depends(get_session_header),
):
    """Map with all reports, filterable by category."""
    await load_store(store, category)
    map_view = ReportMapView(store.filtered, detail_url=report_detail_url)
    return render_index_page(header, store, map_view.render())


@app.get("/reports/{report_id}", response_class=HTMLResponse, tags=["Pages"])
async def report_page(
    report_id: str,
    store: ReportStore = Depends(get_report_store),
    header: SessionHeader = Depends(get_session_header),
    backend: Backend = Depends(get_backend),
    notifier: Notifier = Depends(get_notifier),
    session: Optional[UserSession] = Depends(get_session),
):
    """Report details and comment thread."""
    detail = await open_detail(report_id, store, backend, notifier, session)
    return render_report_page(header, detail)


# ============================================================================
# System Routes
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        supabase_url=settings.supabase_url,
        anon_key_configured=bool(settings.supabase_anon_key),
    )


@app.get("/api/v1/categories", tags=["Reports"])
async def list_categories():
    """Category values, Portuguese labels and marker colors."""
    return {"categories": category_options(include_all=True)}


# ============================================================================
# Report Routes
# ============================================================================

@app.get("/api/v1/reports", response_model=ReportListResponse, tags=["Reports"])
async def list_reports(
    category: str = Query(default=ALL_CATEGORIES, description="Category value or 'all'"),
    store: ReportStore = Depends(get_report_store),
):
    """List reports, newest first, filtered by category."""
    await load_store(store, category)
    return ReportListResponse(
        count=len(store.filtered),
        total=len(store.reports),
        category=store.selected_category,
        reports=[ReportResponse(**r.to_dict()) for r in store.filtered],
    )


@app.get("/api/v1/reports/{report_id}", response_model=ReportResponse, tags=["Reports"])
async def get_report(
    report_id: str,
    store: ReportStore = Depends(get_report_store),
):
    """Get a specific report by ID."""
    report = await fetch_report(store, report_id)
    return ReportResponse(**report.to_dict())


@app.post("/api/v1/reports", response_model=CreateReportResponse, tags=["Reports"])
async def create_report(
    title: str = Form(""),
    description: str = Form(""),
    category: str = Form(""),
    latitude: float = Form(settings.default_latitude, ge=-90, le=90),
    longitude: float = Form(settings.default_longitude, ge=-180, le=180),
    photos: Optional[List[UploadFile]] = File(None),
    backend: Backend = Depends(get_backend),
    notifier: Notifier = Depends(get_notifier),
    session: Optional[UserSession] = Depends(get_session),
    store: ReportStore = Depends(get_report_store),
):
    """
    Create a report with up to five photos.

    Photos are uploaded to storage first; the report row is inserted only
    when every upload succeeded. The report list is refetched afterwards.
    """
    flow = CreateReportFlow(
        session=session,
        storage=backend.storage,
        data=backend.data,
        notifier=notifier,
        on_created=store.refresh,
    )
    flow.form = ReportForm(
        title=title,
        description=description,
        category=category,
        latitude=latitude,
        longitude=longitude,
    )

    selected = []
    for photo in photos or []:
        # Browsers send an empty part when no file was chosen
        if not photo.filename:
            continue
        data = await photo.read()
        selected.append(SelectedImage(
            filename=photo.filename,
            content_type=photo.content_type or "",
            data=data,
        ))
    flow.images.add(selected)

    outcome = await flow.submit()
    if not outcome.success:
        return error_response(OUTCOME_STATUS[outcome.error_kind], outcome.message, notifier)

    return CreateReportResponse(
        report=ReportResponse(**outcome.report.to_dict()) if outcome.report else None,
        image_count=outcome.image_count,
        reports_count=len(store.reports),
        notifications=notifier.drain(),
    )


@app.post("/api/v1/photos/selection", response_model=PhotoSelectionResponse, tags=["Reports"])
async def update_photo_selection(
    request: PhotoSelectionRequest,
    notifier: Notifier = Depends(get_notifier),
):
    """
    Apply a selection event to the photos pending in the creation dialog.

    New files are validated (type and size) and appended, keeping at most
    five; a removal drops the file at that position.
    """
    candidates = [p.to_image() for p in request.pending + request.added]
    pending, added = candidates[:len(request.pending)], candidates[len(request.pending):]

    selection = ImageSelection(notifier)
    selection.add(pending)
    if request.remove is not None:
        selection.remove(request.remove)
    else:
        selection.add(added)

    kept = [i for i, image in enumerate(candidates) if any(image is f for f in selection)]
    return PhotoSelectionResponse(kept=kept, notifications=notifier.drain())


@app.post("/api/v1/location", response_model=LocationResponse, tags=["Reports"])
async def resolve_location(
    request: LocationRequest,
    notifier: Notifier = Depends(get_notifier),
):
    """
    Turn the browser's geolocation result into form coordinates.

    Falls back to the city center when the position is unavailable.
    """
    provider = None
    if request.error != "unsupported":
        provider = ReportedLocationProvider(
            latitude=request.latitude,
            longitude=request.longitude,
            accuracy_m=request.accuracy_m,
            error=request.error,
        )
    form = ReportForm()
    located = await GeolocationHelper(notifier, provider=provider).locate(form)
    return LocationResponse(
        latitude=form.latitude,
        longitude=form.longitude,
        located=located,
        notifications=notifier.drain(),
    )


# ============================================================================
# Comment Routes
# ============================================================================

@app.get("/api/v1/reports/{report_id}/comments", response_model=CommentListResponse, tags=["Comments"])
async def list_comments(
    report_id: str,
    store: ReportStore = Depends(get_report_store),
    backend: Backend = Depends(get_backend),
    notifier: Notifier = Depends(get_notifier),
    session: Optional[UserSession] = Depends(get_session),
):
    """Comments of a report, oldest first."""
    detail = await open_detail(report_id, store, backend, notifier, session)
    return CommentListResponse(
        report_id=report_id,
        count=len(detail.comments),
        can_comment=detail.can_comment,
        comments=[CommentResponse(**c.to_dict()) for c in detail.comments],
        notifications=notifier.drain(),
    )


@app.post("/api/v1/reports/{report_id}/comments", response_model=CommentListResponse, tags=["Comments"])
async def add_comment(
    report_id: str,
    request: CommentCreateRequest,
    store: ReportStore = Depends(get_report_store),
    backend: Backend = Depends(get_backend),
    notifier: Notifier = Depends(get_notifier),
    session: Optional[UserSession] = Depends(get_session),
):
    """Add a comment and return the re-read thread."""
    if session is None:
        notifier.error("Você precisa estar logado para comentar")
        return error_response(401, "Você precisa estar logado para comentar", notifier)
    if not request.content.strip():
        notifier.error("Digite um comentário")
        return error_response(422, "Digite um comentário", notifier)

    detail = await open_detail(report_id, store, backend, notifier, session)
    if not await detail.add_comment(request.content):
        return error_response(502, "Erro ao adicionar comentário", notifier)

    return CommentListResponse(
        report_id=report_id,
        count=len(detail.comments),
        can_comment=True,
        comments=[CommentResponse(**c.to_dict()) for c in detail.comments],
        notifications=notifier.drain(),
    )


# ============================================================================
# Map Routes
# ============================================================================

@app.get("/api/v1/map", response_class=HTMLResponse, tags=["Map"])
async def get_reports_map(
    category: str = Query(default=ALL_CATEGORIES),
    store: ReportStore = Depends(get_report_store),
):
    """Standalone interactive map of the (filtered) reports."""
    await load_store(store, category)
    return ReportMapView(store.filtered, detail_url=report_detail_url).render_page()


# ============================================================================
# Session Routes
# ============================================================================

@app.get("/api/v1/session", response_model=SessionResponse, tags=["Session"])
async def get_current_session(header: SessionHeader = Depends(get_session_header)):
    """Who is signed in, for the header."""
    state = header.to_dict()
    return SessionResponse(authenticated=state["authenticated"], user=state["user"])


@app.post("/api/v1/auth/login", response_model=SessionResponse, tags=["Session"])
async def login(
    request: LoginRequest,
    header: SessionHeader = Depends(get_session_header),
    notifier: Notifier = Depends(get_notifier),
):
    """Forward credentials to the auth service and keep the token in a cookie."""
    session = await header.sign_in(request.email, request.password)
    if session is None:
        return error_response(401, notifier.last.message if notifier.last else "Erro ao entrar", notifier)

    response = JSONResponse(content=SessionResponse(
        authenticated=True,
        user=session.to_dict(),
        notifications=notifier.drain(),
    ).model_dump())
    if session.access_token:
        response.set_cookie(value=session.access_token, **session_cookie_kwargs())
    return response


@app.post("/api/v1/auth/signup", response_model=SessionResponse, tags=["Session"])
async def signup(
    request: SignupRequest,
    header: SessionHeader = Depends(get_session_header),
    notifier: Notifier = Depends(get_notifier),
):
    """Create an account through the auth service."""
    session = await header.sign_up(request.email, request.password, request.full_name)
    if session is None and notifier.last and notifier.last.level == NotificationLevel.ERROR:
        return error_response(400, notifier.last.message, notifier)

    response = JSONResponse(content=SessionResponse(
        authenticated=session is not None,
        user=session.to_dict() if session else None,
        notifications=notifier.drain(),
    ).model_dump())
    if session and session.access_token:
        response.set_cookie(value=session.access_token, **session_cookie_kwargs())
    return response


@app.post("/api/v1/auth/logout", response_model=SessionResponse, tags=["Session"])
async def logout(
    header: SessionHeader = Depends(get_session_header),
    notifier: Notifier = Depends(get_notifier),
):
    """Sign out and drop the session cookie."""
    await header.sign_out()
    notifier.info("Você saiu da sua conta")
    response = JSONResponse(content=SessionResponse(
        authenticated=False,
        notifications=notifier.drain(),
    ).model_dump())
    response.delete_cookie(settings.session_cookie_name)
    return response


# ============================================================================
# Main
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
