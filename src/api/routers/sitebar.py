"""
SiteBar compatibility endpoints.

Serves the legacy `/command.php` and `/search.php` URLs used by SiteBar browser
add-ons. Responses are HTML pages or redirects rather than JSON, and carry
permissive CORS headers so the add-on popup can call them from any origin.
"""
import logging

import pydantic
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_optional_user, get_settings
from core.auth import TOOLBAR_TOKEN_COOKIE, read_toolbar_token
from core.config import Settings
from models.user import User
from schemas.bookmark import BookmarkCreate
from services import bookmark_service, sitebar_renderer
from services.exceptions import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sitebar"], include_in_schema=False)

SITEBAR_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

_FIELD_ALIASES = {
    "url": ("url", "URL"),
    "title": ("title", "name", "Name"),
    "description": ("description", "desc", "Description"),
    "tags": ("tags", "Tags"),
}
_PRIVATE_VALUES = ("1", "on")
# Remembered toolbar token lifetime; the token itself may expire sooner
TOOLBAR_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


def _with_cors(response: Response) -> Response:
    response.headers.update(SITEBAR_CORS_HEADERS)
    return response


def _html(content: str, status_code: int = 200) -> Response:
    return _with_cors(HTMLResponse(content, status_code=status_code))


def _redirect(url: str) -> Response:
    return _with_cors(RedirectResponse(url, status_code=302))


def _remember_token(response: Response, token: str | None) -> Response:
    """Store a token sent as a query or form value in a cookie for later requests."""
    if token:
        response.set_cookie(
            TOOLBAR_TOKEN_COOKIE,
            token,
            max_age=TOOLBAR_COOKIE_MAX_AGE,
            path=sitebar_renderer.COMMAND_PATH,
            httponly=True,
            secure=True,
            samesite="none",
        )
    return response


def _first_value(form: dict[str, str], names: tuple[str, ...]) -> str:
    """Return the first non-empty form value among the alias names."""
    for name in names:
        value = form.get(name)
        if value:
            return value
    return ""


def parse_add_link_form(form: dict[str, str]) -> dict:
    """
    Map a SiteBar Add Link form body to bookmark fields.

    Add-ons disagree on field names, so several aliases are accepted for each
    field. A link is private when `private` or `is_private` is `1` or `on`.
    """
    fields = {field: _first_value(form, names) for field, names in _FIELD_ALIASES.items()}
    is_private = (
        form.get("private") in _PRIVATE_VALUES or form.get("is_private") in _PRIVATE_VALUES
    )
    return {
        "title": fields["title"] or None,
        "url": fields["url"] or None,
        "description": fields["description"],
        "tags": fields["tags"],
        "is_public": not is_private,
    }


def _validation_message(e: pydantic.ValidationError) -> str:
    return "; ".join(error["msg"] for error in e.errors())


@router.options("/command.php")
async def command_preflight() -> Response:
    """Answer CORS preflight requests from SiteBar add-ons."""
    return _with_cors(Response(status_code=200))


@router.api_route("/command.php", methods=["GET", "POST"])
async def sitebar_command(
    request: Request,
    command: str = "",
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Dispatch a SiteBar command.

    Supported commands (case-insensitive): `Log In` and `Add Link`. With no
    command, a page listing the commands is returned.

    Add Link authenticates with a bearer header or, for toolbar clients, a
    personal access token passed as `token` (query or form) or remembered in a
    cookie from an earlier request.
    """
    command = command.strip()
    if not command:
        return _html(sitebar_renderer.render_command_list(settings.frontend_url))

    normalized = command.lower()
    if normalized == sitebar_renderer.LOG_IN_COMMAND.lower():
        return _redirect(sitebar_renderer.login_redirect_url(settings.frontend_url))

    if normalized != sitebar_renderer.ADD_LINK_COMMAND.lower():
        return _html(sitebar_renderer.render_unsupported(command, settings.frontend_url))

    if current_user is None:
        return _redirect(sitebar_renderer.login_redirect_url(
            settings.frontend_url,
            url=request.query_params.get("url", ""),
        ))

    # Only a token that did the authenticating is remembered
    sent_token = None
    if not settings.dev_mode and "authorization" not in request.headers:
        sent_token = await read_toolbar_token(request, include_cookie=False)

    if request.method == "GET":
        return _remember_token(_html(sitebar_renderer.render_add_link_form(
            url=request.query_params.get("url", ""),
            title=request.query_params.get("name", ""),
            description=request.query_params.get("desc", ""),
            token=sent_token or "",
        )), sent_token)

    raw_form = await request.form()
    form = {key: value for key, value in raw_form.items() if isinstance(value, str)}
    try:
        data = BookmarkCreate(**parse_add_link_form(form))
        bookmark = await bookmark_service.create_bookmark(db, current_user.id, data)
    except pydantic.ValidationError as e:
        return _html(sitebar_renderer.render_invalid_link(_validation_message(e)), 400)
    except ValidationError as e:
        return _html(sitebar_renderer.render_invalid_link(str(e)), 400)

    logger.info("SiteBar link saved: bookmark_id=%s user_id=%s", bookmark.id, current_user.id)
    return _remember_token(_html(sitebar_renderer.render_saved(settings.frontend_url)), sent_token)


@router.get("/search.php")
async def sitebar_search(
    q: str = "",
    settings: Settings = Depends(get_settings),
) -> Response:
    """Redirect a SiteBar search to the bookmarks page."""
    return _redirect(sitebar_renderer.search_redirect_url(settings.frontend_url, q))
