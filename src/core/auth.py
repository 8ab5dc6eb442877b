"""Authentication module for Auth0 JWT validation and DEV_MODE bypass."""
import logging

import httpx
import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from db.session import get_async_session
from models.user import User
from services import token_service, user_service

logger = logging.getLogger(__name__)


# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)

# Cache for JWKS client (reuse across requests)
_jwks_clients: dict[str, PyJWKClient] = {}

DEV_AUTH0_ID = "dev|local-development-user"

TOOLBAR_TOKEN_PARAM = "token"
TOOLBAR_TOKEN_COOKIE = "sitebar_token"


def get_jwks_client(settings: Settings) -> PyJWKClient:
    """Get or create a cached JWKS client for the given settings."""
    if settings.auth0_jwks_url not in _jwks_clients:
        _jwks_clients[settings.auth0_jwks_url] = PyJWKClient(
            settings.auth0_jwks_url,
            cache_jwk_set=True,
            lifespan=3600,  # Cache keys for 1 hour
        )
    return _jwks_clients[settings.auth0_jwks_url]


def decode_jwt(token: str, settings: Settings) -> dict:
    """
    Decode and validate a JWT token from Auth0.

    Raises:
        HTTPException: If token is invalid, expired, or has wrong audience/issuer.
    """
    try:
        jwks_client = get_jwks_client(settings)
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.auth0_audience,
            issuer=settings.auth0_issuer,
        )

    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidAudienceError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid audience",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidIssuerError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid issuer",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.PyJWTError as e:
        # Log full details for debugging (server-side only)
        logger.warning("JWT validation failed: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except httpx.HTTPError as e:
        logger.error("Failed to fetch JWKS from Auth0: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not validate credentials",
        )


async def _get_user_by_auth0_id(db: AsyncSession, auth0_id: str) -> User | None:
    result = await db.execute(select(User).where(User.auth0_id == auth0_id))
    return result.scalar_one_or_none()


async def _claimable_email(db: AsyncSession, user: User | None, email: str | None) -> str | None:
    """
    Return the normalized email if no other user holds it, else None.

    Emails are unique; a provider account whose email is already registered to a
    different user keeps its previous (or no) email rather than failing login.
    """
    normalized = user_service.normalize_email(email)
    if normalized is None:
        return None
    holder = await user_service.get_user_by_email(db, normalized)
    if holder is not None and (user is None or holder.id != user.id):
        logger.warning("Email already registered to another user; not assigning it")
        return None
    return normalized


async def get_or_create_user(
    db: AsyncSession,
    auth0_id: str,
    email: str | None = None,
    name: str | None = None,
) -> User:
    """
    Get existing user or create new one from Auth0 claims.

    Handles race conditions where multiple concurrent requests try to create
    the same user simultaneously. The insert runs in a savepoint; if it fails
    on the unique auth0_id constraint, the existing user is fetched instead.

    Note: Uses flush(), not commit. Session generator handles commit at request end.
    """
    user = await _get_user_by_auth0_id(db, auth0_id)

    if user is None:
        claimed_email = await _claimable_email(db, None, email)
        try:
            async with db.begin_nested():
                user = await user_service.create_user(
                    db, auth0_id=auth0_id, email=claimed_email, name=name,
                )
        except IntegrityError:
            # Race condition: another request created the user between our
            # SELECT and INSERT. The savepoint is rolled back; fetch theirs.
            user = await _get_user_by_auth0_id(db, auth0_id)
            if user is None:
                raise
        return user

    # Refresh profile fields if they changed at the identity provider
    changed = False
    if name and user.name != name:
        user.name = name
        changed = True
    normalized = user_service.normalize_email(email)
    if normalized and user.email != normalized:
        claimed_email = await _claimable_email(db, user, normalized)
        if claimed_email is not None:
            user.email = claimed_email
            changed = True
    if changed:
        await db.flush()
        await db.refresh(user)

    return user


async def get_or_create_dev_user(db: AsyncSession) -> User:
    """Get or create a development user for DEV_MODE."""
    return await get_or_create_user(
        db,
        auth0_id=DEV_AUTH0_ID,
        email="dev@localhost",
        name="Developer",
    )


async def validate_pat(db: AsyncSession, token: str) -> User:
    """
    Validate a personal access token and return its user.

    Raises:
        HTTPException: If the token is unknown, expired or revoked.
    """
    api_token = await token_service.validate_token(db, token)
    if api_token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await db.execute(select(User).where(User.id == api_token.user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def _authenticate_user(
    credentials: HTTPAuthorizationCredentials | None,
    db: AsyncSession,
    settings: Settings,
) -> User:
    """
    Authenticate the request's bearer token and return the acting user.

    Supports both:
    - Auth0 JWTs (web UI)
    - Personal access tokens starting with 'bm_' (SiteBar toolbar, scripts)

    In DEV_MODE, bypasses auth and returns a local development user.
    """
    if settings.dev_mode:
        return await get_or_create_dev_user(db)

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    if token_service.is_personal_token(token):
        return await validate_pat(db, token)

    payload = decode_jwt(token, settings)

    auth0_id = payload.get("sub")
    if not auth0_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing sub claim",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return await get_or_create_user(
        db,
        auth0_id=auth0_id,
        email=payload.get("email"),
        name=payload.get("name"),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """Dependency that validates the token and returns the current user."""
    return await _authenticate_user(credentials, db, settings)


async def get_current_user_auth0_only(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Dependency for token management: Auth0 login required, personal tokens refused.

    A leaked personal token must not be able to mint or list other tokens.
    """
    if credentials is not None and token_service.is_personal_token(credentials.credentials):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This endpoint does not accept personal access tokens",
        )
    return await _authenticate_user(credentials, db, settings)


async def read_toolbar_token(request: Request, *, include_cookie: bool = True) -> str | None:
    """
    Find a personal access token sent the way SiteBar clients can send one.

    Looked up in order: `token` query parameter, `token` form field (POST), and
    the `sitebar_token` cookie set after a previous successful request.
    """
    token = request.query_params.get(TOOLBAR_TOKEN_PARAM)
    if not token and request.method == "POST":
        form = await request.form()
        value = form.get(TOOLBAR_TOKEN_PARAM)
        if isinstance(value, str):
            token = value
    if not token and include_cookie:
        token = request.cookies.get(TOOLBAR_TOKEN_COOKIE)
    return token or None


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User | None:
    """
    Dependency that returns the current user, or None when no credential is sent.

    Used by the SiteBar toolbar endpoint, which redirects anonymous clients to the
    login page instead of answering 401. Besides the Authorization header, a
    personal access token is accepted as a query parameter, form field or cookie,
    since toolbar add-ons and browser navigations cannot set headers.
    Invalid credentials still raise 401.
    """
    if settings.dev_mode or credentials is not None:
        return await _authenticate_user(credentials, db, settings)

    token = await read_toolbar_token(request)
    if token is None:
        return None
    return await validate_pat(db, token)
