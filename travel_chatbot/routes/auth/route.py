import logging

import httpx
from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import IntegrityError
from starlette.concurrency import run_in_threadpool

from travel_chatbot.auth import oauth
from travel_chatbot.auth import storage as auth_storage
from travel_chatbot.auth.jwt_auth import (
    CurrentUser,
    compare_password,
    generate_token,
    get_current_user,
    hash_password,
)
from travel_chatbot.exceptions import OAuthProfileError
from travel_chatbot.routes.auth.schemas import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    SignupRequest,
)
from travel_chatbot.settings import config

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter()


@router.post(
    "/signup",
    response_model=AuthResponse,
    summary="Create an account",
    description="Registers an email/password user and returns a bearer token",
)
def signup(request: SignupRequest):
    if auth_storage.get_user_by_email(request.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists"
        )
    try:
        user = auth_storage.create_user(
            {
                "email": request.email,
                "password_hash": hash_password(request.password),
                "first_name": request.first_name,
                "last_name": request.last_name,
            }
        )
    except IntegrityError:
        # lost a race with a concurrent signup for the same email
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists"
        )
    except Exception as e:
        logger.error(f"Signup error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user",
        )

    logger.info(f"Created user {user['id']}")
    token = generate_token(user["id"], user["email"])
    return AuthResponse(user=auth_storage.public_user(user), token=token)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in",
    description="Exchanges email and password for a bearer token",
)
def login(request: LoginRequest):
    user = auth_storage.get_user_by_email(request.email)
    if not user or not user.get("password_hash"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )
    if not compare_password(request.password, user["password_hash"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    token = generate_token(user["id"], user["email"])
    return AuthResponse(user=auth_storage.public_user(user), token=token)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Current user",
)
def me(current_user: CurrentUser = Depends(get_current_user)):
    user = auth_storage.get_user_by_id(current_user.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return MeResponse(user=auth_storage.public_user(user))


def oauth_client_or_404(provider: str):
    client = oauth.get_oauth_client(provider)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"OAuth provider '{provider}' is not configured",
        )
    return client


@router.get(
    "/{provider}",
    summary="Start an OAuth login",
    description="Redirects to the provider's consent page (google, facebook, linkedin, github)",
)
async def oauth_login(provider: str, request: Request):
    client = oauth_client_or_404(provider)
    return await client.authorize_redirect(request, oauth.callback_url(provider))


@router.get(
    "/{provider}/callback",
    summary="Finish an OAuth login",
    description="Signs the provider's user in and redirects to the app with ?token= or ?error=",
)
async def oauth_callback(provider: str, request: Request):
    client = oauth_client_or_404(provider)
    try:
        token = await client.authorize_access_token(request)
        profile = await oauth.fetch_profile(provider, client, token)
    except (OAuthError, OAuthProfileError, httpx.HTTPError) as e:
        logger.warning(f"OAuth sign-in with {provider} failed: {e}")
        return RedirectResponse(
            f"{config.auth_redirect_url}?error={provider}", status_code=status.HTTP_302_FOUND
        )

    user = await run_in_threadpool(oauth.find_or_create_user, profile)
    token = generate_token(user["id"], user["email"])
    return RedirectResponse(
        f"{config.auth_redirect_url}?token={token}", status_code=status.HTTP_302_FOUND
    )
