import logging
from typing import Any

from authlib.integrations.starlette_client import OAuth

from travel_chatbot.auth import storage as auth_storage
from travel_chatbot.exceptions import OAuthProfileError
from travel_chatbot.settings import Config, config

logger = logging.getLogger(__name__)

PROVIDERS: dict[str, dict[str, Any]] = {
    "google": {
        "server_metadata_url": "https://accounts.google.com/.well-known/openid-configuration",
        "client_kwargs": {"scope": "openid email profile"},
    },
    "facebook": {
        "access_token_url": "https://graph.facebook.com/v19.0/oauth/access_token",
        "authorize_url": "https://www.facebook.com/v19.0/dialog/oauth",
        "api_base_url": "https://graph.facebook.com/v19.0/",
        "client_kwargs": {"scope": "email"},
    },
    "linkedin": {
        "server_metadata_url": "https://www.linkedin.com/oauth/.well-known/openid-configuration",
        "client_kwargs": {
            "scope": "openid profile email",
            "token_endpoint_auth_method": "client_secret_post",
        },
    },
    "github": {
        "access_token_url": "https://github.com/login/oauth/access_token",
        "authorize_url": "https://github.com/login/oauth/authorize",
        "api_base_url": "https://api.github.com/",
        "client_kwargs": {"scope": "user:email"},
    },
}

oauth = OAuth()


def provider_credentials(settings: Config) -> dict[str, tuple[str | None, str | None]]:
    return {
        "google": (settings.google_client_id, settings.google_client_secret),
        "facebook": (settings.facebook_app_id, settings.facebook_app_secret),
        "linkedin": (settings.linkedin_client_id, settings.linkedin_client_secret),
        "github": (settings.github_client_id, settings.github_client_secret),
    }


def register_providers(registry: OAuth, settings: Config) -> list[str]:
    """Register every provider whose id and secret are both configured."""
    registered = []
    for name, (client_id, client_secret) in provider_credentials(settings).items():
        if not (client_id and client_secret):
            continue
        registry.register(name, client_id=client_id, client_secret=client_secret, **PROVIDERS[name])
        registered.append(name)
    logger.info(f"OAuth providers enabled: {registered or 'none'}")
    return registered


register_providers(oauth, config)


def get_oauth_client(provider: str):
    """Registered client for ``provider``, or None if it is unknown or not configured."""
    if provider not in PROVIDERS:
        return None
    return oauth.create_client(provider)


def callback_url(provider: str) -> str:
    return f"{config.callback_base_url}/api/auth/{provider}/callback"


async def fetch_profile(provider: str, client, token: dict[str, Any]) -> dict[str, Any]:
    """
    Normalise the provider's user profile into ``users`` columns.

    Raises:
        OAuthProfileError: the provider did not disclose an email address
        httpx.HTTPError: a profile request failed
    """
    if provider in ("google", "linkedin"):
        info = token.get("userinfo") or await client.userinfo(token=token)
        profile = {
            "email": info.get("email"),
            "first_name": info.get("given_name"),
            "last_name": info.get("family_name"),
            "profile_image_url": info.get("picture"),
        }
    elif provider == "facebook":
        resp = await client.get(
            "me", params={"fields": "id,email,first_name,last_name,picture"}, token=token
        )
        resp.raise_for_status()
        info = resp.json()
        profile = {
            "email": info.get("email"),
            "first_name": info.get("first_name"),
            "last_name": info.get("last_name"),
            "profile_image_url": info.get("picture", {}).get("data", {}).get("url"),
        }
    else:
        profile = await _github_profile(client, token)

    if not profile["email"]:
        raise OAuthProfileError(f"No email found in {provider} profile")
    return profile


async def _github_profile(client, token: dict[str, Any]) -> dict[str, Any]:
    resp = await client.get("user", token=token)
    resp.raise_for_status()
    info = resp.json()

    email = info.get("email")
    if not email:
        # private address: ask for the verified primary one
        resp = await client.get("user/emails", token=token)
        resp.raise_for_status()
        email = next(
            (e["email"] for e in resp.json() if e.get("primary") and e.get("verified")),
            None,
        )

    name_parts = (info.get("name") or "").split()
    return {
        "email": email,
        "first_name": name_parts[0] if name_parts else info.get("login"),
        "last_name": " ".join(name_parts[1:]) or None,
        "profile_image_url": info.get("avatar_url"),
    }


def find_or_create_user(profile: dict[str, Any]) -> dict[str, Any]:
    """Existing account for the email, or a new one with no password."""
    user = auth_storage.get_user_by_email(profile["email"])
    if user:
        return user
    user = auth_storage.create_user({**profile, "password_hash": None})
    logger.info(f"Created user {user['id']} from OAuth sign-in")
    return user
