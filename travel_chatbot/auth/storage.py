from typing import Any

from travel_chatbot.db.crud_helper import user_crud
from travel_chatbot.models.auth import User


def create_user(data: dict[str, Any]) -> dict[str, Any]:
    return user_crud.create_resource(data)


def get_user_by_email(email: str) -> dict[str, Any] | None:
    return user_crud.get_resource(resource_id=None, where=[User.email == email])


def get_user_by_id(user_id: str) -> dict[str, Any] | None:
    return user_crud.get_resource(resource_id=user_id)


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    """User row without its password hash."""
    return {k: v for k, v in user.items() if k != "password_hash"}
