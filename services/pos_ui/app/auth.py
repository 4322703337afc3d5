from typing import Optional

from pydantic import ValidationError

from api import ApiError
from logging_setup import get_logger
from schemas import User
from storage import USER_KEY, TokenStore

_logger = get_logger("pos_ui.auth")


def current_user(store) -> Optional[User]:
    raw = store.get(USER_KEY)
    if not raw:
        return None
    try:
        return User.model_validate(raw)
    except ValidationError:
        _logger.warning("auth:stored_user_invalid; clearing")
        store.remove(USER_KEY)
        return None


def login(api, store, username: str, password: str) -> Optional[User]:
    """Sign in and persist the token and user; ``None`` on any failure."""
    tokens = TokenStore(store)
    tokens.clear()

    try:
        result = api.login(username, password)
        tokens.access_token = result["access"]
        tokens.refresh_token = result.get("refresh")

        user = User.model_validate(api.current_user())
    except (ApiError, ValidationError) as e:
        _logger.warning("auth:login_failed username=%s: %s", username, e)
        tokens.clear()
        store.remove(USER_KEY)
        return None

    store.set(USER_KEY, user.model_dump(mode="json"))
    _logger.info("auth:login username=%s role=%s", user.username, user.role)
    return user


def logout(api, store) -> None:
    tokens = TokenStore(store)
    refresh = tokens.refresh_token
    try:
        if refresh:
            api.logout(refresh)
    except ApiError as e:
        _logger.warning("auth:logout_api_failed: %s", e)
    finally:
        tokens.clear()
        store.remove(USER_KEY)
    _logger.info("auth:logout")
