"""Local key-value persistence, the front end's equivalent of browser storage.

Values are stored as JSON in a single ``kv_store`` table so tokens, the
signed-in user and the cart survive a Streamlit restart.
"""

from typing import Any, List, Optional

from db import make_session_factory
from logging_setup import get_logger
from models import StoredValue

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"
CART_KEY = "cart"

_logger = get_logger("pos_ui.storage")


class KeyValueStore:
    def __init__(self, engine):
        self._sessions = make_session_factory(engine)

    def get(self, key: str, default: Any = None) -> Any:
        with self._sessions() as db:
            row = db.get(StoredValue, key)
            return default if row is None else row.value

    def set(self, key: str, value: Any) -> None:
        with self._sessions() as db:
            row = db.get(StoredValue, key)
            if row is None:
                db.add(StoredValue(key=key, value=value))
            else:
                row.value = value
            db.commit()
        _logger.debug("storage:set key=%s", key)

    def remove(self, key: str) -> None:
        with self._sessions() as db:
            row = db.get(StoredValue, key)
            if row is not None:
                db.delete(row)
                db.commit()
        _logger.debug("storage:remove key=%s", key)

    def keys(self) -> List[str]:
        with self._sessions() as db:
            return [k for (k,) in db.query(StoredValue.key).order_by(StoredValue.key)]


class TokenStore:
    """Bearer tokens kept in the local store."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    @property
    def access_token(self) -> Optional[str]:
        return self._store.get(ACCESS_TOKEN_KEY)

    @access_token.setter
    def access_token(self, token: Optional[str]) -> None:
        if token:
            self._store.set(ACCESS_TOKEN_KEY, token)
        else:
            self._store.remove(ACCESS_TOKEN_KEY)

    @property
    def refresh_token(self) -> Optional[str]:
        return self._store.get(REFRESH_TOKEN_KEY)

    @refresh_token.setter
    def refresh_token(self, token: Optional[str]) -> None:
        if token:
            self._store.set(REFRESH_TOKEN_KEY, token)
        else:
            self._store.remove(REFRESH_TOKEN_KEY)

    def clear(self) -> None:
        self._store.remove(ACCESS_TOKEN_KEY)
        self._store.remove(REFRESH_TOKEN_KEY)
