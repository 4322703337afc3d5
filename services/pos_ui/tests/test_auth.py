import pytest

import auth
from api import ApiError
from storage import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY


class _FakeApi:
    def __init__(self, login_result=None, user=None, login_error=None, logout_error=None):
        self.login_result = login_result or {"access": "A", "refresh": "R"}
        self.user = user or {"id": 2, "username": "admin", "full_name": "Farhod", "role": "a"}
        self.login_error = login_error
        self.logout_error = logout_error
        self.logged_out_with = None

    def login(self, username, password):
        if self.login_error:
            raise self.login_error
        return self.login_result

    def current_user(self):
        return self.user

    def logout(self, refresh_token):
        self.logged_out_with = refresh_token
        if self.logout_error:
            raise self.logout_error
        return {}


def test_login_persists_tokens_and_user(kv):
    user = auth.login(_FakeApi(), kv, "admin", "admin123")

    assert user.role == "admin"
    assert user.name == "Farhod"
    assert kv.get(ACCESS_TOKEN_KEY) == "A"
    assert kv.get(REFRESH_TOKEN_KEY) == "R"
    assert auth.current_user(kv) == user


@pytest.mark.parametrize(
    "me,name,role",
    [
        ({"id": 5, "username": "sardor", "role": "S"}, "sardor", "salesperson"),
        ({"id": 5, "username": "sardor", "full_name": None, "role": "M"}, "sardor", "manager"),
        ({"id": 5, "username": "sardor", "full_name": "Sardor T", "role": "A"}, "Sardor T", "admin"),
    ],
)
def test_login_maps_backend_user(kv, me, name, role):
    user = auth.login(_FakeApi(user=me), kv, "sardor", "pw")

    assert user is not None
    assert (user.id, user.name, user.role) == ("5", name, role)
    assert auth.current_user(kv) == user


def test_failed_login_clears_previous_session(kv):
    kv.set(ACCESS_TOKEN_KEY, "old")
    kv.set(USER_KEY, {"id": "1", "username": "x"})

    user = auth.login(_FakeApi(login_error=ApiError(401, "bad credentials")), kv, "x", "y")

    assert user is None
    assert kv.keys() == []


def test_logout_clears_even_when_api_fails(kv):
    api = _FakeApi(logout_error=ApiError(None, "offline"))
    auth.login(api, kv, "admin", "admin123")

    auth.logout(api, kv)

    assert api.logged_out_with == "R"
    assert auth.current_user(kv) is None
    assert kv.get(ACCESS_TOKEN_KEY) is None


def test_logout_without_refresh_token_skips_api(kv):
    api = _FakeApi()
    auth.logout(api, kv)
    assert api.logged_out_with is None


def test_corrupt_stored_user_is_discarded(kv):
    kv.set(USER_KEY, {"username": "no id"})
    assert auth.current_user(kv) is None
    assert kv.get(USER_KEY) is None
