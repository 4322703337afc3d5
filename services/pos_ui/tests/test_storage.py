from storage import ACCESS_TOKEN_KEY, TokenStore


def test_set_get_remove(kv):
    assert kv.get("missing") is None
    assert kv.get("missing", default=[]) == []

    kv.set("language", "uz")
    kv.set("cart", [{"id": "a", "quantity": 2}])
    assert kv.get("language") == "uz"
    assert kv.get("cart") == [{"id": "a", "quantity": 2}]

    kv.set("language", "ru")
    assert kv.get("language") == "ru"
    assert kv.keys() == ["cart", "language"]

    kv.remove("language")
    kv.remove("language")
    assert kv.get("language") is None


def test_token_store_round_trip(kv):
    tokens = TokenStore(kv)
    tokens.access_token = "abc"
    tokens.refresh_token = "def"
    assert kv.get(ACCESS_TOKEN_KEY) == "abc"
    assert tokens.refresh_token == "def"

    tokens.access_token = None
    assert tokens.access_token is None

    tokens.clear()
    assert kv.keys() == []
