import threading

from orisun_client.interceptors.auth import (
    AUTH_TOKEN_META_KEY,
    AUTHORIZATION_META_KEY,
    AuthMiddleware,
    TokenCache,
    basic_credentials,
)


def test_empty_cache_without_credentials_builds_nothing():
    cache = TokenCache()
    assert cache.build_auth_headers(basic_credentials(None, None)) == {}
    assert cache.build_auth_headers(None) == {}


def test_basic_credentials_memoized():
    calls = []

    def supplier():
        calls.append(1)
        return "Basic abc"

    cache = TokenCache()
    assert cache.build_auth_headers(supplier) == {AUTHORIZATION_META_KEY: "Basic abc"}
    assert cache.build_auth_headers(supplier) == {AUTHORIZATION_META_KEY: "Basic abc"}
    assert len(calls) == 1


def test_basic_credentials_encoding():
    assert basic_credentials("admin", "changeit")() == "Basic YWRtaW46Y2hhbmdlaXQ="


def test_token_wins_over_basic_credentials():
    cache = TokenCache()
    cache.build_auth_headers(basic_credentials("admin", "changeit"))
    cache.cache_token("T1")
    assert cache.build_auth_headers(basic_credentials("admin", "changeit")) == {AUTH_TOKEN_META_KEY: "T1"}


def test_blank_token_is_ignored():
    cache = TokenCache()
    cache.cache_token("T1")
    cache.cache_token("   ")
    cache.cache_token(None)
    assert cache.cached_token == "T1"


def test_extract_token_from_headers():
    cache = TokenCache()
    cache.extract_and_cache_token((("X-Auth-Token", b"T2"), ("other", "x")))
    assert cache.cached_token == "T2"

    cache.extract_and_cache_token((("x-auth-token", ""),))
    assert cache.cached_token == "T2"

    cache.extract_and_cache_token(None)
    assert cache.has_token()


def test_clear_token():
    cache = TokenCache()
    cache.cache_token("T1")
    cache.clear_token()
    assert not cache.has_token()


def test_concurrent_writers_leave_one_token():
    cache = TokenCache()
    threads = [threading.Thread(target=cache.cache_token, args=(f"T{i}",)) for i in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert cache.cached_token in {f"T{i}" for i in range(16)}


def test_auth_middleware_replaces_existing_auth_headers():
    cache = TokenCache()
    cache.cache_token("T1")
    middleware = AuthMiddleware(cache)
    metadata = middleware.before_call("/svc/M", [(AUTH_TOKEN_META_KEY, "stale"), ("x-request-id", "r1")])
    assert metadata == [("x-request-id", "r1"), (AUTH_TOKEN_META_KEY, "T1")]


def test_auth_middleware_harvests_token():
    cache = TokenCache()
    AuthMiddleware(cache).on_headers("/svc/M", ((AUTH_TOKEN_META_KEY, "T3"),))
    assert cache.cached_token == "T3"
