import hashlib

import pytest

from mixinkit.signing import sign_raw, trim_url_host


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://api.mixin.one/assets", "/assets"),
        ("/assets", "/assets"),
        ("https://api.mixin.one", "/"),
    ],
)
def test_trim_url_host(url, expected):
    assert trim_url_host(url) == expected


def test_trim_url_host_keeps_query():
    assert trim_url_host("https://api.mixin.one/snapshots?limit=10") == "/snapshots?limit=10"


def test_sign_raw_hashes_concatenation():
    assert sign_raw("GET", "/me", b"") == hashlib.sha256(b"GET/me").hexdigest()


def test_sign_raw_body_forms_agree():
    assert sign_raw("POST", "/users", '{"a":1}') == sign_raw("POST", "/users", b'{"a":1}')
    assert sign_raw("GET", "/me", None) == sign_raw("GET", "/me")


def test_sign_raw_depends_on_method():
    assert sign_raw("GET", "/me") != sign_raw("POST", "/me")
    assert len(sign_raw("GET", "/me")) == 64