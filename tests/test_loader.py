import base64

import pytest

from flairc.loader import load


def test_decodes_css_parameter():
    assert load("css=d2lkdGg6MTAwJTs=") == b"width:100%;"


def test_full_resource_identifier():
    assert load("/src/Example.js.flair.css?css=d2lkdGg6MTAwJTs=") == b"width:100%;"
    assert load("virtual.css?other=1&css=d2lkdGg6MTAwJTs=") == b"width:100%;"


@pytest.mark.parametrize(
    "resource",
    ["", "css=", "other=abc", "/plain/file.css", "css=***not-base64***", "css=abcde", "css=ab-_cd+/"],
)
def test_missing_or_malformed_payload_is_empty(resource):
    assert load(resource) == b""


def test_plus_sign_survives_query_decoding():
    css = b".a>.b{content:'\xfb\xef'}"
    payload = base64.b64encode(css).decode()
    assert "+" in payload
    assert load(f"css={payload}") == css


def test_urlsafe_alphabet_and_stripped_padding():
    css = b".a>.b{content:'\xfb\xef'}"
    payload = base64.urlsafe_b64encode(css).decode().rstrip("=")
    assert load(f"css={payload}") == css


def test_percent_encoded_payload():
    assert load("css=d2lkdGg6MTAwJTs%3D") == b"width:100%;"
