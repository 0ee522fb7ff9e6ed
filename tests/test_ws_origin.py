from __future__ import annotations

import pytest

from relay_server.ws_origin import AllowedHostsOrForwardedHostOriginValidator, hostname_of, is_private_ip


def scope(**headers):
    return {
        "type": "websocket",
        "path": "/ws/share/",
        "headers": [(k.replace("_", "-").encode(), v.encode()) for k, v in headers.items()],
    }


@pytest.fixture
def validator(settings):
    settings.ALLOWED_HOSTS = ["share.example.com"]
    return AllowedHostsOrForwardedHostOriginValidator(application=None)


def test_hostname_of():
    assert hostname_of("https://Share.Example.com:8443") == "share.example.com"
    assert hostname_of("share.example.com:3000") == "share.example.com"
    assert hostname_of("") == ""


def test_is_private_ip():
    assert is_private_ip("10.0.6.44")
    assert is_private_ip("192.168.1.2")
    assert not is_private_ip("8.8.8.8")
    assert not is_private_ip("share.example.com")


def test_origin_must_match_allowed_hosts(validator):
    assert validator.is_allowed(scope(origin="https://share.example.com"))
    assert not validator.is_allowed(scope(origin="https://evil.example.net", host="share.example.com"))


def test_missing_origin_falls_back_to_host_headers(validator):
    assert validator.is_allowed(scope(host="share.example.com:443"))
    assert validator.is_allowed(scope(host="internal", x_forwarded_host="share.example.com, proxy"))
    assert validator.is_allowed(scope(host="10.0.6.44:3000"))
    assert not validator.is_allowed(scope(host="other.example.net"))


async def test_denied_connection_is_closed(validator):
    sent = []
    inbound = [{"type": "websocket.connect"}, {"type": "websocket.disconnect", "code": 1000}]

    async def receive():
        return inbound.pop(0)

    async def send(message):
        sent.append(message)

    await validator(scope(origin="https://evil.example.net"), receive, send)
    assert sent and sent[0]["type"] == "websocket.close"
