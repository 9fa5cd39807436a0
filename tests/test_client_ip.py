from starlette.requests import Request

from passwatch.app.api.deps import get_client_ip

PROXY = "10.1.1.1"


def make_request(peer=("203.0.113.9", 51000), headers=None):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/v1/auth/login",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
        "client": peer,
    }
    return Request(scope)


def test_peer_address_without_proxies():
    request = make_request(headers={"X-Forwarded-For": "10.0.0.1", "X-Real-IP": "10.0.0.2"})

    assert get_client_ip(request, trusted_proxies=set()) == "203.0.113.9"


def test_untrusted_peer_cannot_claim_another_address():
    request = make_request(headers={"X-Forwarded-For": "10.0.0.1"})

    assert get_client_ip(request, trusted_proxies={PROXY}) == "203.0.113.9"


def test_trusted_proxy_forwards_client_address():
    request = make_request(peer=(PROXY, 443), headers={"X-Forwarded-For": "198.51.100.7"})

    assert get_client_ip(request, trusted_proxies={PROXY}) == "198.51.100.7"


def test_rightmost_untrusted_hop_wins():
    # Client prepended a spoofed value; the proxy chain appended the real one
    request = make_request(
        peer=(PROXY, 443),
        headers={"X-Forwarded-For": "10.0.0.1, 198.51.100.7, 10.1.1.2"},
    )

    assert get_client_ip(request, trusted_proxies={PROXY, "10.1.1.2"}) == "198.51.100.7"


def test_real_ip_header_from_trusted_proxy():
    request = make_request(peer=(PROXY, 443), headers={"X-Real-IP": "198.51.100.8"})

    assert get_client_ip(request, trusted_proxies={PROXY}) == "198.51.100.8"


def test_trusted_proxy_without_headers_falls_back_to_peer():
    request = make_request(peer=(PROXY, 443))

    assert get_client_ip(request, trusted_proxies={PROXY}) == PROXY


def test_missing_peer():
    assert get_client_ip(make_request(peer=None), trusted_proxies=set()) == "unknown"


def test_default_trusts_no_proxy():
    request = make_request(headers={"X-Forwarded-For": "10.0.0.1"})

    assert get_client_ip(request) == "203.0.113.9"
