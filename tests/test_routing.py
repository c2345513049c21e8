from datera_client.routing import (
    MUTED,
    REDACTED,
    build_url,
    canonicalize_route,
    redact_body,
    redact_headers,
    redact_payload,
)


def test_build_url_keeps_version_prefix():
    base = "https://cluster:7718/v2.2"

    assert build_url(base, "/app_instances/") == f"{base}/app_instances"
    assert build_url(base, "login") == f"{base}/login"
    assert build_url(base, "https://other/api_versions") == "https://other/api_versions"


def test_canonicalize_route_collapses_identifiers():
    route = canonicalize_route(
        "/v2.2/app_instances/8f3c1d2e-1111-2222-3333-444455556666/storage_instances/12",
        "2.2",
    )

    assert route == "/app_instances/{id}/storage_instances/{id}"
    assert canonicalize_route("/v2.2/system", "2.2") == "/system"


def test_sensitive_payloads_are_redacted():
    assert redact_payload({"name": "a", "password": "p"}, sensitive=True) == REDACTED
    assert redact_payload({"auth": {"target_user_name": "u"}}) == REDACTED
    assert redact_payload({"secret": "x"}) == REDACTED
    assert redact_payload({"name": "vol"}) == '{"name": "vol"}'


def test_quiet_mutes_everything():
    assert redact_payload({"name": "vol"}, quiet=True) == MUTED
    assert redact_body('{"data": {}}', quiet=True) == MUTED


def test_login_response_body_is_redacted():
    assert redact_body('{"key": "abc", "version": "v2.2"}') == REDACTED
    assert redact_body('{"data": {"name": "vol"}}') == '{"data": {"name": "vol"}}'


def test_auth_token_header_is_masked():
    headers = redact_headers({"Auth-Token": "abc", "tenant": "/root"})

    assert headers == {"Auth-Token": REDACTED, "tenant": "/root"}
