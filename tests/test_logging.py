from dashboard.core.logging import _add_correlation, _app_fields, request_context


def test_request_context_binds_and_resets_ids():
    with request_context("req-1", "abcdefghijklmnop"):
        event = _add_correlation(None, "info", {"event": "x"})

    assert event == {"event": "x", "request_id": "req-1", "session": "abcdefgh"}
    assert _add_correlation(None, "info", {"event": "y"}) == {"event": "y"}


def test_app_fields_do_not_override_explicit_values():
    add_app_fields = _app_fields("dashboard", "1.2.3")
    assert add_app_fields(None, "info", {"app": "other"}) == {"app": "other", "version": "1.2.3"}
