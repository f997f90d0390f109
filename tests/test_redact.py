from __future__ import annotations

from candlesync._redact import redact_for_log


def test_redact_for_log_redacts_credentials() -> None:
    headers = {
        "accept": "application/vnd.github+json",
        "Authorization": "token ghp-secret",
        "nested": {"token": "ghp-other"},
    }

    redacted = redact_for_log(headers)
    assert redacted["accept"] == "application/vnd.github+json"
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["nested"]["token"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    redacted = redact_for_log({"message": "x" * 600}, max_string=10)
    assert redacted["message"].startswith("x" * 10)
    assert "<truncated 600 chars>" in redacted["message"]


def test_redact_for_log_summarizes_file_content() -> None:
    body = {"files": {"candles.json": {"filename": "candles.json", "content": "[]" * 50}}}

    redacted = redact_for_log(body)

    assert redacted["files"]["candles.json"] == {"filename": "candles.json", "content": "<content:100 chars>"}


def test_redact_for_log_walks_lists() -> None:
    assert redact_for_log([{"token": "a"}, 1, None]) == [{"token": "<redacted>"}, 1, None]
