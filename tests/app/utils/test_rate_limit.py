"""Tests for check_chat_rate_limit."""

from unittest.mock import MagicMock

from app.utils.rate_limit import check_chat_rate_limit


def _redis(count):
    client = MagicMock()
    client.incr.return_value = count
    return client


def test_no_redis_allows():
    assert check_chat_rate_limit("u1", None, 5) is True


def test_no_limit_allows():
    assert check_chat_rate_limit("u1", _redis(100), None) is True
    assert check_chat_rate_limit("u1", _redis(100), 0) is True


def test_within_limit():
    assert check_chat_rate_limit("u1", _redis(5), 5) is True


def test_over_limit():
    assert check_chat_rate_limit("u1", _redis(6), 5) is False


def test_first_request_opens_window():
    client = _redis(1)
    check_chat_rate_limit("user-42", client, 5, window_seconds=900)
    client.incr.assert_called_once_with("chat:ratelimit:user-42")
    client.expire.assert_called_once_with("chat:ratelimit:user-42", 900)


def test_later_requests_do_not_extend_window():
    """Retries while limited must not push the expiry forward."""
    client = _redis(7)
    assert check_chat_rate_limit("user-42", client, 5, window_seconds=900) is False
    client.expire.assert_not_called()


def test_redis_failure_allows():
    client = MagicMock()
    client.incr.side_effect = ConnectionError("redis down")
    assert check_chat_rate_limit("u1", client, 5) is True
