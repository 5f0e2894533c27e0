"""Storage recalculation cron job: recalculates usage, then clears each bot's cached validation."""

from unittest.mock import MagicMock, patch

import requests
from fastapi.testclient import TestClient

from apps.subscription_api.main import app
from apps.subscription_api.services import repo
from cron import storage_recalc
from cron.config import config


def _session_mock(post) -> tuple[MagicMock, MagicMock]:
    session = MagicMock()
    session.post.side_effect = post
    session_cls = MagicMock()
    session_cls.return_value.__enter__.return_value = session
    return session_cls, session


def test_recalculates_and_clears_cache_for_every_bot(db, monkeypatch) -> None:
    company = repo.create_company("Acme", "active", "starter")
    bot_a = repo.create_bot(company.id, "a")
    bot_b = repo.create_bot(company.id, "b")
    repo.insert_files(company.id, [{"name": "x.pdf", "size_bytes": 1234}])
    monkeypatch.setattr(config, "COMPANIES", [company.id])
    monkeypatch.setattr(config, "API_BASE", "http://api.test/")

    session_cls, session = _session_mock(lambda *a, **kw: MagicMock(status_code=200))
    with patch("cron.storage_recalc.requests.Session", session_cls):
        assert storage_recalc.main() == 0

    assert repo.get_company(company.id).storage_used_bytes == 1234
    bodies = [c.kwargs["json"] for c in session.post.call_args_list]
    assert bodies == [
        {"companyId": company.id, "botId": bot_a.id},
        {"companyId": company.id, "botId": bot_b.id},
    ]
    assert all(c.args[0] == "http://api.test/subscription/clear-cache" for c in session.post.call_args_list)


def test_defaults_to_all_companies(db, monkeypatch) -> None:
    first = repo.create_company("One")
    second = repo.create_company("Two")
    repo.insert_files(second.id, [{"name": "y.pdf", "size_bytes": 10}])
    monkeypatch.setattr(config, "COMPANIES", [])

    session_cls, session = _session_mock(lambda *a, **kw: MagicMock(status_code=200))
    with patch("cron.storage_recalc.requests.Session", session_cls):
        assert storage_recalc.main() == 0

    assert repo.get_company(first.id).storage_used_bytes == 0
    assert repo.get_company(second.id).storage_used_bytes == 10
    session.post.assert_not_called()


def test_clear_cache_failure_exits_1(db, monkeypatch) -> None:
    company = repo.create_company("Acme")
    repo.create_bot(company.id, "a")
    monkeypatch.setattr(config, "COMPANIES", [company.id])

    def boom(*a, **kw):
        raise requests.ConnectionError("api down")

    session_cls, _ = _session_mock(boom)
    with patch("cron.storage_recalc.requests.Session", session_cls):
        assert storage_recalc.main() == 1

    assert repo.get_company(company.id).storage_used_bytes == 0


def test_clear_cache_http_error_exits_1(db, monkeypatch) -> None:
    company = repo.create_company("Acme")
    repo.create_bot(company.id, "a")
    monkeypatch.setattr(config, "COMPANIES", [company.id])

    session_cls, _ = _session_mock(lambda *a, **kw: MagicMock(status_code=503))
    with patch("cron.storage_recalc.requests.Session", session_cls):
        assert storage_recalc.main() == 1


def test_unknown_company_exits_1(db, monkeypatch) -> None:
    monkeypatch.setattr(config, "COMPANIES", [424242])
    session_cls, session = _session_mock(lambda *a, **kw: MagicMock(status_code=200))
    with patch("cron.storage_recalc.requests.Session", session_cls):
        assert storage_recalc.main() == 1
    session.post.assert_not_called()


def test_no_companies_is_a_noop(db, monkeypatch) -> None:
    monkeypatch.setattr(config, "COMPANIES", [])
    assert storage_recalc.main() == 0


def test_next_validation_sees_recalculated_usage(db, monkeypatch) -> None:
    """Against the real app: a cached valid verdict flips once the job clears the entry."""
    company = repo.create_company("Acme", "active", "starter", storage_limit_bytes=1000)
    bot = repo.create_bot(company.id, "a")
    ids = {"companyId": company.id, "botId": bot.id}
    client = TestClient(app)
    app.state.validation_cache.invalidate()
    assert client.post("/subscription/validate-daily", json=ids).json()["isValid"] is True

    repo.insert_files(company.id, [{"name": "big.bin", "size_bytes": 5000}])
    monkeypatch.setattr(config, "COMPANIES", [company.id])
    session_cls, _ = _session_mock(lambda url, json, timeout: client.post("/subscription/clear-cache", json=json))
    with patch("cron.storage_recalc.requests.Session", session_cls):
        assert storage_recalc.main() == 0

    after = client.post("/subscription/validate-daily", json=ids).json()
    assert after["cached"] is False
    assert after["isValid"] is False
    assert after["reason"] == "Storage limit exceeded"
    app.state.validation_cache.invalidate()
