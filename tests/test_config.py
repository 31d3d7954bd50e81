from __future__ import annotations

from pathlib import Path

import pytest

from hn_watch.cli import build_service, main
from hn_watch.config import DEFAULT_KEYWORDS, ConfigError, load_config
from hn_watch.sources import HackerNewsSource
from hn_watch.store import MemoryStore


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_apply_for_minimal_config(tmp_path) -> None:
    config = load_config(_write(tmp_path, "mail:\n  sender: a@example.com\n  recipient: b@example.com\n"))

    assert config.filters.keywords == DEFAULT_KEYWORDS
    assert config.source.type == "hacker_news"
    assert config.source.url == "https://news.ycombinator.com/"
    assert config.source.base_url == "https://news.ycombinator.com/"
    assert config.polling.isolate_entry_failures is True
    assert config.storage.path == str((tmp_path / "data/seen.sqlite").resolve())
    assert config.log_level == "INFO"


def test_full_config_is_parsed(tmp_path) -> None:
    config = load_config(
        _write(
            tmp_path,
            """
log_level: debug
source:
  url: https://hn.example.test/news
  base_url: https://hn.example.test
  timeout_seconds: 5
filters:
  keywords: [Rust, Zig]
mail:
  sender: alerts@example.com
  recipient: me@example.com
  smtp_host: smtp.example.com
  smtp_port: "587"
  use_tls: "yes"
polling:
  isolate_entry_failures: false
storage:
  type: memory
server:
  port: 9000
notify:
  max_workers: 4
""",
        )
    )

    assert config.log_level == "DEBUG"
    assert config.source.base_url == "https://hn.example.test/"
    assert config.source.timeout_seconds == 5
    assert config.filters.keywords == ["rust", "zig"]
    assert config.mail.smtp_port == 587
    assert config.mail.use_tls is True
    assert config.polling.isolate_entry_failures is False
    assert config.storage.type == "memory"
    assert config.server.port == 9000
    assert config.notify.max_workers == 4


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("- not\n- a mapping\n", "root must be a mapping"),
        ("source:\n  type: reddit\n", "Unsupported source type"),
        ("storage:\n  type: redis\n", "Unsupported storage type"),
        ("filters:\n  keywords: []\n", "must not be empty"),
        ("filters:\n  keywords: golang\n", "Expected a list"),
        ("polling:\n  dry_run: maybe\n", "polling.dry_run must be a boolean"),
        ("mail:\n  smtp_port: 0\n", "mail.smtp_port must be >= 1"),
        ("server: [8080]\n", "server must be a mapping"),
        ("log_level: LOUD\n", "Unknown log level"),
    ],
)
def test_invalid_config_is_rejected(tmp_path, text: str, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        load_config(_write(tmp_path, text))


def test_missing_config_file(tmp_path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.yaml")


def test_cli_returns_2_on_config_error(tmp_path, capsys) -> None:
    assert main(["-c", str(tmp_path / "nope.yaml"), "poll"]) == 2
    assert "Config error" in capsys.readouterr().err


def test_cli_poll_requires_mail_addresses(tmp_path) -> None:
    path = _write(tmp_path, "storage:\n  type: memory\n")

    assert main(["-c", str(path), "poll"]) == 2


def test_cli_init_db_creates_store(tmp_path) -> None:
    path = _write(tmp_path, "storage:\n  path: state/seen.sqlite\n")

    assert main(["-c", str(path), "init-db"]) == 0
    assert (tmp_path / "state" / "seen.sqlite").exists()


def test_cli_dry_run_prints_matches(tmp_path, serve_page, make_front_page, capsys) -> None:
    serve_page(
        make_front_page(
            [
                (123, "Why Go is awesome", "https://example.com/go"),
                (124, "Rust vs C++", "https://example.com/rust"),
            ]
        )
    )
    path = _write(tmp_path, "storage:\n  type: memory\n")

    assert main(["-c", str(path), "dry-run"]) == 0

    out = capsys.readouterr().out
    assert "Subject: HN: Why Go is awesome" in out
    assert "Discussion: https://news.ycombinator.com/item?id=123" in out
    assert "Rust vs C++" not in out


def test_cli_poll_returns_1_when_fetch_fails(tmp_path, serve_page) -> None:
    serve_page("", status_code=500, reason="Internal Server Error")
    path = _write(
        tmp_path,
        "mail:\n  sender: a@example.com\n  recipient: b@example.com\nstorage:\n  type: memory\n",
    )

    assert main(["-c", str(path), "poll"]) == 1


def test_cli_backfill_requires_flag(tmp_path) -> None:
    path = _write(tmp_path, "storage:\n  type: memory\n")

    with pytest.raises(SystemExit):
        main(["-c", str(path), "backfill"])


def test_cli_rejects_unknown_log_level(tmp_path, capsys) -> None:
    path = _write(tmp_path, "storage:\n  type: memory\n")

    assert main(["-c", str(path), "--log-level", "loud", "init-db"]) == 2
    assert "Unknown log level" in capsys.readouterr().err


def test_cli_serve_passes_normalised_log_level(tmp_path, monkeypatch) -> None:
    calls = []
    monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append(kwargs))
    path = _write(
        tmp_path,
        "mail:\n  sender: a@example.com\n  recipient: b@example.com\nstorage:\n  type: memory\n",
    )

    assert main(["-c", str(path), "--log-level", " warning ", "serve", "--port", "9001"]) == 0
    assert calls == [{"host": "127.0.0.1", "port": 9001, "log_level": "warning"}]


def test_build_service_reads_the_hacker_news_listing(tmp_path) -> None:
    config = load_config(_write(tmp_path, "source:\n  url: https://hn.example.test/news\n"))

    service = build_service(config, store=MemoryStore(), dispatcher=None, dry_run=True)

    assert isinstance(service.source, HackerNewsSource)
    assert service.source.url == "https://hn.example.test/news"
