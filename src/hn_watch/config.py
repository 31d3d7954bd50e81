from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from hn_watch.logging_config import normalize_log_level

DEFAULT_KEYWORDS = ["go", "golang", "google"]
HACKER_NEWS_URL = "https://news.ycombinator.com/"


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


@dataclass(slots=True)
class SourceSettings:
    type: str = "hacker_news"
    url: str = HACKER_NEWS_URL
    base_url: str = HACKER_NEWS_URL
    timeout_seconds: int = 30
    user_agent: str = "hn-watch/0.1"


@dataclass(slots=True)
class FilterSettings:
    keywords: list[str] = field(default_factory=lambda: list(DEFAULT_KEYWORDS))


@dataclass(slots=True)
class MailSettings:
    sender: str = ""
    recipient: str = ""
    smtp_host: str = "localhost"
    smtp_port: int = 25
    use_tls: bool = False
    username_env_var: str = "HN_WATCH_SMTP_USERNAME"
    password_env_var: str = "HN_WATCH_SMTP_PASSWORD"
    timeout_seconds: int = 30


@dataclass(slots=True)
class PollingSettings:
    isolate_entry_failures: bool = True
    dry_run: bool = False


@dataclass(slots=True)
class StorageSettings:
    type: str = "sqlite"
    path: str = "data/seen.sqlite"


@dataclass(slots=True)
class ServerSettings:
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass(slots=True)
class NotifySettings:
    max_workers: int = 2


@dataclass(slots=True)
class AppConfig:
    source: SourceSettings = field(default_factory=SourceSettings)
    filters: FilterSettings = field(default_factory=FilterSettings)
    mail: MailSettings = field(default_factory=MailSettings)
    polling: PollingSettings = field(default_factory=PollingSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    notify: NotifySettings = field(default_factory=NotifySettings)
    log_level: str = "INFO"


_SOURCE_TYPES = {"hacker_news"}
_STORAGE_TYPES = {"sqlite", "memory"}


def _as_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"Expected a list of strings, got: {type(value)!r}")
    return [str(item).strip() for item in value if str(item).strip()]


def _as_bool(value: Any, *, field_name: str) -> bool:
    if isinstance(value, bool):
        return value

    if isinstance(value, int) and value in {0, 1}:
        return bool(value)

    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes", "on"}:
            return True
        if normalized in {"false", "0", "no", "off"}:
            return False

    raise ConfigError(f"{field_name} must be a boolean")


def _as_int(value: Any, *, field_name: str, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be an integer")

    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc

    if minimum is not None and parsed < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return parsed


def _as_str(value: Any, default: str) -> str:
    if value is None:
        return default
    return str(value).strip() or default


def _section(parsed: dict[str, Any], name: str) -> dict[str, Any]:
    raw = parsed.get(name, {}) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{name} must be a mapping")
    return raw


def _resolve_relative_path(base_dir: Path, raw_path: str) -> str:
    candidate = Path(raw_path).expanduser()
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: str | Path) -> AppConfig:
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        parsed = yaml.safe_load(handle) or {}

    if not isinstance(parsed, dict):
        raise ConfigError("Config root must be a mapping")

    return parse_config(parsed, base_dir=config_path.parent)


def parse_config(parsed: dict[str, Any], *, base_dir: Path | None = None) -> AppConfig:
    raw_source = _section(parsed, "source")
    source_url = _as_str(raw_source.get("url"), HACKER_NEWS_URL)
    source_settings = SourceSettings(
        type=_as_str(raw_source.get("type"), "hacker_news"),
        url=source_url,
        base_url=_as_str(raw_source.get("base_url"), source_url),
        timeout_seconds=_as_int(
            raw_source.get("timeout_seconds", 30),
            field_name="source.timeout_seconds",
            minimum=1,
        ),
        user_agent=_as_str(raw_source.get("user_agent"), "hn-watch/0.1"),
    )
    if source_settings.type not in _SOURCE_TYPES:
        raise ConfigError(f"Unsupported source type: {source_settings.type}")
    if not source_settings.base_url.endswith("/"):
        source_settings.base_url += "/"

    raw_filters = _section(parsed, "filters")
    if "keywords" in raw_filters:
        keywords = [keyword.lower() for keyword in _as_string_list(raw_filters["keywords"])]
        if not keywords:
            raise ConfigError("filters.keywords must not be empty")
    else:
        keywords = list(DEFAULT_KEYWORDS)
    filter_settings = FilterSettings(keywords=keywords)

    raw_polling = _section(parsed, "polling")
    polling_settings = PollingSettings(
        isolate_entry_failures=_as_bool(
            raw_polling.get("isolate_entry_failures", True),
            field_name="polling.isolate_entry_failures",
        ),
        dry_run=_as_bool(
            raw_polling.get("dry_run", False),
            field_name="polling.dry_run",
        ),
    )

    raw_mail = _section(parsed, "mail")
    mail_settings = MailSettings(
        sender=_as_str(raw_mail.get("sender"), ""),
        recipient=_as_str(raw_mail.get("recipient"), ""),
        smtp_host=_as_str(raw_mail.get("smtp_host"), "localhost"),
        smtp_port=_as_int(
            raw_mail.get("smtp_port", 25),
            field_name="mail.smtp_port",
            minimum=1,
        ),
        use_tls=_as_bool(raw_mail.get("use_tls", False), field_name="mail.use_tls"),
        username_env_var=_as_str(raw_mail.get("username_env_var"), "HN_WATCH_SMTP_USERNAME"),
        password_env_var=_as_str(raw_mail.get("password_env_var"), "HN_WATCH_SMTP_PASSWORD"),
        timeout_seconds=_as_int(
            raw_mail.get("timeout_seconds", 30),
            field_name="mail.timeout_seconds",
            minimum=1,
        ),
    )
    raw_storage = _section(parsed, "storage")
    storage_path = _as_str(raw_storage.get("path"), "data/seen.sqlite")
    if base_dir is not None:
        storage_path = _resolve_relative_path(base_dir, storage_path)
    storage_settings = StorageSettings(
        type=_as_str(raw_storage.get("type"), "sqlite"),
        path=storage_path,
    )
    if storage_settings.type not in _STORAGE_TYPES:
        raise ConfigError(f"Unsupported storage type: {storage_settings.type}")

    raw_server = _section(parsed, "server")
    server_settings = ServerSettings(
        host=_as_str(raw_server.get("host"), "127.0.0.1"),
        port=_as_int(raw_server.get("port", 8080), field_name="server.port", minimum=1),
    )

    raw_notify = _section(parsed, "notify")
    notify_settings = NotifySettings(
        max_workers=_as_int(
            raw_notify.get("max_workers", 2),
            field_name="notify.max_workers",
            minimum=1,
        ),
    )

    try:
        log_level = normalize_log_level(parsed.get("log_level", "INFO"))
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    return AppConfig(
        source=source_settings,
        filters=filter_settings,
        mail=mail_settings,
        polling=polling_settings,
        storage=storage_settings,
        server=server_settings,
        notify=notify_settings,
        log_level=log_level,
    )
