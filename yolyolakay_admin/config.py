from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from urllib.parse import urlparse


DEFAULT_API_URL = "http://localhost:8000/api"
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class AppSettings:
    base_url: str
    timeout_seconds: int
    storage_path: str
    log_level: str

    @staticmethod
    def from_env() -> "AppSettings":
        _load_dotenv_if_present()

        base_url = os.getenv("YOLYOLAKAY_API_URL", "").strip() or DEFAULT_API_URL
        base_url = base_url.rstrip("/")

        timeout_seconds = _parse_int_env("YOLYOLAKAY_TIMEOUT_SECONDS", 30)

        default_storage_path = os.path.join(
            os.getenv("LOCALAPPDATA", os.path.expanduser("~")),
            "YolYolakayAdmin",
            "storage.bin",
        )
        storage_path = os.getenv("YOLYOLAKAY_STORAGE_PATH", "").strip() or default_storage_path
        log_level = os.getenv("YOLYOLAKAY_LOG_LEVEL", "INFO").strip().upper()

        settings = AppSettings(
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            storage_path=storage_path,
            log_level=log_level,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"YOLYOLAKAY_API_URL must be an http(s) URL, got: {self.base_url!r}"
            )

        if self.timeout_seconds <= 0:
            raise ConfigurationError("YOLYOLAKAY_TIMEOUT_SECONDS must be greater than 0")

        if not self.storage_path:
            raise ConfigurationError("YOLYOLAKAY_STORAGE_PATH must not be empty")

        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(
                "YOLYOLAKAY_LOG_LEVEL must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
            )


def _parse_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got: {raw!r}") from exc


def _load_dotenv_if_present() -> None:
    """Fill unset variables from ``.env`` files.

    Looked up in order: ``YOLYOLAKAY_ENV_FILE``, the working directory, the
    project root. Earlier files win, and the real environment wins over all.
    """
    explicit = os.getenv("YOLYOLAKAY_ENV_FILE", "").strip()
    candidates = [Path(explicit).expanduser()] if explicit else []
    candidates += [Path.cwd() / ".env", PROJECT_ROOT / ".env"]

    loaded: set[Path] = set()
    for path in candidates:
        if not path.is_file() or path.resolve() in loaded:
            continue
        loaded.add(path.resolve())
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Could not read {path}: {exc}") from exc
        for key, value in _parse_env_lines(text):
            os.environ.setdefault(key, value)


def _parse_env_lines(text: str):
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, separator, value = line.partition("=")
        key = key.strip()
        if line.startswith("#") or not separator or not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        yield key, value
