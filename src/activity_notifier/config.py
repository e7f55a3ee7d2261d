"""通知サービス設定（pydantic BaseModel）と YAML 読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError, ConfigErrorCodes
from .types import DEFAULT_LIMIT_MESSAGE, RateLimiterConfig

_HOUR_MS = 60 * 60 * 1000


class AppSection(BaseModel):
    """アプリケーション基本設定。"""

    name: str = "activity-notifier"
    version: str = "0.1.0"
    environment: str = "development"


class LimitSection(BaseModel):
    """固定ウィンドウレートリミット設定。"""

    max_requests: int = Field(default=10, gt=0)
    window_ms: int = Field(default=60 * 1000, gt=0)
    message: str = DEFAULT_LIMIT_MESSAGE

    def to_limiter_config(self) -> RateLimiterConfig:
        return RateLimiterConfig(
            max_requests=self.max_requests,
            window_ms=self.window_ms,
            message=self.message,
        )


class LimitsSection(BaseModel):
    """アクティビティ・チャネル別のレートリミット設定。"""

    activity: LimitSection = Field(
        default_factory=lambda: LimitSection(max_requests=50, window_ms=_HOUR_MS)
    )
    email: LimitSection = Field(
        default_factory=lambda: LimitSection(max_requests=10, window_ms=_HOUR_MS)
    )
    sms: LimitSection = Field(
        default_factory=lambda: LimitSection(max_requests=5, window_ms=_HOUR_MS)
    )
    chat: LimitSection = Field(
        default_factory=lambda: LimitSection(max_requests=5, window_ms=_HOUR_MS)
    )


class ChannelSection(BaseModel):
    """チャネル送信設定。endpoint が空の場合はログ出力のみ。"""

    timeout_seconds: float = Field(default=10.0, gt=0)
    endpoint: str = ""
    api_key: str = ""


class ChannelsSection(BaseModel):
    """チャネル別の送信設定。"""

    email: ChannelSection = Field(default_factory=ChannelSection)
    sms: ChannelSection = Field(default_factory=ChannelSection)
    chat: ChannelSection = Field(default_factory=ChannelSection)


class NotificationsSection(BaseModel):
    """通知メッセージ設定。"""

    subject_prefix: str = "UGC Tracker"


class LogSection(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class NotifierConfig(BaseModel):
    """通知サービス設定全体。"""

    app: AppSection = Field(default_factory=AppSection)
    limits: LimitsSection = Field(default_factory=LimitsSection)
    channels: ChannelsSection = Field(default_factory=ChannelsSection)
    notifications: NotificationsSection = Field(default_factory=NotificationsSection)
    log: LogSection = Field(default_factory=LogSection)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """環境別設定 override をベース設定 base に重ねた新しい辞書を返す。

    limits / channels などのセクションは再帰的にマージする。
    空セクション（YAML の ``email:`` のみ等で None になる値）はベースを維持する。
    スカラー・リストは override で置換する。
    """
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict):
            if value is None:
                continue
            if isinstance(value, dict):
                merged[key] = deep_merge(current, value)
                continue
        merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            code=ConfigErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"Config root must be a mapping: {path}",
        )
    return data


def load(base_path: Path, env_path: Path | None = None) -> NotifierConfig:
    """設定ファイルを読み込んで NotifierConfig を返す。

    base_path: ベース設定ファイルパス（必須）
    env_path: 環境別設定ファイルパス（オプション）。存在する場合はベースにマージ。
    """
    data = _read_yaml(base_path)
    if env_path is not None and env_path.exists():
        data = deep_merge(data, _read_yaml(env_path))
    try:
        return NotifierConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            code=ConfigErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
