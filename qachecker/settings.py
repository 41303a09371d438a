"""ユーザー設定の保存・読み込みモジュール.

設定はキー・値（JSON 文字列）の組で保存する。保存先は
  - ローカル JSON ファイル（既定）
  - Supabase の settings テーブル（SETTINGS_BACKEND=supabase）
保存・読み込みの失敗はログに残すだけで、処理は止めない。
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from supabase import create_client

from qachecker.config import (
    DEFAULT_QA_DOMAINS,
    SETTINGS_BACKEND,
    SETTINGS_FILE,
    SETTINGS_KEY_API_KEY,
    SETTINGS_KEY_CX,
    SETTINGS_KEY_DOMAINS,
    SUPABASE_SCHEMA,
    SUPABASE_SECRET_KEY,
    SUPABASE_URL,
)

logger = logging.getLogger(__name__)


class SettingsStore:
    """キー・値ストアのインターフェース. 値は JSON 文字列."""

    def get(self, key: str) -> str | None:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class JsonFileSettingsStore(SettingsStore):
    """1 つの JSON ファイルに全キーを保存するストア."""

    def __init__(self, filepath: Path = SETTINGS_FILE):
        self.filepath = filepath

    def _read_all(self) -> dict:
        if not self.filepath.exists():
            return {}
        data = json.loads(self.filepath.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except (OSError, ValueError) as e:
            # 壊れたファイルは空として上書きする
            logger.warning("設定ファイルを読み込めないため作り直します: %s, error=%s", self.filepath, e)
            data = {}
        data[key] = value
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.filepath.with_name(self.filepath.name + ".tmp")
        tmp_path.write_text(
            json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8"
        )
        tmp_path.replace(self.filepath)


class SupabaseSettingsStore(SettingsStore):
    """Supabase の settings テーブル（key, value）に保存するストア."""

    def __init__(self, client=None, schema: str = SUPABASE_SCHEMA):
        if client is None:
            client = create_client(SUPABASE_URL, SUPABASE_SECRET_KEY)
        self._client = client
        self._schema = schema

    def _table(self):
        return self._client.schema(self._schema).table("settings")

    def get(self, key: str) -> str | None:
        resp = self._table().select("value").eq("key", key).limit(1).execute()
        if not resp.data:
            return None
        return resp.data[0].get("value")

    def set(self, key: str, value: str) -> None:
        self._table().upsert({"key": key, "value": value}).execute()


def create_store(backend: str = SETTINGS_BACKEND) -> SettingsStore:
    """SETTINGS_BACKEND に応じたストアを作る."""
    if backend == "supabase":
        return SupabaseSettingsStore()
    return JsonFileSettingsStore()


def load_value(store: SettingsStore, key: str, default):
    """設定値を読み込む. 未保存・読み込み失敗時は default."""
    try:
        raw = store.get(key)
        return json.loads(raw) if raw else default
    except Exception as e:
        logger.error("設定の読み込みに失敗: key=%s, error=%s", key, e)
        return default


def save_value(store: SettingsStore, key: str, value) -> bool:
    """設定値を保存する. 失敗してもログのみで例外は投げない."""
    try:
        store.set(key, json.dumps(value, ensure_ascii=False))
        return True
    except Exception as e:
        logger.error("設定の保存に失敗: key=%s, error=%s", key, e)
        return False


@dataclass
class Settings:
    """保存対象のユーザー設定."""

    api_key: str = ""
    cx: str = ""
    domains: list[str] = field(default_factory=lambda: list(DEFAULT_QA_DOMAINS))


def load_settings(store: SettingsStore) -> Settings:
    """起動時に 1 回だけ設定を読み込む."""
    domains = load_value(store, SETTINGS_KEY_DOMAINS, list(DEFAULT_QA_DOMAINS))
    if not isinstance(domains, list):
        logger.warning("保存済みドメイン一覧の形式が不正なため既定値を使用します")
        domains = list(DEFAULT_QA_DOMAINS)
    return Settings(
        api_key=load_value(store, SETTINGS_KEY_API_KEY, ""),
        cx=load_value(store, SETTINGS_KEY_CX, ""),
        domains=[str(d) for d in domains],
    )


def save_settings(store: SettingsStore, settings: Settings) -> None:
    """全設定を保存する."""
    save_value(store, SETTINGS_KEY_API_KEY, settings.api_key)
    save_value(store, SETTINGS_KEY_CX, settings.cx)
    save_value(store, SETTINGS_KEY_DOMAINS, settings.domains)
