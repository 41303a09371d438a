"""settings モジュールのテスト."""

import json
from unittest.mock import MagicMock

from qachecker.config import (
    DEFAULT_QA_DOMAINS,
    SETTINGS_KEY_API_KEY,
    SETTINGS_KEY_CX,
    SETTINGS_KEY_DOMAINS,
)
from qachecker.settings import (
    JsonFileSettingsStore,
    Settings,
    SettingsStore,
    SupabaseSettingsStore,
    load_settings,
    load_value,
    save_settings,
    save_value,
)


class BrokenStore(SettingsStore):
    """読み書きが常に失敗するストア."""

    def get(self, key):
        raise OSError("disk error")

    def set(self, key, value):
        raise OSError("disk error")


class TestJsonFileSettingsStore:
    """JsonFileSettingsStore のテスト."""

    def test_roundtrip_settings(self, tmp_path):
        store = JsonFileSettingsStore(tmp_path / "settings.json")
        save_settings(store, Settings(api_key="key-1", cx="cx-1", domains=["qa.co"]))

        settings = load_settings(store)

        assert settings == Settings(api_key="key-1", cx="cx-1", domains=["qa.co"])

    def test_file_format(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        store = JsonFileSettingsStore(path)
        save_value(store, SETTINGS_KEY_DOMAINS, ["okwave.jp", "teratail.com"])

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {SETTINGS_KEY_DOMAINS: '["okwave.jp", "teratail.com"]'}

    def test_defaults_when_missing(self, tmp_path):
        settings = load_settings(JsonFileSettingsStore(tmp_path / "none.json"))

        assert settings.api_key == ""
        assert settings.cx == ""
        assert settings.domains == DEFAULT_QA_DOMAINS

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{broken", encoding="utf-8")

        settings = load_settings(JsonFileSettingsStore(path))

        assert settings == Settings()

    def test_save_repairs_corrupt_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{broken", encoding="utf-8")
        store = JsonFileSettingsStore(path)

        assert save_value(store, SETTINGS_KEY_API_KEY, "key-1") is True

        assert load_value(store, SETTINGS_KEY_API_KEY, None) == "key-1"
        assert json.loads(path.read_text(encoding="utf-8")) == {SETTINGS_KEY_API_KEY: '"key-1"'}

    def test_save_overwrites_non_object_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        store = JsonFileSettingsStore(path)

        save_settings(store, Settings(api_key="key-1", cx="cx-1", domains=["qa.co"]))

        assert load_settings(store) == Settings(api_key="key-1", cx="cx-1", domains=["qa.co"])

    def test_save_keeps_other_keys_and_leaves_no_temp_file(self, tmp_path):
        store = JsonFileSettingsStore(tmp_path / "settings.json")
        save_value(store, SETTINGS_KEY_API_KEY, "key-1")
        save_value(store, SETTINGS_KEY_CX, "cx-1")

        assert load_value(store, SETTINGS_KEY_API_KEY, None) == "key-1"
        assert load_value(store, SETTINGS_KEY_CX, None) == "cx-1"
        assert [p.name for p in tmp_path.iterdir()] == ["settings.json"]

    def test_invalid_domains_type(self, tmp_path):
        store = JsonFileSettingsStore(tmp_path / "settings.json")
        save_value(store, SETTINGS_KEY_DOMAINS, "okwave.jp")

        assert load_settings(store).domains == DEFAULT_QA_DOMAINS


class TestBestEffort:
    """保存・読み込み失敗時のテスト."""

    def test_load_failure_returns_default(self):
        assert load_value(BrokenStore(), SETTINGS_KEY_API_KEY, "fallback") == "fallback"

    def test_save_failure_is_not_raised(self):
        assert save_value(BrokenStore(), SETTINGS_KEY_API_KEY, "key-1") is False

    def test_save_settings_with_broken_store(self):
        save_settings(BrokenStore(), Settings(api_key="key-1"))


class TestSupabaseSettingsStore:
    """SupabaseSettingsStore のモックテスト."""

    def _store(self):
        client = MagicMock()
        table = MagicMock()
        client.schema.return_value.table.return_value = table
        return SupabaseSettingsStore(client=client, schema="qa_checker"), client, table

    def test_get(self):
        store, client, table = self._store()
        chain = table.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value = MagicMock(data=[{"value": '"key-1"'}])

        assert store.get(SETTINGS_KEY_API_KEY) == '"key-1"'
        client.schema.assert_called_with("qa_checker")
        client.schema.return_value.table.assert_called_with("settings")
        table.select.assert_called_once_with("value")
        table.select.return_value.eq.assert_called_once_with("key", SETTINGS_KEY_API_KEY)

    def test_get_missing(self):
        store, _, table = self._store()
        chain = table.select.return_value.eq.return_value.limit.return_value
        chain.execute.return_value = MagicMock(data=[])

        assert store.get(SETTINGS_KEY_CX) is None
        assert load_value(store, SETTINGS_KEY_CX, "") == ""

    def test_set(self):
        store, _, table = self._store()
        table.upsert.return_value = table

        store.set(SETTINGS_KEY_CX, '"cx-1"')

        table.upsert.assert_called_once_with({"key": SETTINGS_KEY_CX, "value": '"cx-1"'})
        table.execute.assert_called_once()
