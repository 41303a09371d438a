"""Google Custom Search JSON API の呼び出しモジュール."""

from __future__ import annotations

import logging

import requests

from qachecker.config import API_ENDPOINT
from qachecker.exceptions import SearchApiError
from qachecker.models import CheckConfig, SerpItem

logger = logging.getLogger(__name__)


def build_params(keyword: str, config: CheckConfig) -> dict:
    """検索リクエストのクエリパラメータを組み立てる."""
    return {
        "key": config.api_key,
        "cx": config.cx,
        "q": keyword,
        "num": config.rank,
        "gl": config.country,
        "hl": config.language,
    }


def fetch_search_results(keyword: str, config: CheckConfig) -> list[SerpItem]:
    """キーワードで検索し、上位 config.rank 件の結果を取得する.

    Args:
        keyword: 検索キーワード
        config: API キー・検索エンジン ID・取得件数などの設定

    Returns:
        検索結果リスト（順位順）。items が無いレスポンスは 0 件として扱う。

    Raises:
        SearchApiError: HTTP エラー、通信エラー、タイムアウト、レスポンス不正
    """
    try:
        resp = requests.get(
            API_ENDPOINT,
            params=build_params(keyword, config),
            timeout=config.timeout,
        )
    except requests.RequestException as e:
        logger.error("検索リクエスト失敗: keyword=%s, error=%s", keyword, e)
        raise SearchApiError(str(e)) from e

    if not resp.ok:
        message = _error_message(resp)
        logger.error(
            "検索 API エラー: keyword=%s, status=%d, message=%s",
            keyword, resp.status_code, message,
        )
        raise SearchApiError(message, status_code=resp.status_code)

    try:
        data = resp.json()
    except ValueError as e:
        logger.error("検索結果 JSON パースエラー: keyword=%s, error=%s", keyword, e)
        raise SearchApiError(f"Invalid JSON response: {e}") from e

    if not isinstance(data, dict):
        logger.error("検索結果の形式が不正: keyword=%s", keyword)
        raise SearchApiError("Invalid JSON response: object expected")

    items = data.get("items") or []
    if not isinstance(items, list):
        logger.error("検索結果 items の形式が不正: keyword=%s, items=%r", keyword, items)
        raise SearchApiError("Invalid JSON response: items is not a list")
    return [SerpItem.from_api(item) for item in items if isinstance(item, dict)]


def _error_message(resp: requests.Response) -> str:
    """エラーレスポンスから API のメッセージを取り出す. 無ければ汎用メッセージ."""
    try:
        message = _deep_get(resp.json(), "error", "message")
    except ValueError:
        message = None
    return message or f"HTTP error! status: {resp.status_code}"


def _deep_get(d: dict, *keys: str):
    """ネストされた dict から安全に値を取得する."""
    for key in keys:
        if not isinstance(d, dict):
            return None
        d = d.get(key)
    return d
