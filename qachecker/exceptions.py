"""例外定義."""

from __future__ import annotations


class QACheckerError(Exception):
    """QA上位チェックの基底例外."""


class ConfigurationError(QACheckerError):
    """APIキー・検索エンジンID の未設定など、バッチ開始前に検出される設定不備."""


class SearchApiError(QACheckerError):
    """1 キーワード分の検索リクエスト失敗.

    status_code は HTTP エラー時のステータスコード。通信エラー・タイムアウト時は None。
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ExportBlockedError(QACheckerError):
    """チェック実行中の CSV 出力要求."""


class CheckerBusyError(QACheckerError):
    """前回のチェックが終わる前に次のチェックを開始しようとした."""
