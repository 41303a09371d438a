"""キーワード一括チェックモジュール.

処理フロー:
  1. 設定（API キー・検索エンジン ID・順位）を検証してスナップショット化
  2. 全キーワードの結果を in_progress で初期化
  3. キーワードを 1 件ずつ順番に検索（並列実行しない）
  4. 検索結果の上位から Q&A ドメインを照合して結果を確定
  5. 確定した結果をその都度購読者へ通知
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterator, Sequence

from qachecker.config import MAX_RANK, MIN_RANK
from qachecker.exceptions import CheckerBusyError, ConfigurationError, SearchApiError
from qachecker.matcher import classify_results
from qachecker.models import CheckConfig, Outcome, SerpItem, Status
from qachecker.search import fetch_search_results

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, CheckConfig], Sequence[SerpItem]]
Subscriber = Callable[[int, Outcome], None]


def validate_config(config: CheckConfig) -> None:
    """バッチ開始前の設定チェック. 不備があれば ConfigurationError."""
    if not config.api_key or not config.cx:
        raise ConfigurationError("APIキーと検索エンジンID (cx) を入力してください。")
    if not MIN_RANK <= config.rank <= MAX_RANK:
        raise ConfigurationError(
            f"チェックする順位は {MIN_RANK}〜{MAX_RANK} の範囲で指定してください: {config.rank}"
        )


class BatchRankChecker:
    """キーワードごとに検索上位の Q&A サイト有無を判定する.

    結果はキーワードの入力順（位置）で管理する。同じキーワードが複数あっても
    それぞれ独立した作業単位として扱う。
    """

    def __init__(self, fetcher: Fetcher = fetch_search_results):
        self._fetcher = fetcher
        self._outcomes: list[Outcome] = []
        self._subscribers: list[Subscriber] = []
        self._running = False

    @property
    def outcomes(self) -> tuple[Outcome, ...]:
        """現在の結果一覧のスナップショット."""
        return tuple(self._outcomes)

    @property
    def is_running(self) -> bool:
        return self._running

    def subscribe(self, callback: Subscriber) -> None:
        """結果更新の通知先を登録する. callback(index, outcome) の形で呼ばれる."""
        self._subscribers.append(callback)

    def run_batch(self, keywords: Sequence[str], config: CheckConfig) -> list[Outcome]:
        """全キーワードをチェックし、最終結果を入力順で返す."""
        for _ in self.iter_batch(keywords, config):
            pass
        return list(self._outcomes)

    def iter_batch(
        self, keywords: Sequence[str], config: CheckConfig
    ) -> Iterator[tuple[int, Outcome]]:
        """結果の更新を (index, outcome) として順に返すイテレータを作る.

        設定不備はイテレータ生成時点で ConfigurationError となり、
        結果は一件も作られずリクエストも発生しない。
        前回のイテレータが終わっていない間は CheckerBusyError。
        """
        self._ensure_idle()
        validate_config(config)
        return self._run(list(keywords), config)

    def _run(
        self, keywords: list[str], config: CheckConfig
    ) -> Iterator[tuple[int, Outcome]]:
        self._ensure_idle()
        logger.info("=== QA上位チェック 開始: %d キーワード, 上位%d件 ===",
                    len(keywords), config.rank)
        start_time = time.time()
        self._running = True

        # 前回の結果は破棄し、全キーワードを先に in_progress で初期化
        outcomes = [Outcome.in_progress(k) for k in keywords]
        self._outcomes = outcomes
        try:
            for index, outcome in enumerate(outcomes):
                self._notify(index, outcome)
                yield index, outcome

            error_count = 0
            for index, keyword in enumerate(keywords):
                outcome = self._check_keyword(keyword, config)
                if outcome.status is Status.FAILED:
                    error_count += 1
                outcomes[index] = outcome
                self._notify(index, outcome)
                yield index, outcome
        finally:
            self._running = False

        elapsed = time.time() - start_time
        logger.info("=== QA上位チェック 完了 ===")
        logger.info("検索実行: %d 回, エラー: %d 回, 所要時間: %.1f 秒",
                    len(keywords), error_count, elapsed)

    def _ensure_idle(self) -> None:
        if self._running:
            raise CheckerBusyError("チェック実行中のため新しいチェックを開始できません。")

    def _check_keyword(self, keyword: str, config: CheckConfig) -> Outcome:
        """1 キーワード分の検索と判定. API エラーは failed として記録する."""
        logger.info("検索中: keyword=%s", keyword)
        try:
            items = self._fetcher(keyword, config)
        except SearchApiError as e:
            logger.warning("スキップ: keyword=%s, error=%s", keyword, e.message)
            return Outcome.failed(keyword, e.message)

        outcome = classify_results(keyword, items, config.domains, config.rank)
        status = f"{outcome.rank}位: {outcome.domain}" if outcome.rank else "圏外"
        logger.info("  %s → %s (%d 件中)", keyword, status, len(outcome.serp))
        return outcome

    def _notify(self, index: int, outcome: Outcome) -> None:
        for callback in self._subscribers:
            callback(index, outcome)
