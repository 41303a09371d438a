"""データモデル定義."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from qachecker.config import (
    DEFAULT_RANK,
    REQUEST_TIMEOUT,
    SEARCH_COUNTRY,
    SEARCH_LANGUAGE,
)


class Status(str, Enum):
    """キーワード 1 件の処理状態."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    MATCHED = "matched"  # 上位に Q&A サイトあり
    NOT_MATCHED = "not_matched"  # 上位に Q&A サイトなし
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (Status.MATCHED, Status.NOT_MATCHED, Status.FAILED)


@dataclass(frozen=True)
class SerpItem:
    """検索結果の 1 件（オーガニック結果）."""

    link: str
    title: str = ""
    snippet: str = ""

    @classmethod
    def from_api(cls, item: dict) -> "SerpItem":
        """Custom Search API の items 要素から生成する."""
        return cls(
            link=str(item.get("link") or ""),
            title=str(item.get("title") or ""),
            snippet=str(item.get("snippet") or ""),
        )


@dataclass(frozen=True)
class Outcome:
    """キーワード 1 件のチェック結果.

    状態遷移は in_progress → (matched | not_matched | failed) の一度きり。
    更新はフィールド単位ではなくインスタンスごと差し替える。
    """

    keyword: str
    status: Status
    rank: int | None = None  # 1 始まり。matched のときのみ
    domain: str | None = None  # matched のときのみ
    serp: tuple[SerpItem, ...] | None = None  # failed のときは None
    error: str | None = None  # failed のときのみ

    @classmethod
    def in_progress(cls, keyword: str) -> "Outcome":
        return cls(keyword=keyword, status=Status.IN_PROGRESS)

    @classmethod
    def failed(cls, keyword: str, error: str) -> "Outcome":
        return cls(keyword=keyword, status=Status.FAILED, error=error)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True)
class CheckConfig:
    """1 回のバッチ実行で使う設定のスナップショット."""

    api_key: str
    cx: str  # 検索エンジン ID
    domains: tuple[str, ...] = field(default_factory=tuple)
    rank: int = DEFAULT_RANK
    country: str = SEARCH_COUNTRY  # gl
    language: str = SEARCH_LANGUAGE  # hl
    timeout: float = REQUEST_TIMEOUT

    def __post_init__(self):
        # list で渡されても実行中に変更されないよう tuple に固定する
        object.__setattr__(self, "domains", tuple(self.domains))
