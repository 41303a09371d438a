"""ホスト名の正規化と Q&A ドメイン照合モジュール."""

from __future__ import annotations

import re
from typing import Iterable, Sequence
from urllib.parse import urlparse

from qachecker.models import Outcome, SerpItem, Status

_WWW_PREFIX = re.compile(r"^www\.")
_DOMAIN_SEPARATOR = re.compile(r"[\n,]+")


def hostname_of(url: str) -> str:
    """URL からホスト名を取り出し、先頭の www. を除去する.

    Returns:
        ホスト名。URL として解釈できない場合は空文字。
    """
    try:
        host = urlparse(url).hostname
    except (ValueError, TypeError, AttributeError):
        return ""
    if not host:
        return ""
    return _WWW_PREFIX.sub("", host)


def includes_any(host: str, patterns: Iterable[str]) -> bool:
    """ホスト名がいずれかのドメインに完全一致またはサブドメイン一致するか."""
    if not host:
        return False
    return any(host == p or host.endswith("." + p) for p in patterns if p)


def parse_domain_list(text: str) -> list[str]:
    """カンマまたは改行区切りのドメイン一覧をリストにする（空要素は除外）."""
    domains = []
    for d in _DOMAIN_SEPARATOR.split(text):
        d = d.strip().lower()
        if d:
            domains.append(d)
    return domains


def classify_results(
    keyword: str,
    items: Sequence[SerpItem],
    patterns: Sequence[str],
    rank: int,
) -> Outcome:
    """検索結果の上位 rank 件から最初に Q&A ドメインに一致する結果を探す.

    Returns:
        一致あり: status=matched, rank=順位（1始まり）, domain=一致したホスト名
        一致なし: status=not_matched
        いずれの場合も serp に検索結果全件を保持する。
    """
    serp = tuple(items)
    for position, item in enumerate(serp[:rank], start=1):
        host = hostname_of(item.link)
        if includes_any(host, patterns):
            return Outcome(
                keyword=keyword,
                status=Status.MATCHED,
                rank=position,
                domain=host,
                serp=serp,
            )
    return Outcome(keyword=keyword, status=Status.NOT_MATCHED, serp=serp)
