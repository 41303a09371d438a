"""チェック結果の CSV 出力モジュール."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from qachecker.exceptions import ExportBlockedError
from qachecker.models import Outcome, Status

CSV_HEADERS = ["Keyword", "Status", "Rank", "Domain"]

LABEL_MATCHED = "◎ 狙い目"
LABEL_SKIPPED = "✖ 見送り"


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def to_csv_row(outcome: Outcome) -> str:
    """結果 1 件を CSV の 1 行に変換する. キーワードは常に引用符で囲む."""
    label = LABEL_MATCHED if outcome.status is Status.MATCHED else LABEL_SKIPPED
    rank = str(outcome.rank) if outcome.rank is not None else ""
    domain = outcome.domain or ""
    return ",".join([_quote(outcome.keyword), label, rank, domain])


def export_csv(outcomes: Sequence[Outcome]) -> bytes:
    """結果一覧を CSV（UTF-8）のバイト列にする.

    Raises:
        ExportBlockedError: 処理中の結果が残っている場合
    """
    pending = sum(1 for o in outcomes if not o.is_terminal)
    if pending:
        raise ExportBlockedError(f"チェック実行中のため CSV 出力できません（残り {pending} 件）")

    lines = [",".join(CSV_HEADERS)]
    lines.extend(to_csv_row(o) for o in outcomes)
    return "\n".join(lines).encode("utf-8")


def write_csv(outcomes: Sequence[Outcome], filepath: Path) -> Path:
    """CSV をファイルに書き出す."""
    data = export_csv(outcomes)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_bytes(data)
    return filepath
