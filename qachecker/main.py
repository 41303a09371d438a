"""QA上位チェック — メインエントリーポイント.

処理フロー:
  1. 保存済み設定（API キー・検索エンジン ID・Q&A ドメイン）を読み込み
  2. コマンドライン引数・環境変数で上書き
  3. キーワードを 1 件ずつ検索し、上位に Q&A サイトがあるか判定
  4. 結果を表示し、必要なら CSV 出力
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from qachecker.checker import BatchRankChecker
from qachecker.config import (
    DEFAULT_RANK,
    GOOGLE_API_KEY,
    GOOGLE_CSE_ID,
    LOG_DIR,
    MAX_RANK,
    MIN_RANK,
    REQUEST_TIMEOUT,
    SEARCH_COUNTRY,
    SEARCH_LANGUAGE,
)
from qachecker.exceptions import ConfigurationError
from qachecker.export import write_csv
from qachecker.matcher import hostname_of, includes_any, parse_domain_list
from qachecker.models import CheckConfig, Outcome, Status
from qachecker.settings import create_store, load_settings, save_settings

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """ロギングの初期設定."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / f"qa_checker_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def _rank_arg(value: str) -> int:
    rank = int(value)
    if not MIN_RANK <= rank <= MAX_RANK:
        raise argparse.ArgumentTypeError(f"{MIN_RANK}〜{MAX_RANK} の範囲で指定してください")
    return rank


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """コマンドライン引数を解析する."""
    parser = argparse.ArgumentParser(
        description="キーワードで検索上位にQ&Aサイトが含まれるか一括チェックします。"
    )
    parser.add_argument("keywords", nargs="*", help="チェックするキーワード")
    parser.add_argument(
        "--keywords-file", type=Path, help="キーワード一覧ファイル（1行に1つ）"
    )
    parser.add_argument("--domains", help="対象Q&Aドメイン（カンマ or 改行区切り）")
    parser.add_argument(
        "--domains-file", type=Path, help="対象Q&Aドメイン一覧ファイル"
    )
    parser.add_argument(
        "--rank",
        type=_rank_arg,
        default=DEFAULT_RANK,
        help=f"チェックする順位（{MIN_RANK}〜{MAX_RANK}, 既定: {DEFAULT_RANK}）",
    )
    parser.add_argument("--api-key", help="Google API Key")
    parser.add_argument("--cx", help="検索エンジンID (cx)")
    parser.add_argument("--output", type=Path, help="CSV 出力先")
    parser.add_argument(
        "--show-serp", action="store_true", help="各キーワードの検索結果一覧を表示する"
    )
    parser.add_argument(
        "--save-settings", action="store_true", help="API キー・cx・ドメイン一覧を保存する"
    )
    return parser.parse_args(argv)


def read_keywords(args: argparse.Namespace) -> list[str]:
    """引数とファイルからキーワードを集める. 空行は除外する."""
    lines = list(args.keywords)
    if args.keywords_file:
        lines.extend(args.keywords_file.read_text(encoding="utf-8").splitlines())
    return [k.strip() for k in lines if k.strip()]


def format_outcome(outcome: Outcome) -> str:
    """結果 1 件を表示用の 1 行にする."""
    if outcome.status is Status.MATCHED:
        return f"◎ {outcome.keyword}  {outcome.rank}位: {outcome.domain}"
    if outcome.status is Status.NOT_MATCHED:
        return f"✖ {outcome.keyword}"
    if outcome.status is Status.FAILED:
        return f"⚠ {outcome.keyword}  エラー: {outcome.error}"
    return f"… {outcome.keyword}"


def format_serp(outcome: Outcome, domains: tuple[str, ...]) -> list[str]:
    """検索結果一覧（上位 N 件）を表示用の行にする."""
    serp = outcome.serp or ()
    lines = [f"    検索結果 (上位{len(serp)}件)"]
    for i, item in enumerate(serp, start=1):
        host = hostname_of(item.link)
        mark = " [QAサイト]" if includes_any(host, domains) else ""
        lines.append(f"    {i:>2}. {item.title}{mark}")
        lines.append(f"        {host}  {item.link}")
    return lines


def run(argv: list[str] | None = None) -> int:
    """メイン処理."""
    args = parse_args(argv)
    setup_logging()

    keywords = read_keywords(args)
    if not keywords:
        logger.warning("キーワードが指定されていません。終了します。")
        return 1

    store = create_store()
    settings = load_settings(store)

    # 優先順位: 引数 > 環境変数 > 保存済み設定
    settings.api_key = args.api_key or GOOGLE_API_KEY or settings.api_key
    settings.cx = args.cx or GOOGLE_CSE_ID or settings.cx
    if args.domains_file:
        settings.domains = parse_domain_list(args.domains_file.read_text(encoding="utf-8"))
    elif args.domains:
        settings.domains = parse_domain_list(args.domains)

    if args.save_settings:
        save_settings(store, settings)

    config = CheckConfig(
        api_key=settings.api_key,
        cx=settings.cx,
        domains=tuple(settings.domains),
        rank=args.rank,
        country=SEARCH_COUNTRY,
        language=SEARCH_LANGUAGE,
        timeout=REQUEST_TIMEOUT,
    )

    checker = BatchRankChecker()
    try:
        outcomes = checker.run_batch(keywords, config)
    except ConfigurationError as e:
        logger.error("%s", e)
        return 2

    print("チェック結果")
    for outcome in outcomes:
        print(format_outcome(outcome))
        if args.show_serp and outcome.serp:
            print("\n".join(format_serp(outcome, config.domains)))

    if args.output:
        write_csv(outcomes, args.output)
        logger.info("CSV 出力: %s", args.output)

    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
