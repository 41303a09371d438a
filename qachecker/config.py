"""設定モジュール — 環境変数・定数定義."""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env・ログは実行時のカレントディレクトリに置く（QA_CHECKER_HOME で変更可）
BASE_DIR = Path(os.getenv("QA_CHECKER_HOME") or Path.cwd())
load_dotenv(BASE_DIR / ".env")

# --- Google Custom Search ---
API_ENDPOINT = "https://www.googleapis.com/customsearch/v1"
GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")
GOOGLE_CSE_ID: str = os.getenv("GOOGLE_CSE_ID", "")

# 検索地域・言語（gl / hl パラメータ）
SEARCH_COUNTRY = os.getenv("SEARCH_COUNTRY", "jp")
SEARCH_LANGUAGE = os.getenv("SEARCH_LANGUAGE", "ja")

# --- 順位チェック ---
DEFAULT_RANK = 10
MIN_RANK = 1
MAX_RANK = 10  # Custom Search API の num 上限

DEFAULT_QA_DOMAINS = [
    "chiebukuro.yahoo.co.jp",
    "detail.chiebukuro.yahoo.co.jp",
    "oshiete.goo.ne.jp",
    "okwave.jp",
    "teratail.com",
    "ja.stackoverflow.com",
    "stackoverflow.com",
]

# --- リクエスト設定 ---
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))  # 秒

# --- 設定の保存先 ---
SETTINGS_KEY_API_KEY = "qa_checker_api_key"
SETTINGS_KEY_CX = "qa_checker_cx"
SETTINGS_KEY_DOMAINS = "qa_checker_domains"

SETTINGS_BACKEND = os.getenv("SETTINGS_BACKEND", "file")  # "file" or "supabase"
SETTINGS_FILE = Path(
    os.getenv("SETTINGS_FILE", str(Path.home() / ".qa_checker" / "settings.json"))
)

# --- Supabase（SETTINGS_BACKEND=supabase の場合のみ使用） ---
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
SUPABASE_SECRET_KEY: str = os.getenv("SUPABASE_SECRET_KEY", "")
SUPABASE_SCHEMA = os.getenv("SUPABASE_SCHEMA", "qa_checker")

# --- 出力 ---
CSV_FILE = Path("qa_check_results.csv")

# --- ログ ---
LOG_DIR = Path(os.getenv("LOG_DIR") or BASE_DIR / "logs")
