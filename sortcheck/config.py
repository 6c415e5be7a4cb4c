"""設定モジュール — 環境変数・定数定義."""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env はプロジェクトルートに配置
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- 検証対象 ---
NEWEST_URL: str = os.environ.get("SORTCHECK_URL", "https://news.ycombinator.com/newest")
TARGET_RANK_COUNT = int(os.environ.get("SORTCHECK_TARGET_RANK_COUNT", "100"))

# --- セレクタ ---
RANKED_ROW_SELECTOR = "tr.athing.submission"
RANK_SELECTOR = "span.rank"
AGE_SELECTOR = "td.subtext span.age"
MORE_LINK_SELECTOR = "a.morelink"

# --- User-Agent ---
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

# --- リクエスト設定 ---
LOAD_MORE_WAIT = float(os.environ.get("SORTCHECK_LOAD_MORE_WAIT", "1.0"))  # 秒
MAX_STALLED_LOADS = int(os.environ.get("SORTCHECK_MAX_STALLED_LOADS", "3"))
REQUEST_TIMEOUT = int(os.environ.get("SORTCHECK_REQUEST_TIMEOUT", "15"))  # 秒

# --- ログ ---
LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
LOG_DIR.mkdir(exist_ok=True)
