"""投稿並び順検証 — メインエントリーポイント.

処理フロー:
  1. 一覧ページ (newest) を開く
  2. 「More」で読み進め、順位 1〜N の投稿日時を蓄積する
  3. 順位が大きいほど投稿日時が古いことを検証する
  4. 結果を YES / NO / verification failed で報告し、終了コードを返す
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime

from sortcheck.config import LOG_DIR, NEWEST_URL, TARGET_RANK_COUNT
from sortcheck.errors import SortCheckError
from sortcheck.page_source import HtmlPageSource, PageSource
from sortcheck.paginator import accumulate_until
from sortcheck.verifier import verify_sort

EXIT_SORTED = 0
EXIT_NOT_SORTED = 1
EXIT_FAILED = 2

logger = logging.getLogger(__name__)


def setup_logging(handlers: list[logging.Handler] | None = None) -> None:
    """ロギングの初期設定."""
    if handlers is None:
        log_file = LOG_DIR / f"sortcheck_{datetime.now().strftime('%Y%m%d')}.log"
        handlers = [
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ]
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )


def run(
    target_rank_count: int = TARGET_RANK_COUNT,
    url: str = NEWEST_URL,
    source: PageSource | None = None,
) -> int:
    """検証を1回実行し終了コードを返す."""
    logger.info("=== 並び順検証 開始: 先頭 %d 件 ===", target_rank_count)
    start_time = time.time()

    own_source = source is None
    if own_source:
        source = HtmlPageSource()

    try:
        items = accumulate_until(source, target_rank_count, url=url)
        report = verify_sort(items, target_rank_count)
    except SortCheckError as e:
        logger.error("verification failed: %s", e)
        return EXIT_FAILED
    finally:
        if own_source:
            source.close()

    elapsed = time.time() - start_time
    logger.info("=== 並び順検証 完了 ===")
    logger.info("比較: %d 組, 欠番: %d 件, 重複: %d 件, 所要時間: %.1f 秒",
                report.compared_pairs, len(report.missing_ranks),
                len(report.duplicate_ranks), elapsed)
    if not report.is_sorted:
        logger.info("最初に並びが崩れた順位: %d", report.disorder_rank)
    logger.info("先頭 %d 件が投稿日時順に並んでいるか: %s (欠番 %d 件は比較を省略)",
                target_rank_count, "YES" if report.is_sorted else "NO",
                len(report.missing_ranks))

    return EXIT_SORTED if report.is_sorted else EXIT_NOT_SORTED


def main(argv: list[str] | None = None) -> int:
    """コマンドライン引数を読み、検証を1回実行する."""
    parser = argparse.ArgumentParser(description="一覧の投稿が新しい順に並んでいるか検証する")
    parser.add_argument("--count", type=int, default=TARGET_RANK_COUNT,
                        help="検証する順位の数 (default: %(default)s)")
    parser.add_argument("--url", default=NEWEST_URL, help="最初に開く一覧ページ")
    args = parser.parse_args(argv)
    if args.count < 1:
        parser.error("--count は 1 以上を指定してください")

    setup_logging()
    return run(args.count, args.url)


if __name__ == "__main__":
    sys.exit(main())
