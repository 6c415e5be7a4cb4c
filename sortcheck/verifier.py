"""投稿日時の並び順を検証するモジュール.

順位 i の投稿は順位 i-1 の投稿より厳密に古いこと（順位 1 が最新）。

欠番・重複の扱い:
  - 同じ順位のレコードが複数あれば、先に蓄積されたものを採用する
  - 片側の順位が欠けている組は比較できないため飛ばし、missing_ranks に記録する
  - 1 組も比較できなければ InsufficientData
"""

from __future__ import annotations

import logging
from datetime import datetime

from sortcheck.errors import InsufficientData
from sortcheck.models import Item, SortReport

logger = logging.getLogger(__name__)


def build_rank_index(items: list[Item]) -> dict[int, datetime]:
    """順位 → 投稿日時の対応表を作る. 重複した順位は先勝ち."""
    index: dict[int, datetime] = {}
    for item in items:
        index.setdefault(item.rank, item.timestamp)
    return index


def verify_sort(
    items: list[Item], target_rank_count: int, log: logging.Logger | None = None
) -> SortReport:
    """順位 1〜target_rank_count の投稿日時が新しい順に並んでいるか検証する.

    Raises:
        InsufficientData: 比較できる組が無い
    """
    log = log or logger
    index = build_rank_index(items)

    counts: dict[int, int] = {}
    for item in items:
        counts[item.rank] = counts.get(item.rank, 0) + 1
    duplicate_ranks = sorted(
        rank for rank, count in counts.items() if count > 1 and rank <= target_rank_count
    )
    if duplicate_ranks:
        log.warning("重複した順位（先勝ちで採用）: %s", duplicate_ranks)

    missing_ranks = [
        rank for rank in range(1, target_rank_count + 1) if rank not in index
    ]
    if missing_ranks:
        log.warning("欠番の順位（前後の比較を省略）: %s", missing_ranks)

    report = SortReport(
        target_rank_count=target_rank_count,
        is_sorted=True,
        missing_ranks=missing_ranks,
        duplicate_ranks=duplicate_ranks,
    )

    for rank in range(2, target_rank_count + 1):
        current = index.get(rank)
        previous = index.get(rank - 1)
        if current is None or previous is None:
            continue

        report.compared_pairs += 1
        if current >= previous:
            log.info("並び順の崩れ: %d位 %s >= %d位 %s",
                     rank, current.isoformat(), rank - 1, previous.isoformat())
            report.is_sorted = False
            report.disorder_rank = rank
            return report

    if target_rank_count >= 2 and report.compared_pairs == 0:
        raise InsufficientData(
            f"順位 1〜{target_rank_count} で比較できる組がありません (欠番 {len(missing_ranks)} 件)"
        )

    return report


def is_sorted(items: list[Item], target_rank_count: int) -> bool:
    """順位 1〜target_rank_count が投稿日時の新しい順なら True."""
    return verify_sort(items, target_rank_count).is_sorted
