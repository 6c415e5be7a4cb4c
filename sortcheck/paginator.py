"""ページ送りしながら投稿を蓄積するモジュール."""

from __future__ import annotations

import logging
import threading

from sortcheck.config import LOAD_MORE_WAIT, MAX_STALLED_LOADS, NEWEST_URL, TARGET_RANK_COUNT
from sortcheck.errors import PaginationStall, VerificationCancelled
from sortcheck.models import Item
from sortcheck.page_source import PageSource
from sortcheck.scraper import extract_items

logger = logging.getLogger(__name__)


def accumulate_until(
    source: PageSource,
    target_rank_count: int = TARGET_RANK_COUNT,
    *,
    url: str = NEWEST_URL,
    wait_seconds: float = LOAD_MORE_WAIT,
    max_stalled_loads: int = MAX_STALLED_LOADS,
    cancel_event: threading.Event | None = None,
    log: logging.Logger | None = None,
) -> list[Item]:
    """順位 1〜target_rank_count を網羅するまで「More」で読み進める.

    蓄積リストは追記のみで、ID による重複排除はしない。
    新しい投稿 ID が増えないページ送りが max_stalled_loads 回続いたら打ち切る。

    Args:
        source: ページ取得元
        target_rank_count: 検証対象の順位数
        url: 最初に開く一覧ページ
        wait_seconds: ページ送り後の待機秒数
        max_stalled_loads: 許容する連続空振り回数
        cancel_event: セットされていたらループ先頭で中断する
        log: ログ出力先。省略時はモジュールのロガー

    Returns:
        順位が target_rank_count 以下の Item（蓄積順）

    Raises:
        PaginationStall: 新しい投稿が増えなくなった
        VerificationCancelled: cancel_event がセットされた
        NavigationError, ControlUnavailable: 取得元の失敗
    """
    if target_rank_count < 1:
        raise ValueError(f"target_rank_count は 1 以上: {target_rank_count}")
    log = log or logger

    items: list[Item] = []
    seen_ids: set[str] = set()

    log.info("一覧ページを開く: %s", url)
    source.navigate(url)
    for item in extract_items(source, items, log=log):
        seen_ids.add(item.item_id)

    load_count = 0
    stalled = 0
    while len(items) <= target_rank_count and not _covers(items, target_rank_count):
        if cancel_event is not None and cancel_event.is_set():
            raise VerificationCancelled(f"ページ送り {load_count} 回目で中断されました")

        source.trigger_load_more()
        source.wait_quiescent(wait_seconds)
        load_count += 1

        new_ids = {item.item_id for item in extract_items(source, items, log=log)} - seen_ids
        if new_ids:
            seen_ids.update(new_ids)
            stalled = 0
            continue

        stalled += 1
        log.warning("新しい投稿なし: ページ送り %d 回目 (連続 %d 回)", load_count, stalled)
        if stalled >= max_stalled_loads:
            raise PaginationStall(stalled, len(items))

    log.info("蓄積完了: ページ送り %d 回, 累計 %d 件", load_count, len(items))
    return [item for item in items if item.rank <= target_rank_count]


def _covers(items: list[Item], target_rank_count: int) -> bool:
    """目標の順位まで取得済みか."""
    return any(item.rank >= target_rank_count for item in items)
