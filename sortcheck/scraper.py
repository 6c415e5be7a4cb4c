"""一覧ページから投稿の順位・投稿日時を抽出するモジュール.

抽出戦略:
  1. 順位行 (tr.athing.submission) から ID と順位を読む
  2. 投稿日時要素 (span.age) から日時とリンク先を読み、リンクから ID を導出する
  3. ID で 1 と 2 を突き合わせる。突き合わせできない日時レコードは捨てる
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from sortcheck.config import AGE_SELECTOR, RANK_SELECTOR, RANKED_ROW_SELECTOR
from sortcheck.errors import ExtractionError
from sortcheck.models import AgeEntry, Item, JoinGap, RankedEntry
from sortcheck.page_source import PageSource

logger = logging.getLogger(__name__)

# title="2026-10-18T09:41:07 1792316467" の日時部分
_TIMESTAMP_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
# item?id=41234567 の数字部分
_ITEM_ID_PATTERN = re.compile(r"\d+")
# "12." の数字部分
_RANK_PATTERN = re.compile(r"\d+")


def parse_ranked_entries(page: PageSource) -> list[RankedEntry]:
    """順位行から (ID, 順位) を読み取る.

    Raises:
        ExtractionError: ID が無い、または順位が数値でない
    """
    entries: list[RankedEntry] = []
    for row in page.query_all(RANKED_ROW_SELECTOR):
        item_id = row.get_attribute("id")
        if not item_id:
            raise ExtractionError("順位行に id 属性がありません")

        rank_elements = row.query_all(RANK_SELECTOR)
        rank_text = rank_elements[0].inner_text() if rank_elements else ""
        entries.append(RankedEntry(item_id=item_id, rank=_parse_rank(rank_text, item_id)))

    return entries


def parse_age_entries(page: PageSource) -> list[AgeEntry]:
    """投稿日時要素から (ID, 投稿日時) を読み取る.

    Raises:
        ExtractionError: 日時またはリンク先 ID を読み取れない
    """
    entries: list[AgeEntry] = []
    for age in page.query_all(AGE_SELECTOR):
        timestamp = _parse_timestamp(age.get_attribute("title"))
        item_id = _extract_item_id(age.get_link_href())
        entries.append(AgeEntry(item_id=item_id, timestamp=timestamp))

    return entries


def join_entries(
    ranked: list[RankedEntry], ages: list[AgeEntry]
) -> tuple[list[Item], list[JoinGap]]:
    """投稿日時レコードを ID で順位レコードに突き合わせる.

    Returns:
        (突き合わせできた Item のリスト, 突き合わせできなかった JoinGap のリスト)。
        どちらも投稿日時要素のページ内の順序。
    """
    rank_by_id: dict[str, int] = {}
    for entry in ranked:
        rank_by_id.setdefault(entry.item_id, entry.rank)

    items: list[Item] = []
    gaps: list[JoinGap] = []
    for age in ages:
        rank = rank_by_id.get(age.item_id)
        if rank is None:
            gaps.append(JoinGap(item_id=age.item_id, timestamp=age.timestamp))
            continue
        items.append(Item(item_id=age.item_id, rank=rank, timestamp=age.timestamp))

    return items, gaps


def extract_items(
    page: PageSource, items: list[Item], log: logging.Logger | None = None
) -> list[Item]:
    """現在のページから投稿を抽出し items に追記する.

    Args:
        page: 読み込み済みのページ
        items: 実行全体で共有する蓄積リスト（追記される）
        log: ログ出力先。省略時はモジュールのロガー

    Returns:
        今回のページから抽出した Item のリスト
    """
    log = log or logger

    ranked = parse_ranked_entries(page)
    ages = parse_age_entries(page)
    extracted, gaps = join_entries(ranked, ages)

    for gap in gaps:
        log.warning("順位行と突き合わせできない投稿: id=%s, 投稿日時=%s",
                    gap.item_id, gap.timestamp.isoformat())

    items.extend(extracted)
    log.info("抽出: 順位行 %d 件, 日時 %d 件 → %d 件 (累計 %d 件)",
             len(ranked), len(ages), len(extracted), len(items))
    return extracted


def _parse_rank(text: str, item_id: str) -> int:
    """順位表示 ("12.") を整数にする."""
    m = _RANK_PATTERN.search(text)
    if not m:
        raise ExtractionError(f"順位を読み取れません: id={item_id}, text={text!r}")
    return int(m.group(0))


def _parse_timestamp(title: str | None) -> datetime:
    """title 属性から投稿日時 (UTC) を取り出す."""
    m = _TIMESTAMP_PATTERN.search(title or "")
    if not m:
        raise ExtractionError(f"投稿日時を読み取れません: title={title!r}")
    try:
        parsed = datetime.strptime(m.group(0), _TIMESTAMP_FORMAT)
    except ValueError as e:
        raise ExtractionError(f"投稿日時を読み取れません: title={title!r}") from e
    return parsed.replace(tzinfo=timezone.utc)


def _extract_item_id(href: str | None) -> str:
    """リンク先 (item?id=41234567) から投稿 ID を取り出す."""
    m = _ITEM_ID_PATTERN.search(href or "")
    if not m:
        raise ExtractionError(f"リンク先から投稿 ID を読み取れません: href={href!r}")
    return m.group(0)
