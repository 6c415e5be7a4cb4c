"""データモデル定義."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Item:
    """一覧の1投稿を表す."""

    item_id: str  # 投稿ID (例: 41234567)
    rank: int  # 取得時点の順位（1始まり）
    timestamp: datetime  # 投稿日時 (UTC)


@dataclass
class RankedEntry:
    """順位行から読んだ部分レコード."""

    item_id: str
    rank: int


@dataclass
class AgeEntry:
    """投稿日時要素から読んだ部分レコード. item_id はリンクから導出."""

    item_id: str
    timestamp: datetime


@dataclass
class JoinGap:
    """順位行と突き合わせできなかった投稿日時レコード."""

    item_id: str
    timestamp: datetime


@dataclass
class SortReport:
    """並び順検証の結果."""

    target_rank_count: int
    is_sorted: bool
    disorder_rank: int | None = None  # 最初に並びが崩れた順位
    compared_pairs: int = 0
    missing_ranks: list[int] = field(default_factory=list)
    duplicate_ranks: list[int] = field(default_factory=list)
