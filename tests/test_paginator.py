"""paginator モジュールのテスト."""

import threading
from unittest.mock import MagicMock

import pytest

from listing_stub import NEWEST_URL, StubListingSource, build_listing, make_items, render_page
from sortcheck.errors import ControlUnavailable, NavigationError, PaginationStall, VerificationCancelled
from sortcheck.paginator import accumulate_until


class TestAccumulateUntil:
    """accumulate_until のテスト."""

    def test_three_pages(self):
        """30 / 30 / 40 件のページで順位 1〜100 をちょうど取得すること."""
        source = StubListingSource(build_listing([30, 30, 40]))

        items = accumulate_until(source, 100, url=NEWEST_URL, wait_seconds=0)

        assert len(items) == 100
        assert sorted(i.rank for i in items) == list(range(1, 101))
        assert source.load_more_count == 2

    def test_twelve_per_load_capped(self):
        """12 件ずつ増えて 100 件で打ち止めの一覧でも終了すること."""
        source = StubListingSource(build_listing([12] * 8 + [4]))

        items = accumulate_until(source, 100, url=NEWEST_URL, wait_seconds=0)

        assert len(items) >= 100
        assert source.load_more_count == 8
        assert source.waits == [0] * 8

    def test_filter_keeps_insertion_order(self):
        """目標を超えた分は除外し、並べ替えはしないこと."""
        source = StubListingSource(build_listing([30, 30, 30, 30]))

        items = accumulate_until(source, 100, url=NEWEST_URL, wait_seconds=0)

        assert len(items) == 100
        assert max(i.rank for i in items) == 100
        assert source.load_more_count == 3

    def test_single_page_enough(self):
        source = StubListingSource(build_listing([30, 30]))

        items = accumulate_until(source, 10, url=NEWEST_URL, wait_seconds=0)

        assert [i.rank for i in items] == list(range(1, 11))
        assert source.load_more_count == 0

    def test_no_dedupe_across_passes(self):
        """ページがずれて同じ投稿が再登場しても蓄積は追記のみであること."""
        first = make_items(1, 30)
        # 新着 1 件で順位がずれ、前ページ末尾の投稿が 31 位として再登場する
        second = make_items(31, 60)
        second[0].item_id = first[-1].item_id
        pages = {
            NEWEST_URL: render_page(first, "newest?p=2"),
            NEWEST_URL + "?p=2": render_page(second),
        }
        source = StubListingSource(pages)

        items = accumulate_until(source, 60, url=NEWEST_URL, wait_seconds=0)

        assert len(items) == 60
        assert [i.item_id for i in items].count(first[-1].item_id) == 2

    def test_stall(self):
        """新しい投稿が増えないページ送りが続いたら PaginationStall."""
        source = StubListingSource(build_listing([30], repeat_last=True))

        with pytest.raises(PaginationStall) as exc_info:
            accumulate_until(source, 100, url=NEWEST_URL, wait_seconds=0, max_stalled_loads=3)

        assert exc_info.value.attempts == 3
        assert exc_info.value.collected == 120
        assert source.load_more_count == 3

    def test_stall_counter_resets(self):
        """途中で新しい投稿が取れたら空振り回数はリセットされること."""
        page1 = make_items(1, 10)
        page2 = make_items(11, 20)
        pages = {
            NEWEST_URL: render_page(page1, "newest?p=1b"),
            NEWEST_URL + "?p=1b": render_page(page1, "newest?p=2"),
            NEWEST_URL + "?p=2": render_page(page2, "newest?p=2b"),
            NEWEST_URL + "?p=2b": render_page(page2, "newest?p=3"),
            NEWEST_URL + "?p=3": render_page(make_items(21, 60)),
        }
        source = StubListingSource(pages)

        items = accumulate_until(source, 60, url=NEWEST_URL, wait_seconds=0, max_stalled_loads=2)

        assert max(i.rank for i in items) == 60
        assert source.load_more_count == 4

    def test_more_link_missing(self):
        source = StubListingSource(build_listing([30, 30]))

        with pytest.raises(ControlUnavailable):
            accumulate_until(source, 100, url=NEWEST_URL, wait_seconds=0)

    def test_navigation_error(self):
        source = StubListingSource({})

        with pytest.raises(NavigationError):
            accumulate_until(source, 100, url=NEWEST_URL, wait_seconds=0)

    def test_injected_log(self):
        source = StubListingSource(build_listing([30, 30, 40]))
        log = MagicMock()

        accumulate_until(source, 100, url=NEWEST_URL, wait_seconds=0, log=log)

        assert log.info.called

    def test_cancelled(self):
        source = StubListingSource(build_listing([30, 30, 40]))
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(VerificationCancelled):
            accumulate_until(source, 100, url=NEWEST_URL, wait_seconds=0, cancel_event=cancel)
        assert source.load_more_count == 0

    def test_invalid_target(self):
        source = StubListingSource(build_listing([30]))

        with pytest.raises(ValueError):
            accumulate_until(source, 0, url=NEWEST_URL, wait_seconds=0)
        assert source.fetched == []
