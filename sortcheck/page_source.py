"""一覧ページの取得モジュール.

抽出処理はページを PageSource / PageElement 経由でのみ参照する。
HtmlPageSource は requests で HTML を取得し BeautifulSoup で要素を引く実装。
"""

from __future__ import annotations

import logging
import time
from typing import Protocol
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag

from sortcheck.config import MORE_LINK_SELECTOR, REQUEST_TIMEOUT, USER_AGENT
from sortcheck.errors import ControlUnavailable, NavigationError

logger = logging.getLogger(__name__)


class PageElement(Protocol):
    def get_attribute(self, name: str) -> str | None: ...

    def inner_text(self) -> str: ...

    def get_link_href(self) -> str | None: ...

    def query_all(self, selector: str) -> list[PageElement]: ...


class PageSource(Protocol):
    url: str | None

    def navigate(self, url: str) -> None: ...

    def query_all(self, selector: str) -> list[PageElement]: ...

    def trigger_load_more(self) -> None: ...

    def wait_quiescent(self, seconds: float) -> None: ...


class HtmlElement:
    """BeautifulSoup の Tag を PageElement として扱うラッパー."""

    def __init__(self, tag: Tag):
        self._tag = tag

    def get_attribute(self, name: str) -> str | None:
        value = self._tag.get(name)
        # class 属性などはリストで返る
        if isinstance(value, list):
            return " ".join(value)
        return value

    def inner_text(self) -> str:
        return self._tag.get_text(strip=True)

    def get_link_href(self) -> str | None:
        """要素自身、または配下の最初のリンクの href を返す."""
        link = self._tag if self._tag.name == "a" else self._tag.find("a")
        if link is None:
            return None
        return link.get("href")

    def query_all(self, selector: str) -> list[HtmlElement]:
        return [HtmlElement(tag) for tag in self._tag.select(selector)]


class HtmlPageSource:
    """requests + BeautifulSoup による PageSource 実装.

    「More」はリンク先への遷移として扱い、現在のページ状態を置き換える。
    """

    def __init__(self, session: requests.Session | None = None, timeout: int = REQUEST_TIMEOUT):
        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept-Language": "en-US,en;q=0.9",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        })
        self._timeout = timeout
        self._soup: BeautifulSoup | None = None
        self.url: str | None = None

    def __enter__(self) -> HtmlPageSource:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def _fetch(self, url: str) -> str:
        """ページの HTML を取得する.

        Raises:
            NavigationError: 通信エラーまたはエラーステータス
        """
        try:
            resp = self._session.get(url, timeout=self._timeout)
            resp.raise_for_status()
            return resp.text
        except requests.RequestException as e:
            logger.error("ページ取得失敗: url=%s, error=%s", url, e)
            raise NavigationError(f"ページを取得できませんでした: {url} ({e})") from e

    def navigate(self, url: str) -> None:
        html = self._fetch(url)
        self._soup = BeautifulSoup(html, "html.parser")
        self.url = url
        logger.debug("ページ読み込み完了: %s", url)

    def query_all(self, selector: str) -> list[HtmlElement]:
        if self._soup is None:
            return []
        return [HtmlElement(tag) for tag in self._soup.select(selector)]

    def trigger_load_more(self) -> None:
        """「More」リンクの遷移先を読み込む.

        Raises:
            ControlUnavailable: ページ未読込、またはリンクが無い
            NavigationError: 遷移先の取得に失敗
        """
        if self._soup is None or self.url is None:
            raise ControlUnavailable("ページが読み込まれていません")

        link = self._soup.select_one(MORE_LINK_SELECTOR)
        href = link.get("href") if link is not None else None
        if not href:
            raise ControlUnavailable(f"「More」リンクが見つかりません: {self.url}")

        self.navigate(urljoin(self.url, href))

    def wait_quiescent(self, seconds: float) -> None:
        """次のページ送りまで待機する.

        レスポンス受信時点で内容は揃っているため、ここではリクエスト間隔のみ空ける。
        """
        if seconds > 0:
            time.sleep(seconds)
