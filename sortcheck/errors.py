"""検証失敗を表す例外定義."""


class SortCheckError(Exception):
    """検証を中断する失敗の基底クラス."""


class ExtractionError(SortCheckError):
    """必須の値（投稿日時・ID・順位）を要素から読み取れない."""


class NavigationError(SortCheckError):
    """ページの読み込みに失敗した."""


class ControlUnavailable(SortCheckError):
    """「More」リンクが見つからない、または使えない."""


class PaginationStall(SortCheckError):
    """ページ送りを繰り返しても新しい投稿が増えない."""

    def __init__(self, attempts: int, collected: int):
        super().__init__(
            f"{attempts} 回連続で新しい投稿を取得できませんでした (取得済み {collected} 件)"
        )
        self.attempts = attempts
        self.collected = collected


class VerificationCancelled(SortCheckError):
    """呼び出し側により中断された."""


class InsufficientData(SortCheckError):
    """隣接する順位の組を1つも比較できなかった."""
