# blogcms/exceptions.py


class BlogError(Exception):
    """アプリケーション固有の例外の基底クラス。"""


class StorageError(BlogError):
    """公開ストレージへの書き込み・削除に失敗したことを表します。"""

    def __init__(self, message, reference=None):
        super().__init__(message)
        self.reference = reference
