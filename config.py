# config.py
import os

# BASE_DIR はプロジェクトのルートディレクトリを指します
BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # アプリケーションのセキュリティキー (セッション管理などに使用)
    # 本番環境では環境変数 SECRET_KEY を必ず設定してください。
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-blogcms-secret')

    SESSION_COOKIE_SECURE = False

    # データベースのURI設定
    # 環境変数 DATABASE_URL がなければ 'instance' フォルダ内の SQLite を使います
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL', 'sqlite:///' + os.path.join(BASE_DIR, 'instance', 'blogcms.db'))
    # SQLAlchemyのイベントトラッキングを無効にします (リソース節約のため)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    DEBUG = False

    # --- 画像アップロード関連の設定 ---
    # 公開ストレージのルート。保存される参照 ("posts/xxx.png") はここからの相対パスです。
    UPLOAD_FOLDER = os.path.join(BASE_DIR, 'storage', 'public')
    # 投稿画像を保存するサブディレクトリ
    POSTS_UPLOAD_SUBDIR = 'posts'
    # 公開URLのプレフィックス (image_url = PUBLIC_STORAGE_URL + '/' + 参照)
    PUBLIC_STORAGE_URL = '/storage'

    # 画像の最大サイズ (KB 単位)
    MAX_IMAGE_SIZE_KB = 5000
    # リクエスト全体の最大サイズ (バイト単位)
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024

    # ページあたりの投稿数
    ADMIN_POSTS_PER_PAGE = 10
    USER_POSTS_PER_PAGE = 9

    # 投稿削除時に画像ファイルも削除するか (既定では削除しない)
    DELETE_POST_IMAGES = False

    # ロギング
    LOG_DIR = os.path.join(BASE_DIR, 'logs')
    LOG_TO_FILE = True


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False # テスト中はCSRFを無効にする
    LOG_TO_FILE = False
