# blogcms/__init__.py

import os
import logging
from logging.handlers import RotatingFileHandler

from flask import Flask

import config # config モジュールをインポート

from blogcms.extensions import db, migrate, csrf, login_manager


# アプリケーションファクトリ関数
def create_app(config_class=config.Config):
    # Flaskアプリケーションのインスタンスを作成
    app = Flask(__name__, instance_path=os.path.join(config.BASE_DIR, 'instance'))
    app.config.from_object(config_class)

    # インスタンスフォルダとアップロードディレクトリが存在することを確認し、なければ作成します
    os.makedirs(app.instance_path, exist_ok=True)
    os.makedirs(os.path.join(app.config['UPLOAD_FOLDER'], app.config['POSTS_UPLOAD_SUBDIR']), exist_ok=True)

    # 拡張機能の初期化
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    login_manager.init_app(app)

    # ログイン処理自体は外部の認証システムが担当し、ここではセッションからユーザーを復元するだけです
    from blogcms.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    configure_logging(app)

    # 各種ブループリントの登録
    from blogcms.routes.home import home_bp
    from blogcms.admin import bp as admin_bp
    from blogcms.user import bp as user_bp

    app.register_blueprint(home_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(user_bp)

    # CLI コマンドの登録
    from blogcms import cli
    app.cli.add_command(cli.init)

    return app


def configure_logging(app):
    # ロギングの設定
    formatter = logging.Formatter('%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    # app.logger は "blogcms" ロガーなので、モジュールごとのロガー (blogcms.*) もここに流れます。
    # create_app を繰り返し呼んでもハンドラが重複しないよう、先に外しておきます
    for handler in list(app.logger.handlers):
        app.logger.removeHandler(handler)

    if app.config.get('LOG_TO_FILE'):
        log_dir = app.config['LOG_DIR']
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(os.path.join(log_dir, 'blogcms.log'), maxBytes=10240, backupCount=10)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

    # stdout へのロギング設定 (Gunicorn などでコンソール出力を見るため)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(logging.INFO)
    app.logger.addHandler(stream_handler)
    app.logger.setLevel(logging.INFO)

    app.logger.info('blogcms startup')
