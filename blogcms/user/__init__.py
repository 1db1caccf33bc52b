# blogcms/user/__init__.py

from flask import Blueprint

from blogcms.decorators import gate_blueprint

# 一般ユーザー用ルートグループ (投稿の閲覧とコメント)。'user' ロールが必要です。
bp = Blueprint('user', __name__)
gate_blueprint(bp, 'user')

from . import routes
