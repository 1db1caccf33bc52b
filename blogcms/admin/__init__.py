# blogcms/admin/__init__.py

from flask import Blueprint

from blogcms.decorators import gate_blueprint

# 管理者用ルートグループ。すべてのルートに 'admin' ロールが必要です。
bp = Blueprint('admin', __name__, url_prefix='/admin')
gate_blueprint(bp, 'admin')

# ★重要★ このインポートは、bpが定義された後に行う必要があります。
from . import routes
