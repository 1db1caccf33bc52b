# run.py

from blogcms import create_app
from config import Config # Configをインポート

# Flaskアプリケーションのインスタンスを作成
app = create_app(Config)

if __name__ == '__main__':
    # '0.0.0.0' は、サーバーが利用可能な全てのネットワークインターフェースからの接続を受け入れることを意味します。
    app.run(host='0.0.0.0', port=5001, debug=True)
