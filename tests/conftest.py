# tests/conftest.py
import sys
import os
import io
from datetime import datetime, timedelta

# プロジェクトのルートディレクトリをPythonのパスに追加
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from PIL import Image as PILImage

from blogcms import create_app
from blogcms.extensions import db
from blogcms.models import User, Post, Category, Comment
from blogcms.utils import slugify
from config import TestConfig


@pytest.fixture(scope='function')
def app(tmp_path):
    """テスト用Flaskアプリケーションのインスタンスを生成するフィクスチャ"""
    class _Config(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / 'public')

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """テストクライアントを生成するフィクスチャ"""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """CLIコマンドランナーを生成するフィクスチャ"""
    return app.test_cli_runner()


@pytest.fixture
def make_user(app):
    """ユーザーを作成して id を返すファクトリ"""
    counter = {'n': 0}

    def _make_user(name=None, role='user'):
        counter['n'] += 1
        name = name or f'user{counter["n"]}'
        with app.app_context():
            user = User(name=name, email=f'{name}-{counter["n"]}@example.com', role=role)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make_user


@pytest.fixture
def make_category(app):
    def _make_category(name):
        with app.app_context():
            category = Category(name=name)
            db.session.add(category)
            db.session.commit()
            return category.id
    return _make_category


@pytest.fixture
def make_post(app):
    """
    投稿を作成して id を返すファクトリ。
    age_minutes が大きいほど古い投稿になります。
    """
    def _make_post(title, category_id, content='本文', age_minutes=0, image=None):
        with app.app_context():
            post = Post(
                title=title,
                slug=slugify(title),
                content=content,
                category_id=category_id,
                image=image,
                created_at=datetime(2025, 1, 1, 12, 0, 0) - timedelta(minutes=age_minutes),
            )
            db.session.add(post)
            db.session.commit()
            return post.id
    return _make_post


@pytest.fixture
def make_comment(app):
    def _make_comment(post_id, user_id, content='コメント'):
        with app.app_context():
            comment = Comment(post_id=post_id, user_id=user_id, content=content)
            db.session.add(comment)
            db.session.commit()
            return comment.id
    return _make_comment


def _login(client, user_id):
    # Flask-Login がセッションから復元するキーを直接書き込みます
    with client.session_transaction() as sess:
        sess['_user_id'] = str(user_id)
        sess['_fresh'] = True


@pytest.fixture
def login_as(client):
    def _login_as(user_id):
        _login(client, user_id)
        return client
    return _login_as


@pytest.fixture
def admin_client(client, make_user):
    """ログイン済みの管理者クライアント"""
    _login(client, make_user('admin', role='admin'))
    return client


@pytest.fixture
def category_id(make_category):
    return make_category('General')


def image_bytes(color=(255, 0, 0), fmt='PNG', size=(8, 8)):
    """Pillow で小さな画像を生成します。"""
    buffer = io.BytesIO()
    PILImage.new('RGB', size, color).save(buffer, format=fmt)
    buffer.seek(0)
    return buffer


@pytest.fixture
def png():
    def _png(filename='photo.png', color=(255, 0, 0)):
        return (image_bytes(color), filename)
    return _png


def props(response):
    """ページレスポンスの props を取り出します。"""
    return response.get_json()['props']
