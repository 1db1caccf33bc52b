# blogcms/cli.py

import click
from flask.cli import with_appcontext

from blogcms.extensions import db
from blogcms.models import Category, User

DEFAULT_CATEGORIES = ('News', 'Technology', 'Lifestyle')


@click.group()
def init():
    """アプリケーションの初期化と管理コマンド."""
    pass


@init.command("create-db")
@with_appcontext
def create_db():
    """テーブルを作成します (開発用。本番では flask db upgrade を使ってください)。"""
    db.create_all()
    click.echo("データベースのテーブルを作成しました。")


@init.command("categories")
@click.argument('names', nargs=-1)
@with_appcontext
def init_categories(names):
    """カテゴリを作成します。既にあるものはスキップします。"""
    created = 0
    for name in names or DEFAULT_CATEGORIES:
        if Category.query.filter_by(name=name).first():
            click.echo(f"  - '{name}' は既に存在します。")
            continue
        db.session.add(Category(name=name))
        created += 1
        click.echo(f"  - Added '{name}'.")
    db.session.commit()
    click.echo(f"{created} 件のカテゴリを作成しました。")


@init.command("user")
@click.option('--name', required=True, help='ユーザー名.')
@click.option('--email', required=True, help='メールアドレス.')
@click.option('--role', type=click.Choice(['admin', 'user']), default='user', show_default=True, help='ロール.')
@with_appcontext
def init_user(name, email, role):
    """ユーザーを作成します。"""
    if User.query.filter_by(email=email).first():
        click.echo(f"ユーザー '{email}' は既に存在します。作成をスキップします。", err=True)
        return

    try:
        user = User(name=name, email=email, role=role)
        db.session.add(user)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        click.echo(f"ERROR: ユーザーの作成に失敗しました: {e}", err=True)
        raise click.Abort() from e
    click.echo(f"ユーザー '{name}' ({role}) を作成しました。id={user.id}")
