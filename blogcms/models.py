# blogcms/models.py

from datetime import datetime
import pytz
from flask_login import UserMixin
from sqlalchemy.orm import relationship, column_property
from blogcms.extensions import db


def utcnow():
    return datetime.now(pytz.utc)


class User(UserMixin, db.Model):
    """
    アプリケーションのユーザーを表します。
    role が 'admin' のユーザーだけが投稿を管理でき、それ以外は閲覧とコメントのみ行えます。
    """
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    role = db.Column(db.String(32), nullable=False, default='user')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    comments = relationship('Comment', back_populates='user', cascade='all, delete-orphan')

    @property
    def is_admin(self):
        return self.role == 'admin'

    def __repr__(self):
        return f'<User {self.name} ({self.role})>'


class Category(db.Model):
    """
    投稿を整理するためのカテゴリ。このアプリケーションからは読み取り専用です。
    """
    __tablename__ = 'category'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    posts = relationship('Post', back_populates='category')

    def __repr__(self):
        return f'<Category {self.name}>'


class Post(db.Model):
    """
    ブログ投稿を表します。
    slug は作成・更新のたびにタイトルから再計算され、一意性は保証されません。
    image は公開ストレージ内の参照 (例: 'posts/<uuid>.png') です。
    """
    __tablename__ = 'post'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey('category.id'), nullable=False)
    published_at = db.Column(db.DateTime, nullable=True)
    image = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    category = relationship('Category', back_populates='posts')
    # 投稿を削除するとコメントも削除されます
    comments = relationship('Comment', back_populates='post', order_by='Comment.id',
                            cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Post {self.title}>'


class Comment(db.Model):
    """
    ユーザーがブログ投稿に対して行ったコメントを表します。
    """
    __tablename__ = 'comment'
    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False)
    post_id = db.Column(db.Integer, db.ForeignKey('post.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    post = relationship('Post', back_populates='comments')
    user = relationship('User', back_populates='comments')

    def __repr__(self):
        return f'<Comment {self.id} on Post {self.post_id}>'


# 投稿ごとのコメント数 (相関サブクエリ)。一覧の並び替えにも使います。
Post.comments_count = column_property(
    db.select(db.func.count(Comment.id))
    .where(Comment.post_id == Post.id)
    .correlate_except(Comment)
    .scalar_subquery()
)
