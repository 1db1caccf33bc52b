# blogcms/services.py
"""
投稿とコメントの作成・更新・削除。

フォームのバリデーションは呼び出し側 (ビュー) で済ませてから呼びます。
ログインユーザーはグローバルから取らず、identity 引数で受け取ります。
"""

import logging
from flask import current_app

from blogcms import storage
from blogcms.extensions import db
from blogcms.models import Post, Comment
from blogcms.utils import slugify

logger = logging.getLogger(__name__)


def _posts_dir():
    return current_app.config['POSTS_UPLOAD_SUBDIR']


def _apply_form(post, form):
    post.title = form.title.data
    post.content = form.content.data
    post.category_id = form.category_id.data.id
    post.published_at = form.normalized_published_at()
    # タイトルが変わらなくても毎回再計算します
    post.slug = slugify(form.title.data)


def create_post(form):
    """
    新しい投稿を保存します。画像があれば先にストレージへ保存します。
    レコードの保存に失敗した場合、保存済みの画像は残ります。
    """
    post = Post()
    _apply_form(post, form)
    if form.image.data:
        post.image = storage.store(form.image.data, _posts_dir())
    db.session.add(post)
    db.session.commit()
    logger.info(f"Post created: id={post.id} slug={post.slug} image={post.image}")
    return post


def update_post(post, form):
    """
    投稿を更新します。新しい画像があれば古い画像ファイルを削除してから保存します。
    """
    _apply_form(post, form)
    if form.image.data:
        old_image = post.image
        post.image = storage.replace(old_image, form.image.data, _posts_dir())
        logger.info(f"Post {post.id} image replaced: {old_image} -> {post.image}")
    db.session.commit()
    logger.info(f"Post updated: id={post.id} slug={post.slug}")
    return post


def delete_post(post):
    """
    投稿を削除します (コメントも一緒に削除されます)。
    画像ファイルは DELETE_POST_IMAGES が有効な場合だけ削除します。
    """
    image = post.image
    post_id = post.id
    db.session.delete(post)
    db.session.commit()
    logger.info(f"Post deleted: id={post_id}")

    if image:
        if current_app.config.get('DELETE_POST_IMAGES'):
            storage.delete(image)
        else:
            logger.warning(f"Image {image} of deleted post {post_id} was left in storage.")


def create_comment(post, identity, form):
    comment = Comment(post_id=post.id, user_id=identity.id, content=form.content.data)
    db.session.add(comment)
    db.session.commit()
    logger.info(f"User {identity.id} commented on post {post.id}: comment={comment.id}")
    return comment


def find_own_comment_or_404(post_id, comment_id, identity):
    """
    投稿ID・コメントID・投稿者がすべて一致するコメントを返します。
    どれか一つでも一致しなければ 404 (他人のコメントも「見つからない」扱い)。
    """
    return Comment.query.filter_by(
        post_id=post_id, id=comment_id, user_id=identity.id
    ).first_or_404()


def delete_comment(post_id, comment_id, identity):
    comment = find_own_comment_or_404(post_id, comment_id, identity)
    db.session.delete(comment)
    db.session.commit()
    logger.info(f"User {identity.id} deleted comment {comment_id} on post {post_id}")
