# blogcms/user/routes.py

from flask import request, current_app, flash, abort
from flask_login import current_user
from sqlalchemy.orm import selectinload

from blogcms.extensions import db
from blogcms.forms import CommentForm, DeleteForm
from blogcms.models import Post, Category, Comment
from blogcms.pages import render_page, redirect_back, redirect_with_errors
from blogcms.queries import build_post_query, paginate_posts, active_filters
from blogcms import serializers, services

from . import bp


def _identity():
    return current_user._get_current_object()


# --- 投稿一覧 (検索・カテゴリ絞り込み・並び替え) ---
@bp.route('/posts')
def posts_index():
    search = request.args.get('search', '')
    category = request.args.get('category', '')
    sort = request.args.get('sort', '')
    page = request.args.get('page', 1, type=int)

    query = build_post_query(search=search, category=category, sort=sort)
    pagination = paginate_posts(query, current_app.config['USER_POSTS_PER_PAGE'], page)
    categories = Category.query.order_by(Category.id).all()

    return render_page(
        'user/posts',
        posts=serializers.paginated(pagination, serializers.post_summary),
        categories=[serializers.category_option(c) for c in categories],
        filters=active_filters(request.args),
    )


# 投稿詳細ページ
@bp.route('/posts/<int:post_id>')
def posts_show(post_id):
    post = db.first_or_404(
        db.select(Post)
        .options(selectinload(Post.category), selectinload(Post.comments).selectinload(Comment.user))
        .where(Post.id == post_id),
        description=f'Post {post_id} not found.',
    )
    return render_page('user/posts/show', post=serializers.post_detail(post))


# --- コメント ---
@bp.route('/posts/<int:post_id>/comments', methods=['POST'])
def comments_store(post_id):
    form = CommentForm()
    if not form.validate_on_submit():
        return redirect_with_errors(form, 'user.posts_show', post_id=post_id)

    post = db.get_or_404(Post, post_id)
    services.create_comment(post, _identity(), form)
    flash('Comment added successfully.', 'success')
    return redirect_back('user.posts_show', post_id=post_id)


@bp.route('/posts/<int:post_id>/comments/<int:comment_id>', methods=['DELETE'])
def comments_destroy(post_id, comment_id):
    form = DeleteForm()
    if not form.validate_on_submit():
        return redirect_with_errors(form, 'user.posts_show', post_id=post_id)

    services.delete_comment(post_id, comment_id, _identity())
    flash('Comment deleted successfully.', 'success')
    return redirect_back('user.posts_show', post_id=post_id)


@bp.route('/posts/<int:post_id>/comments/<int:comment_id>', methods=['POST'])
def comments_method_override(post_id, comment_id):
    # フォームからの削除は POST + _method=DELETE で届きます
    if request.form.get('_method', '').upper() != 'DELETE':
        abort(405)
    return comments_destroy(post_id, comment_id)
