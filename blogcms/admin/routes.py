# blogcms/admin/routes.py

from flask import request, current_app, flash, redirect, url_for, abort

from blogcms.extensions import db
from blogcms.forms import PostForm, DeleteForm
from blogcms.models import Post, Category
from blogcms.pages import render_page, redirect_with_errors
from blogcms.queries import build_post_query, paginate_posts
from blogcms import serializers, services

from . import bp


# --- 投稿管理 ---

@bp.route('/posts', methods=['GET'])
def posts_index():
    """管理者の投稿一覧 (新しい順、1ページ10件)"""
    page = request.args.get('page', 1, type=int)
    query = build_post_query(with_comment_users=True)
    pagination = paginate_posts(query, current_app.config['ADMIN_POSTS_PER_PAGE'], page)
    categories = Category.query.order_by(Category.id).all()

    return render_page(
        'admin/posts',
        posts=serializers.paginated(pagination, serializers.admin_post),
        categories=[serializers.category_option(c) for c in categories],
    )


@bp.route('/posts', methods=['POST'])
def posts_store():
    form = PostForm()
    if not form.validate_on_submit():
        return redirect_with_errors(form, 'admin.posts_index')

    services.create_post(form)
    flash('Post created successfully.', 'success')
    return redirect(url_for('admin.posts_index'))


@bp.route('/posts/<int:post_id>', methods=['PUT', 'PATCH'])
def posts_update(post_id):
    post = db.get_or_404(Post, post_id)
    form = PostForm()
    if not form.validate_on_submit():
        return redirect_with_errors(form, 'admin.posts_index')

    services.update_post(post, form)
    flash('Post updated successfully.', 'success')
    return redirect(url_for('admin.posts_index'))


@bp.route('/posts/<int:post_id>', methods=['DELETE'])
def posts_destroy(post_id):
    post = db.get_or_404(Post, post_id)
    form = DeleteForm()
    if not form.validate_on_submit():
        return redirect_with_errors(form, 'admin.posts_index')

    services.delete_post(post)
    flash('Post deleted successfully.', 'success')
    return redirect(url_for('admin.posts_index'))


@bp.route('/posts/<int:post_id>', methods=['POST'])
def posts_method_override(post_id):
    """
    ブラウザのフォーム (multipart) は PUT/DELETE を送れないため、
    POST の _method フィールドで更新・削除に振り分けます。
    """
    method = request.form.get('_method', '').upper()
    if method in ('PUT', 'PATCH'):
        return posts_update(post_id)
    if method == 'DELETE':
        return posts_destroy(post_id)
    abort(405)
