# blogcms/serializers.py
"""
モデルを画面 (ページコンポーネント) に渡す形へ変換する関数群。
保存されている形とは別に、必要なフィールドだけを入れ子の dict で返します。
"""

import math
import pytz
from flask import request, url_for

from blogcms import storage

PREVIOUS_LABEL = '&laquo; Previous'
NEXT_LABEL = 'Next &raquo;'
ELLIPSIS = '...'


def isoformat(value):
    """UTC の ISO-8601 文字列にします。例: '2025-01-02T03:04:05.000000Z'"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(pytz.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def format_datetime(value):
    """'YYYY-MM-DD HH:MM:SS' 形式。None はそのまま返します。"""
    if value is None:
        return None
    return value.strftime('%Y-%m-%d %H:%M:%S')


def image_url(reference):
    return storage.public_url(reference)


def category_option(category):
    return {'id': category.id, 'name': category.name}


def user_summary(user):
    return {'id': user.id, 'name': user.name}


def post_summary(post):
    """一覧用の投稿"""
    return {
        'id': post.id,
        'title': post.title or '',
        'content': post.content or '',
        'category': category_option(post.category) if post.category else None,
        'comments_count': post.comments_count or 0,
        'created_at': isoformat(post.created_at) or '',
    }


def comment_detail(comment):
    return {
        'id': comment.id,
        'content': comment.content,
        'user': user_summary(comment.user),
        'created_at': isoformat(comment.created_at),
    }


def post_detail(post):
    """詳細画面用の投稿。コメントを古い順にすべて含めます。"""
    data = post_summary(post)
    data['comments'] = [comment_detail(c) for c in post.comments]
    return data


def admin_post(post):
    """管理画面の一覧用。編集フォームに必要な生の値と画像URLを追加します。"""
    data = post_summary(post)
    data.update({
        'slug': post.slug,
        'category_id': post.category_id,
        'published_at': format_datetime(post.published_at),
        'image': post.image,
        'image_url': image_url(post.image),
        'comments': [comment_detail(c) for c in post.comments],
    })
    return data


def _page_url(page):
    args = request.args.to_dict()
    args['page'] = page
    return url_for(request.endpoint, **(request.view_args or {}), **args)


def pagination_links(pagination, last_page):
    """
    前へ、ページ番号、次へ のリンク。最初と最後、現在ページの前後2ページを残し、
    間が空く場所は '...' (url なし) になります。
    """
    current_page = pagination.page
    links = [{
        'url': _page_url(current_page - 1) if current_page > 1 else None,
        'label': PREVIOUS_LABEL,
        'active': False,
    }]
    numbers = list(pagination.iter_pages(left_edge=1, left_current=2, right_current=3, right_edge=1))
    if not numbers:
        # 投稿がなくても last_page は 1 なので、1ページ目のリンクを出します
        numbers = [1]
    for number in numbers:
        if number is None:
            links.append({'url': None, 'label': ELLIPSIS, 'active': False})
        else:
            links.append({'url': _page_url(number), 'label': str(number), 'active': number == current_page})
    links.append({
        'url': _page_url(current_page + 1) if current_page < last_page else None,
        'label': NEXT_LABEL,
        'active': False,
    })
    return links


def paginated(pagination, shaper):
    """
    Flask-SQLAlchemy の Pagination をページ付きレスポンスにします。
    last_page は ceil(total / per_page) (投稿がなくても 1)。
    """
    total = pagination.total or 0
    per_page = pagination.per_page
    current_page = pagination.page
    last_page = max(int(math.ceil(total / per_page)), 1)
    items = [shaper(item) for item in pagination.items]
    first_item = (current_page - 1) * per_page + 1 if items else None
    return {
        'data': items,
        'current_page': current_page,
        'last_page': last_page,
        'per_page': per_page,
        'total': total,
        'from': first_item,
        'to': first_item + len(items) - 1 if items else None,
        'path': request.base_url,
        'first_page_url': _page_url(1),
        'last_page_url': _page_url(last_page),
        'prev_page_url': _page_url(current_page - 1) if current_page > 1 else None,
        'next_page_url': _page_url(current_page + 1) if current_page < last_page else None,
        'links': pagination_links(pagination, last_page),
    }
