# blogcms/queries.py
"""
投稿一覧のクエリを組み立てるモジュール。

検索 (タイトルの部分一致、大文字小文字を区別しない)、カテゴリ絞り込み、
並び替え ('latest' / 'most_commented') を組み合わせて Post のクエリを返します。
"""

from sqlalchemy.orm import selectinload

from blogcms.models import Post, Comment
from blogcms.utils import parse_int

SORT_LATEST = 'latest'
SORT_MOST_COMMENTED = 'most_commented'
ALL_CATEGORIES = 'all'

DEFAULT_FILTERS = {
    'search': '',
    'category': ALL_CATEGORIES,
    'sort': SORT_LATEST,
}


def build_post_query(search=None, category=None, sort=None, with_comment_users=False):
    """
    :param search: タイトルに含まれる文字列 (空なら絞り込まない)
    :param category: カテゴリID、または 'all'
    :param sort: 'most_commented' ならコメント数の多い順、それ以外は新しい順
    :param with_comment_users: コメントの投稿者も一緒に読み込むか
    """
    comments_loader = selectinload(Post.comments)
    if with_comment_users:
        comments_loader = comments_loader.selectinload(Comment.user)

    query = Post.query.options(selectinload(Post.category), comments_loader)

    # 空文字と '0' は検索なしとして扱います
    if search and search != '0':
        query = query.filter(Post.title.icontains(search, autoescape=True))

    if category and category != ALL_CATEGORIES:
        # 数値でないカテゴリ指定は 0 (該当なし) として扱います
        query = query.filter(Post.category_id == parse_int(category))

    if sort == SORT_MOST_COMMENTED:
        query = query.order_by(Post.comments_count.desc(), Post.created_at.desc(), Post.id.desc())
    else:
        query = query.order_by(Post.created_at.desc(), Post.id.desc())

    return query


def paginate_posts(query, per_page, page=1):
    """
    ページ番号でページ分割します。範囲外のページは空のページになります (404 にはしません)。
    """
    page = page if page and page > 0 else 1
    return query.paginate(page=page, per_page=per_page, error_out=False, count=True)


def active_filters(args):
    """
    リクエストの検索条件を既定値で補って返します。
    空の値は既定値として扱います。
    """
    filters = dict(DEFAULT_FILTERS)
    for key in DEFAULT_FILTERS:
        value = args.get(key)
        if value:
            filters[key] = value
    return filters
