# blogcms/pages.py
"""
画面 (ページコンポーネント) 用のレスポンスを組み立てるヘルパー。

表示は別のフロントエンドが担当するため、各ビューは
{"component": ..., "props": ..., "url": ...} 形式の JSON を返します。
"""

import logging
from flask import jsonify, request, session, redirect, url_for, flash, get_flashed_messages
from flask_login import current_user

logger = logging.getLogger(__name__)

ERRORS_SESSION_KEY = 'errors'


def shared_props():
    """全ページ共通のプロパティ (ログインユーザー、フラッシュメッセージ、前回のバリデーションエラー)"""
    user = None
    if current_user.is_authenticated:
        user = {'id': current_user.id, 'name': current_user.name, 'role': current_user.role}
    messages = {}
    for category, message in get_flashed_messages(with_categories=True):
        messages[category] = message
    return {
        'auth': {'user': user},
        'flash': messages,
        'errors': session.pop(ERRORS_SESSION_KEY, {}),
    }


def render_page(component, **props):
    payload = shared_props()
    payload.update(props)
    return jsonify({
        'component': component,
        'props': payload,
        'url': request.full_path.rstrip('?'),
    })


def redirect_back(fallback_endpoint, **values):
    """直前のページへ戻します。Referer がなければ fallback へ。"""
    return redirect(request.referrer or url_for(fallback_endpoint, **values))


def redirect_with_errors(form, fallback_endpoint, **values):
    """
    バリデーションに失敗したフォームのエラーをセッションに残して前のページへ戻します。
    データベースやストレージには何も書き込みません。
    """
    logger.warning(f"Form validation failed on {request.path}: {form.errors}")
    session[ERRORS_SESSION_KEY] = {field: list(messages) for field, messages in form.errors.items()}
    flash('The given data was invalid.', 'danger')
    return redirect_back(fallback_endpoint, **values)
