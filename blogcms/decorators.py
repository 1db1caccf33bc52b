# blogcms/decorators.py

import logging
from flask import redirect, url_for, request
from flask_login import current_user

logger = logging.getLogger(__name__)

ADMIN_HOME = 'admin.posts_index'
USER_HOME = 'user.posts_index'


def resolve_role_redirect(identity, required_role):
    """
    リクエストを通すか、どこへリダイレクトするかを決めます。
    :param identity: 認証済みユーザー (未ログインなら None)
    :param required_role: ルートグループに必要なロール名
    :return: 通す場合は None、そうでなければリダイレクト先のエンドポイント名

    ロールが一致しない場合、要求されたルートに関係なく
    admin は管理者の投稿一覧へ、それ以外 (未ログインを含む) はユーザーの投稿一覧へ送られます。
    """
    role = getattr(identity, 'role', None) if identity is not None else None
    if identity is None or role != required_role:
        if role == 'admin':
            return ADMIN_HOME
        return USER_HOME
    return None


def _current_identity():
    return current_user._get_current_object() if current_user.is_authenticated else None


def _gate(role):
    identity = _current_identity()
    target = resolve_role_redirect(identity, role)
    if target is None:
        return None
    if target == request.endpoint:
        # 送り先が今のページ自身 (未ログインや未知のロールでユーザー一覧を開いた場合)。
        # リダイレクトするとループになるので、そのまま表示させます。
        logger.info(f"Role mismatch on {request.path} for user {getattr(identity, 'id', 'anonymous')} "
                    f"({getattr(identity, 'role', None)}); already at {target}, not redirecting")
        return None
    logger.warning(f"ACCESS_DENIED: User {getattr(identity, 'id', 'anonymous')} "
                   f"({getattr(identity, 'role', None)}) attempted to access {request.path}. "
                   f"Required: {role}. Redirecting to {target}")
    return redirect(url_for(target))


def gate_blueprint(bp, role):
    """
    ブループリント (ルートグループ) 全体にロールのチェックを掛けます。
    未ログインのリクエストもエラーにはせず、resolve_role_redirect の送り先へリダイレクトします。
    """
    @bp.before_request
    def check_role():
        return _gate(role)
    return check_role
