# blogcms/routes/home.py

from flask import Blueprint, current_app, jsonify, redirect, request, send_from_directory, url_for
from flask_login import current_user

from blogcms.decorators import ADMIN_HOME, USER_HOME
from blogcms.exceptions import StorageError
from blogcms.extensions import db

# ブループリントの定義
home_bp = Blueprint('home', __name__)


# トップページ: ロールに応じた投稿一覧へ
@home_bp.route('/')
def index():
    if current_user.is_authenticated and current_user.role == 'admin':
        return redirect(url_for(ADMIN_HOME))
    return redirect(url_for(USER_HOME))


# 公開ストレージのファイル配信 (image_url の参照先)
@home_bp.route('/storage/<path:filename>')
def storage_file(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)


# その他の共通処理（エラーハンドリング）
@home_bp.app_errorhandler(404)
def page_not_found(e):
    current_app.logger.warning(f"PAGE_NOT_FOUND: {request.path}")
    return jsonify({'message': getattr(e, 'description', None) or 'Not Found'}), 404


@home_bp.app_errorhandler(StorageError)
def storage_error(e):
    db.session.rollback()
    current_app.logger.error(f"STORAGE_ERROR: {request.path}: {e} (reference={e.reference})", exc_info=e)
    return jsonify({'message': 'The file could not be saved.'}), 500


@home_bp.app_errorhandler(500)
def internal_server_error(e):
    db.session.rollback()
    current_app.logger.exception(f"INTERNAL_SERVER_ERROR: {e}")
    return jsonify({'message': 'Server Error'}), 500
