# blogcms/storage.py
"""
公開ストレージ (UPLOAD_FOLDER) へのファイル保存・削除を扱うモジュール。

保存したファイルは 'posts/<uuid>.<ext>' のような相対参照で表され、
この参照がそのまま Post.image に記録されます。
"""

import os
import uuid
import logging
from flask import current_app
from werkzeug.utils import secure_filename

from blogcms.exceptions import StorageError

logger = logging.getLogger(__name__)


def _root():
    return current_app.config['UPLOAD_FOLDER']


def path_for(reference):
    """参照から絶対パスを組み立てます。ストレージの外を指す参照は拒否します。"""
    root = os.path.abspath(_root())
    full_path = os.path.abspath(os.path.join(root, reference))
    if os.path.commonpath([root, full_path]) != root:
        raise StorageError(f'Reference escapes storage root: {reference}', reference)
    return full_path


def store(file_storage, directory):
    """
    アップロードされたファイルを directory 配下に一意な名前で保存し、参照を返します。
    """
    original_filename = secure_filename(file_storage.filename or '')
    extension = os.path.splitext(original_filename)[1].lower()
    reference = f"{directory}/{uuid.uuid4().hex}{extension}"
    full_path = path_for(reference)

    try:
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        file_storage.stream.seek(0)
        file_storage.save(full_path)
    except OSError as e:
        logger.error(f"Failed to store file {original_filename} as {reference}: {e}", exc_info=True)
        raise StorageError(f'Could not store {original_filename}', reference) from e

    logger.info(f"Stored file: {reference}")
    return reference


def exists(reference):
    if not reference:
        return False
    return os.path.isfile(path_for(reference))


def delete(reference):
    """ファイルを削除します。存在しない場合は False を返します。"""
    if not exists(reference):
        logger.warning(f"File not found for deletion: {reference}")
        return False
    try:
        os.remove(path_for(reference))
    except OSError as e:
        logger.error(f"Error deleting file {reference}: {e}", exc_info=True)
        raise StorageError(f'Could not delete {reference}', reference) from e
    logger.info(f"Deleted file: {reference}")
    return True


def replace(old_reference, file_storage, directory):
    """
    古いファイルを削除してから新しいファイルを保存し、新しい参照を返します。

    レコードの更新とはトランザクションを共有しません。
    - 古いファイルの削除後、新しいファイルの保存に失敗するとレコードは消えたファイルを指したままになります。
    - 新しいファイルの保存後、レコードの保存に失敗すると新しいファイルは参照されないまま残ります。
    """
    if old_reference and exists(old_reference):
        delete(old_reference)
    return store(file_storage, directory)


def public_url(reference):
    """参照を公開URLに変換します。参照がなければ None。"""
    if not reference:
        return None
    base = current_app.config['PUBLIC_STORAGE_URL'].rstrip('/')
    return f"{base}/{reference.lstrip('/')}"
