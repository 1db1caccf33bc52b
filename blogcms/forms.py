# blogcms/forms.py

from flask import current_app
from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileAllowed, FileSize
from wtforms import StringField, TextAreaField, DateTimeField
from wtforms.validators import DataRequired, Length, Optional, ValidationError
from wtforms_sqlalchemy.fields import QuerySelectField
from PIL import Image as PILImage, UnidentifiedImageError

from blogcms.models import Category
from blogcms.utils import to_utc_naive

# published_at として受け付ける日時の書式
PUBLISHED_AT_FORMATS = [
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M',
    '%Y-%m-%dT%H:%M:%S%z',
    '%Y-%m-%d',
]

IMAGE_EXTENSIONS = ['jpg', 'jpeg', 'png', 'bmp', 'gif', 'webp']


def image_file(form, field):
    """Pillow で画像として読み込めないファイルを拒否します。"""
    if not field.data:
        return
    stream = field.data.stream
    try:
        stream.seek(0)
        with PILImage.open(stream) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValidationError('The image must be an image.') from e
    finally:
        stream.seek(0)


def image_size_limit(form, field):
    max_kb = current_app.config.get('MAX_IMAGE_SIZE_KB', 5000)
    FileSize(max_size=max_kb * 1024,
             message=f'The image may not be greater than {max_kb} kilobytes.')(form, field)


class DeleteForm(FlaskForm):
    """汎用的な削除確認フォーム（CSRFトークンのみ）"""


class PostForm(FlaskForm):
    """投稿作成・編集フォーム"""
    title = StringField('Title', validators=[DataRequired(message='The title field is required.'),
                                             Length(max=255)])
    content = TextAreaField('Content', validators=[DataRequired(message='The content field is required.'),
                                                   Length(max=15000)])
    # 存在しないカテゴリIDは 'Not a valid choice.' になります
    category_id = QuerySelectField(
        'Category',
        query_factory=lambda: Category.query.order_by(Category.name).all(),
        get_pk=lambda c: str(c.id),
        get_label=lambda c: c.name,
        allow_blank=False,
    )
    published_at = DateTimeField('Published at', format=PUBLISHED_AT_FORMATS, validators=[Optional()])
    image = FileField('Image', validators=[
        Optional(),
        FileAllowed(IMAGE_EXTENSIONS, 'The image must be a file of type: ' + ', '.join(IMAGE_EXTENSIONS) + '.'),
        image_size_limit,
        image_file,
    ])

    def normalized_published_at(self):
        """published_at を UTC の naive datetime (秒単位) に揃えて返します。"""
        value = to_utc_naive(self.published_at.data)
        if value is None:
            return None
        return value.replace(microsecond=0)


class CommentForm(FlaskForm):
    """コメント投稿フォーム"""
    content = TextAreaField('Comment', validators=[DataRequired(message='The content field is required.'),
                                                   Length(max=1000)])
