# blogcms/utils.py

import re
import unicodedata
import pytz


def slugify(text):
    """
    タイトルからURL用のスラッグを生成します。
    例: 'Hello World!' -> 'hello-world'
    重複のチェックは行いません。
    """
    text = unicodedata.normalize('NFKD', text or '').encode('ascii', 'ignore').decode('ascii')
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_-]+', '-', text)
    text = re.sub(r'^-+|-+$', '', text)
    return text


def to_utc_naive(value):
    """タイムゾーン付きの datetime を UTC の naive datetime に揃えます。"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(pytz.utc).replace(tzinfo=None)


def parse_int(value, default=0):
    """
    数値として解釈できない値は default を返します。
    '3' -> 3, 'abc' -> 0
    """
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
