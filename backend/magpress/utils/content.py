"""
文章内容派生工具
由标题/正文计算 slug、摘要和预计阅读时间，纯函数，无副作用
"""

import math
import re
import unicodedata

ELLIPSIS = "..."

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def derive_slug(title: str) -> str:
    """
    将标题转换为 URL 友好的 slug

    去除变音符号并转为小写，连续的非字母数字字符替换为单个连字符，
    去掉首尾连字符。空标题返回空字符串。
    """
    text = unicodedata.normalize("NFKD", title or "")
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    text = _NON_ALNUM_RE.sub("-", text)
    return text.strip("-")


def derive_excerpt(content: str, max_length: int = 150) -> str:
    """截取正文前 max_length 个字符作为摘要，发生截断时追加省略号"""
    content = content or ""
    if len(content) <= max_length:
        return content
    return content[:max_length] + ELLIPSIS


def count_words(content: str) -> int:
    """按空白切分统计词数"""
    return len((content or "").split())


def derive_read_time(content: str, words_per_minute: int = 200) -> int:
    """
    预计阅读分钟数：词数 / 每分钟词数，向上取整，最少 1 分钟
    """
    words = count_words(content)
    return max(1, math.ceil(words / words_per_minute))


def disambiguate_slug(base: str, token: object) -> str:
    """在 slug 后追加消歧后缀"""
    return f"{base}-{token}"


def is_valid_slug(value: str) -> bool:
    return bool(_SLUG_RE.match(value or ""))
