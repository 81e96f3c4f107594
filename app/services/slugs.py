"""
Slug生成与校验
"""
import random
import re

SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
SLUG_BASE_MAX_LENGTH = 94  # 为 "-123456" 留出7个字符
FALLBACK_BASE = "post"
SLUG_MAX_LENGTH = SLUG_BASE_MAX_LENGTH + 7


def slugify(title: str) -> str:
    """
    把标题转换为slug主体（不带后缀）
    """
    slug = (title or "").lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug[:SLUG_BASE_MAX_LENGTH].rstrip("-")


def random_suffix() -> str:
    """6位随机数字（100000-999999）"""
    return str(random.randint(100000, 999999))


def derive_slug(title: str) -> str:
    """
    由标题生成带随机后缀的slug

    每次调用都会生成新的后缀；唯一性最终由存储层的唯一约束保证
    """
    base = slugify(title) or FALLBACK_BASE
    return f"{base}-{random_suffix()}"


def is_valid_slug(slug: str) -> bool:
    return bool(slug) and len(slug) <= SLUG_MAX_LENGTH and SLUG_RE.match(slug) is not None
