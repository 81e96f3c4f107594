"""
表单校验工具
"""
import re
from html import unescape
from typing import List, Optional

from app.core.config import Settings
from app.services.uploads import UploadedFile

_TAG_RE = re.compile(r"<[^>]+>")
_IMG_SRC_RE = re.compile(r'<img[^>]+src="([^">]+)"')


def strip_html(html: str) -> str:
    """去掉HTML标签，保留文本"""
    return unescape(_TAG_RE.sub(" ", html or ""))


def count_words(text: str) -> int:
    """统计纯文本单词数"""
    return len([word for word in (text or "").split() if word])


def count_html_words(html: str) -> int:
    """统计富文本内容的单词数"""
    return count_words(strip_html(html))


def extract_storage_images(html: str) -> List[str]:
    """
    提取正文中上传到文件存储的图片地址

    base64 或外部链接的图片不计入
    """
    return [
        src for src in _IMG_SRC_RE.findall(html or "")
        if "/storage/buckets/" in src and "/view?project=" in src
    ]


def validate_post_fields(
    settings: Settings,
    title: str,
    description: str,
    content: str,
    category_id: str,
) -> Optional[str]:
    """
    校验文章表单，返回第一条错误信息，全部通过时返回None
    """
    if not title.strip():
        return "Title is required"
    if not description.strip():
        return "Description is required"
    if not content.strip():
        return "Content is required"
    if not category_id:
        return "Category is required"

    title_length = len(title.strip())
    if title_length < settings.TITLE_MIN_LENGTH:
        return f"Title must be at least {settings.TITLE_MIN_LENGTH} characters"
    if title_length > settings.TITLE_MAX_LENGTH:
        return f"Title must be less than {settings.TITLE_MAX_LENGTH} characters"

    description_words = count_words(description)
    if description_words < settings.DESCRIPTION_MIN_WORDS:
        return f"Description must have at least {settings.DESCRIPTION_MIN_WORDS} words"
    if description_words > settings.DESCRIPTION_MAX_WORDS:
        return f"Description must be less than {settings.DESCRIPTION_MAX_WORDS} words"

    content_words = count_html_words(content)
    if content_words < settings.CONTENT_MIN_WORDS:
        return f"Content must have at least {settings.CONTENT_MIN_WORDS} words"
    if content_words > settings.CONTENT_MAX_WORDS:
        return f"Content must be less than {settings.CONTENT_MAX_WORDS} words"
    return None


def validate_image(settings: Settings, upload: Optional[UploadedFile]) -> Optional[str]:
    """校验图片类型与大小，未上传时视为通过"""
    if upload is None or upload.size == 0:
        return None
    if upload.content_type not in settings.IMAGE_TYPES:
        return "Invalid file type. Please upload JPEG, PNG, WebP, or GIF images only."
    if upload.size > settings.IMAGE_MAX_BYTES:
        limit_mb = settings.IMAGE_MAX_BYTES // (1024 * 1024)
        return f"Image size too large. Please upload images smaller than {limit_mb}MB."
    return None
