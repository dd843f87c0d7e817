"""Filename extension -> content category."""
from app.models.file import Category

_CATEGORY_EXTS = {
    Category.IMAGE: {"jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "ico"},
    Category.VIDEO: {"mp4", "webm", "mov", "avi", "mkv", "m4v"},
    Category.AUDIO: {"mp3", "wav", "m4a", "aac", "flac", "ogg"},
    Category.TEXT: {"txt", "md", "json", "xml", "csv", "log", "yml", "yaml", "toml", "ini"},
    Category.CODE: {
        "js", "ts", "html", "css", "rs", "py", "java", "c", "cpp",
        "h", "hpp", "go", "rb", "php", "sh", "bash",
    },
    Category.PDF: {"pdf"},
    Category.ARCHIVE: {"zip", "rar", "7z", "tar", "gz", "bz2"},
    Category.DOCUMENT: {"doc", "docx", "xls", "xlsx", "ppt", "pptx"},
}

EXT_TO_CATEGORY = {ext: category for category, exts in _CATEGORY_EXTS.items() for ext in exts}

NOT_PREVIEWABLE = {Category.ARCHIVE, Category.DOCUMENT, Category.UNKNOWN}

# the preview endpoint only renders these as text
TEXT_CATEGORIES = {Category.TEXT, Category.CODE}


def extension(filename: str) -> str:
    head, dot, ext = filename.rpartition(".")
    if not dot:
        return ""
    return ext.lower()


def classify(filename: str) -> tuple[Category, bool]:
    """Return ``(category, previewable)`` for a display filename."""
    category = EXT_TO_CATEGORY.get(extension(filename), Category.UNKNOWN)
    return category, category not in NOT_PREVIEWABLE
