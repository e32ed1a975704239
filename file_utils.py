import enum
import logging
from pathlib import Path, PurePath
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from path_utils import ValidatedPath

logger = logging.getLogger("mdwrangler.files")


class FileCategory(enum.Enum):
    MARKDOWN = "markdown"
    IMAGE = "image"
    IFRAME_SAFE = "iframe_safe"
    EXECUTABLE = "executable"
    UNKNOWN = "unknown"

    @property
    def is_servable(self) -> bool:
        return self in (FileCategory.MARKDOWN, FileCategory.IMAGE, FileCategory.IFRAME_SAFE)


# ----------------------------
# EXTENSION TAXONOMY
# ----------------------------
# Order is precedence: executables first so nothing can shadow them.
EXTS_EXECUTABLE = frozenset(
    {"exe", "bat", "cmd", "com", "scr", "msi", "sh", "ps1", "vbs", "app", "dmg", "pkg", "deb", "rpm"}
)
EXTS_MARKDOWN = frozenset({"md", "markdown"})
EXTS_IMAGE = frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "tiff", "tif"})
EXTS_IFRAME_SAFE = frozenset(
    {
        "txt", "html", "htm", "css", "js", "json", "xml", "pdf", "csv",
        "log", "yml", "yaml", "toml", "ini", "conf", "cfg",
    }
)

CATEGORY_RULES = (
    (EXTS_EXECUTABLE, FileCategory.EXECUTABLE),
    (EXTS_MARKDOWN, FileCategory.MARKDOWN),
    (EXTS_IMAGE, FileCategory.IMAGE),
    (EXTS_IFRAME_SAFE, FileCategory.IFRAME_SAFE),
)

IMAGE_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "tif": "image/tiff",
}

IFRAME_MIME_TYPES = {
    "txt": "text/plain; charset=utf-8",
    "log": "text/plain; charset=utf-8",
    "html": "text/html; charset=utf-8",
    "htm": "text/html; charset=utf-8",
    "css": "text/css; charset=utf-8",
    "js": "application/javascript; charset=utf-8",
    "json": "application/json; charset=utf-8",
    "xml": "application/xml; charset=utf-8",
    "pdf": "application/pdf",
    "csv": "text/csv; charset=utf-8",
    "yml": "text/yaml; charset=utf-8",
    "yaml": "text/yaml; charset=utf-8",
}

TYPE_DESCRIPTIONS = {
    "txt": "Text file",
    "html": "HTML document",
    "htm": "HTML document",
    "css": "CSS stylesheet",
    "js": "JavaScript file",
    "json": "JSON data",
    "xml": "XML document",
    "pdf": "PDF document",
    "csv": "CSV data",
    "log": "Log file",
    "yml": "YAML configuration",
    "yaml": "YAML configuration",
    "toml": "TOML configuration",
    "ini": "Configuration file",
    "conf": "Configuration file",
    "cfg": "Configuration file",
}

PathLike = Union[str, PurePath, ValidatedPath]


def extension_of(p: PathLike) -> str:
    """Final extension, lower-cased, without the dot ("" if none)."""
    if isinstance(p, ValidatedPath):
        p = p.path
    return PurePath(str(p).replace("\\", "/")).suffix.lower().lstrip(".")


def classify(p: PathLike) -> FileCategory:
    ext = extension_of(p)
    for exts, category in CATEGORY_RULES:
        if ext in exts:
            return category
    return FileCategory.UNKNOWN


def is_markdown(p: PathLike) -> bool:
    return classify(p) is FileCategory.MARKDOWN


def is_image(p: PathLike) -> bool:
    return classify(p) is FileCategory.IMAGE


def is_iframe_safe(p: PathLike) -> bool:
    return classify(p) is FileCategory.IFRAME_SAFE


def is_executable(p: PathLike) -> bool:
    return classify(p) is FileCategory.EXECUTABLE


def image_mime_type(p: PathLike) -> str:
    return IMAGE_MIME_TYPES.get(extension_of(p), "application/octet-stream")


def iframe_mime_type(p: PathLike) -> str:
    return IFRAME_MIME_TYPES.get(extension_of(p), "text/plain; charset=utf-8")


def type_description(p: PathLike) -> str:
    category = classify(p)
    if category is FileCategory.EXECUTABLE:
        return "Executable file"
    if category is FileCategory.MARKDOWN:
        return "Markdown document"
    if category is FileCategory.IMAGE:
        return f"{extension_of(p).upper()} image"
    return TYPE_DESCRIPTIONS.get(extension_of(p), "Unknown file type")


def format_size(num: int) -> str:
    if num < 1024:
        return f"{num} B"
    size = float(num)
    for unit in ["KB", "MB", "GB", "TB"]:
        size /= 1024
        if size < 1024 or unit == "TB":
            return f"{size:.1f} {unit}"


def image_dimensions(fpath: Path) -> Optional[Tuple[int, int]]:
    """(width, height) if Pillow can identify the image, else None."""
    try:
        with Image.open(fpath) as im:
            return im.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.debug("Cannot read image dimensions for %s: %s", fpath.name, e)
        return None
