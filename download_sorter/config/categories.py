"""
Category Definitions
====================

Built-in extension to category-folder mapping used to seed every rule table.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union


class FileCategory(Enum):
    """Destination folders used by the built-in rules."""
    DOCUMENTS = "Documents"
    SPREADSHEETS = "Spreadsheets"
    INSTALLERS = "Installers"
    ZIP_FILES = "ZIP Files"
    IMAGES = "Images"
    GIFS = "GIFs"
    VIDEOS = "Videos"
    AUDIO = "Audio"
    WEB_DOWNLOADS = "WebDownloads"
    BAMBU_STUDIO = "BambuStudio"


DEFAULT_RULES: Dict[str, str] = {
    ".pdf": FileCategory.DOCUMENTS.value,
    ".drawio": FileCategory.DOCUMENTS.value,
    ".pptx": FileCategory.DOCUMENTS.value,
    ".docx": FileCategory.DOCUMENTS.value,
    ".xlsx": FileCategory.SPREADSHEETS.value,
    ".csv": FileCategory.SPREADSHEETS.value,
    ".exe": FileCategory.INSTALLERS.value,
    ".msi": FileCategory.INSTALLERS.value,
    ".iso": FileCategory.INSTALLERS.value,
    ".zip": FileCategory.ZIP_FILES.value,
    ".jpg": FileCategory.IMAGES.value,
    ".jpeg": FileCategory.IMAGES.value,
    ".png": FileCategory.IMAGES.value,
    ".gif": FileCategory.GIFS.value,
    ".mp4": FileCategory.VIDEOS.value,
    ".mp3": FileCategory.AUDIO.value,
    ".wav": FileCategory.AUDIO.value,
    ".m4a": FileCategory.AUDIO.value,
    ".html": FileCategory.WEB_DOWNLOADS.value,
    ".htm": FileCategory.WEB_DOWNLOADS.value,
    ".json": FileCategory.WEB_DOWNLOADS.value,
    ".3mf": FileCategory.BAMBU_STUDIO.value,
}


def normalize_extension(extension: Optional[str]) -> str:
    """Return the canonical rule key for an extension.

    Trims whitespace, lowercases and adds a missing leading dot, so
    ``"PDF"``, ``".Pdf"`` and ``" .pdf "`` all become ``".pdf"``.
    Returns an empty string when nothing usable remains.
    """
    ext = (extension or "").strip().lower()
    if not ext or ext == ".":
        return ""
    if not ext.startswith("."):
        ext = "." + ext
    return ext


def file_extension(path: Union[str, Path]) -> str:
    """Return the extension a rule lookup should use for a file name.

    Normally the last suffix (``"report.PDF"`` -> ``".PDF"``). A name made
    only of a dot and one word, such as ``".png"``, counts as that
    extension, so ``".bashrc"`` yields ``".bashrc"`` rather than nothing.
    """
    path = Path(path)
    if path.suffix:
        return path.suffix
    name = path.name
    if name.startswith(".") and "." not in name[1:]:
        return name
    return ""
