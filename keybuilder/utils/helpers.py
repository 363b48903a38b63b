import os
from typing import List

from fastapi import UploadFile
from keybuilder.config import settings
from keybuilder.exceptions import ValidationFailedError


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else ""


def validate_image(file: UploadFile) -> None:
    ext = file_extension(file.filename)
    if ext not in settings.ALLOWED_IMAGE_EXTENSIONS or file.content_type not in settings.ALLOWED_IMAGE_TYPES:
        raise ValidationFailedError(
            f"File type '{ext or file.content_type}' not allowed. "
            f"Allowed: {', '.join(settings.ALLOWED_IMAGE_EXTENSIONS)}"
        )


async def read_upload(file: UploadFile) -> bytes:
    validate_image(file)
    content = await file.read()
    if len(content) > settings.MAX_FILE_SIZE:
        raise ValidationFailedError(f"File exceeds {settings.MAX_FILE_SIZE // (1024 * 1024)} MB limit")
    return content


def media_folder(*parts) -> str:
    return "/".join([settings.MEDIA_PATH, *[str(part) for part in parts]])


def save_file(folder: str, filename: str, content: bytes) -> str:
    os.makedirs(folder, exist_ok=True)
    path = f"{folder}/{filename}"
    with open(path, "wb") as f:
        f.write(content)
    return path


def remove_files(paths: List[str]) -> None:
    """Delete files, skipping ones that are already gone. Any other OS error propagates."""
    for path in paths:
        try:
            os.remove(path)
        except FileNotFoundError:
            continue
