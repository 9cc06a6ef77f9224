import os
import uuid

from fastapi import HTTPException, UploadFile

from app.config import settings

ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "webp"}
MAX_IMAGE_BYTES = 2 * 1024 * 1024


def save_image(upload: UploadFile, folder: str) -> str:
    """Store an uploaded image under UPLOAD_DIR/<folder> and return its public path."""
    ext = (upload.filename or "").rsplit(".", 1)[-1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise HTTPException(400, "Format gambar harus jpg, png atau webp")

    content = upload.file.read()
    if len(content) > MAX_IMAGE_BYTES:
        raise HTTPException(400, "Ukuran gambar maksimal 2MB")

    target_dir = os.path.join(settings.UPLOAD_DIR, folder)
    os.makedirs(target_dir, exist_ok=True)
    filename = f"{uuid.uuid4().hex}.{ext}"

    with open(os.path.join(target_dir, filename), "wb") as f:
        f.write(content)

    return f"/uploads/{folder}/{filename}"
