from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlmodel import Session

from app.database import get_session
from app.models.user import User
from app.schemas.user_schemas import ChangePasswordRequest, ProfileUpdate, UserOut
from app.utils.hash import hash_password, verify_password
from app.utils.token import get_current_user
from app.utils.uploads import save_image

router = APIRouter()


# -------- USER PROFILE --------

@router.get("/me", response_model=UserOut)
def get_my_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=UserOut)
def update_my_profile(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if payload.name:
        current_user.name = payload.name
    if payload.photo is not None:
        current_user.photo = payload.photo or None

    current_user.updated_at = datetime.utcnow()
    session.add(current_user)
    session.commit()
    session.refresh(current_user)
    return current_user


@router.post("/me/photo", response_model=UserOut)
def upload_profile_photo(
    photo: Optional[UploadFile] = File(None),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if not photo:
        raise HTTPException(400, "Foto wajib diunggah")

    current_user.photo = save_image(photo, "profiles")
    current_user.updated_at = datetime.utcnow()
    session.add(current_user)
    session.commit()
    session.refresh(current_user)
    return current_user


@router.put("/me/password")
def change_password(
    payload: ChangePasswordRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if not verify_password(payload.current_password, current_user.password):
        raise HTTPException(400, "Password saat ini salah")

    current_user.password = hash_password(payload.new_password)
    current_user.updated_at = datetime.utcnow()
    session.add(current_user)
    session.commit()
    return {"message": "Password berhasil diubah"}
