from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select
from app.database import get_session
from app.models.user import User, UserRole
from app.schemas.user_schemas import (
    UserRegister,
    UserLogin,
    Token,
    UserOut,
    ForgotPasswordRequest,
    VerifyOTPRequest,
    ResetPasswordRequest,
)
from app.services import password_reset_service
from app.utils.hash import hash_password, verify_password
from app.utils.token import create_access_token


router = APIRouter()


# -------- AUTH ROUTES --------

@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserRegister, session: Session = Depends(get_session)):
    existing_user = session.exec(select(User).where(User.email == payload.email)).first()
    if existing_user:
        raise HTTPException(400, "Email sudah terdaftar")

    user = User(
        name=payload.name,
        email=payload.email,
        password=hash_password(payload.password),
        role=UserRole.CUSTOMER,
    )

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.post("/login", response_model=Token)
def login(payload: UserLogin, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == payload.email.lower())).first()

    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(401, "Email atau password salah")

    if not user.is_active:
        raise HTTPException(403, "Akun tidak aktif")

    token = create_access_token({"user_id": user.id, "role": user.role.value})
    return Token(access_token=token, token_type="bearer")


# -------- PASSWORD RESET (OTP) --------

@router.post("/forgot-password")
def forgot_password(request: ForgotPasswordRequest, session: Session = Depends(get_session)):
    password_reset_service.request_otp(session, request.email)
    return {"message": "Kode OTP telah dikirim ke email Anda"}


@router.post("/verify-otp")
def verify_otp(request: VerifyOTPRequest, session: Session = Depends(get_session)):
    password_reset_service.verify_otp(session, request.email, request.otp)
    return {"valid": True}


@router.post("/reset-password")
def reset_password(request: ResetPasswordRequest, session: Session = Depends(get_session)):
    password_reset_service.reset_password(
        session, request.email, request.otp, request.new_password
    )
    return {"message": "Password berhasil diubah"}
