import logging
import math
import secrets
from datetime import datetime, timedelta

from sqlmodel import Session, func, select

from app.config import settings
from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.password_reset import PasswordReset
from app.models.user import User
from app.services.email_service import send_email
from app.utils.hash import hash_password, verify_password
from app.utils.template import render_template

logger = logging.getLogger(__name__)

OTP_EXPIRY_MINUTES = 10
OTP_LENGTH = 6
RATE_LIMIT_REQUESTS = 5
RATE_LIMIT_WINDOW = timedelta(hours=1)


def generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


def _get_user(session: Session, email: str) -> User:
    user = session.exec(select(User).where(User.email == email.lower())).first()
    if not user:
        raise NotFoundError("Email tidak terdaftar")
    if not user.is_active:
        raise ForbiddenError("Akun tidak aktif")
    return user


def _check_rate_limit(session: Session, user_id: int, now: datetime):
    window_start = now - RATE_LIMIT_WINDOW
    recent = session.exec(
        select(func.count(PasswordReset.id))
        .where(PasswordReset.user_id == user_id)
        .where(PasswordReset.created_at >= window_start)
    ).one()
    if recent < RATE_LIMIT_REQUESTS:
        return

    oldest = session.exec(
        select(func.min(PasswordReset.created_at))
        .where(PasswordReset.user_id == user_id)
        .where(PasswordReset.created_at >= window_start)
    ).one()
    minutes = math.ceil((oldest + RATE_LIMIT_WINDOW - now).total_seconds() / 60)
    raise ConflictError(f"Terlalu banyak permintaan. Coba lagi dalam {minutes} menit.")


def request_otp(session: Session, email: str) -> bool:
    now = datetime.utcnow()
    user = _get_user(session, email)
    _check_rate_limit(session, user.id, now)

    otp = generate_otp()
    session.add(
        PasswordReset(
            user_id=user.id,
            otp_hash=hash_password(otp),
            expires_at=now + timedelta(minutes=OTP_EXPIRY_MINUTES),
            created_at=now,
        )
    )
    session.commit()

    html = render_template(
        "emails/password_otp.html",
        user=user,
        otp=otp,
        expiry_minutes=OTP_EXPIRY_MINUTES,
        store_name=settings.STORE_NAME,
    )
    sent = send_email(
        to=user.email,
        subject=f"Kode OTP Reset Password - {settings.STORE_NAME}",
        html=html,
    )
    logger.info(f"Password reset OTP issued for user {user.id} (email sent: {sent})")
    return sent


def _find_valid_reset(session: Session, user: User, otp: str, now: datetime) -> PasswordReset:
    if not otp or len(otp) != OTP_LENGTH:
        raise ValidationError("Kode OTP tidak valid")

    candidates = session.exec(
        select(PasswordReset)
        .where(PasswordReset.user_id == user.id)
        .where(PasswordReset.is_used == False)  # noqa: E712
        .where(PasswordReset.expires_at > now)
        .order_by(PasswordReset.created_at.desc())
    ).all()
    for reset in candidates:
        if verify_password(otp, reset.otp_hash):
            return reset
    raise ValidationError("Kode OTP salah atau sudah kadaluarsa")


def verify_otp(session: Session, email: str, otp: str) -> bool:
    user = _get_user(session, email)
    _find_valid_reset(session, user, otp, datetime.utcnow())
    return True


def reset_password(session: Session, email: str, otp: str, new_password: str):
    now = datetime.utcnow()
    user = _get_user(session, email)
    reset = _find_valid_reset(session, user, otp, now)

    user.password = hash_password(new_password)
    user.updated_at = now
    reset.is_used = True
    session.add(user)
    session.add(reset)
    session.commit()
    logger.info(f"Password reset completed for user {user.id}")
