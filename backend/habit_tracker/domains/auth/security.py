"""
현재 사용자 식별 — Bearer JWT 검증.
토큰 발급(회원가입·로그인)은 외부 인증 서비스 담당이며, 여기서는 sub(사용자 id)와 부가 클레임만 읽는다.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from habit_tracker.core.config import get_settings
from habit_tracker.core.exceptions import NotAuthenticatedError

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def display_name(self) -> Optional[str]:
        """프로필 기본 이름: name 클레임 → 이메일 로컬 파트 → None."""
        if self.name:
            return self.name
        if self.email:
            return self.email.split("@")[0]
        return None


def decode_access_token(token: str) -> CurrentUser:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.auth_secret_key, algorithms=[settings.auth_algorithm])
    except JWTError:
        raise NotAuthenticatedError("Could not validate credentials")
    user_id = payload.get("sub")
    if not user_id:
        raise NotAuthenticatedError("Could not validate credentials")
    metadata = payload.get("user_metadata") or {}
    return CurrentUser(
        id=str(user_id),
        email=payload.get("email"),
        name=payload.get("name") or metadata.get("name"),
    )


def create_access_token(user_id: str, email: str | None = None, name: str | None = None) -> str:
    """테스트·로컬 개발용 토큰 생성."""
    settings = get_settings()
    claims = {"sub": user_id}
    if email:
        claims["email"] = email
    if name:
        claims["name"] = name
    return jwt.encode(claims, settings.auth_secret_key, algorithm=settings.auth_algorithm)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise NotAuthenticatedError()
    return decode_access_token(credentials.credentials)
