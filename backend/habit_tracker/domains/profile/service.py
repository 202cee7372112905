"""
프로필 서비스 — 조회 시 없으면 생성(upsert-on-read), 이름·아바타 URL 수정.
"""
import logging

from sqlalchemy.exc import IntegrityError

from habit_tracker.core.clock import Clock, get_clock
from habit_tracker.core.database import get_session_factory
from habit_tracker.domains.auth.security import CurrentUser
from habit_tracker.domains.profile.models import Profile
from habit_tracker.domains.profile.schemas import ProfileResponse, ProfileUpdate

logger = logging.getLogger(__name__)


class ProfileServiceImpl:

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or get_clock()

    def _to_response(self, profile: Profile, user: CurrentUser) -> ProfileResponse:
        resp = ProfileResponse.model_validate(profile)
        resp.email = user.email
        return resp

    def get_or_create(self, user: CurrentUser) -> ProfileResponse:
        """프로필이 없으면 토큰의 name 클레임(없으면 이메일 로컬 파트)으로 생성한다."""
        session_factory = get_session_factory()
        with session_factory() as session:
            profile = session.get(Profile, user.id)
            if profile:
                return self._to_response(profile, user)
            now = self._clock.now()
            profile = Profile(
                id=user.id,
                name=user.display_name,
                avatar_url=None,
                created_at=now,
                updated_at=now,
            )
            session.add(profile)
            try:
                session.commit()
            except IntegrityError:
                # 동시 요청이 먼저 생성한 경우
                session.rollback()
                profile = session.get(Profile, user.id)
                return self._to_response(profile, user)
            logger.info("profile created user_id=%s", user.id)
            return self._to_response(profile, user)

    def update(self, user: CurrentUser, body: ProfileUpdate) -> ProfileResponse:
        self.get_or_create(user)
        patch = body.model_dump(exclude_unset=True)
        with get_session_factory()() as session:
            profile = session.get(Profile, user.id)
            for key, value in patch.items():
                setattr(profile, key, value)
            profile.updated_at = self._clock.now()
            session.commit()
            session.refresh(profile)
            logger.info("profile updated user_id=%s fields=%s", user.id, sorted(patch))
            return self._to_response(profile, user)
