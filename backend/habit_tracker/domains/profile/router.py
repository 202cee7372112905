from fastapi import APIRouter, Depends

from habit_tracker.core.clock import Clock, get_clock
from habit_tracker.domains.auth.security import CurrentUser, get_current_user
from habit_tracker.domains.profile.schemas import ProfileResponse, ProfileUpdate
from habit_tracker.domains.profile.service import ProfileServiceImpl

router = APIRouter(prefix="/profile")


def get_profile_service(clock: Clock = Depends(get_clock)) -> ProfileServiceImpl:
    return ProfileServiceImpl(clock)


@router.get("", response_model=ProfileResponse, summary="내 프로필 (없으면 생성)")
def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    service: ProfileServiceImpl = Depends(get_profile_service),
):
    return service.get_or_create(current_user)


@router.patch("", response_model=ProfileResponse, summary="프로필 이름·아바타 URL 수정")
def update_profile(
    body: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: ProfileServiceImpl = Depends(get_profile_service),
):
    return service.update(current_user, body)
