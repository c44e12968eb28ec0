from typing import List

from fastapi import APIRouter, Depends, Response, status

from linkpage_app.dependencies import get_current_user, get_profile_service
from linkpage_app.models import User
from linkpage_app.schemas.profile import ProfileCreate, ProfileResponse, ProfileUpdate
from linkpage_app.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
def create_profile(
    data: ProfileCreate,
    user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    """Create the caller's profile (one per user)"""
    profile = profile_service.create(user, data)
    return ProfileResponse.from_profile(profile)


@router.get("", response_model=List[ProfileResponse])
def list_profiles(profile_service: ProfileService = Depends(get_profile_service)):
    """All active profiles with their active links"""
    return [
        ProfileResponse.from_profile(profile, include_owner=True)
        for profile in profile_service.list_active()
    ]


@router.get("/me", response_model=ProfileResponse)
def get_my_profile(
    user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    """The caller's profile, including deactivated links"""
    profile = profile_service.get_for_user(user)
    return ProfileResponse.from_profile(profile, active_links_only=False)


@router.get("/username/{username}", response_model=ProfileResponse)
def get_profile_by_username(
    username: str,
    profile_service: ProfileService = Depends(get_profile_service),
):
    """
    Public page lookup.

    Counts a view on every call; deduplication is left to the client.
    """
    profile = profile_service.get_by_username(username)
    return ProfileResponse.from_profile(profile, include_owner=True)


@router.get("/{profile_id}", response_model=ProfileResponse)
def get_profile(
    profile_id: str,
    profile_service: ProfileService = Depends(get_profile_service),
):
    profile = profile_service.get(profile_id)
    return ProfileResponse.from_profile(profile, include_owner=True)


@router.patch("/{profile_id}", response_model=ProfileResponse)
def update_profile(
    profile_id: str,
    data: ProfileUpdate,
    user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    profile = profile_service.update(profile_id, user, data)
    return ProfileResponse.from_profile(profile, active_links_only=False)


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_profile(
    profile_id: str,
    user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    """Deactivate the caller's profile (soft delete)"""
    profile_service.remove(profile_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
