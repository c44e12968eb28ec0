from typing import List

from fastapi import APIRouter, Depends, Response, status

from linkpage_app.dependencies import get_current_user, get_link_service
from linkpage_app.models import User
from linkpage_app.schemas.link import LinkCreate, LinkResponse, LinkUpdate, ReorderLinks
from linkpage_app.services.link_service import LinkService

router = APIRouter(prefix="/links", tags=["links"])


@router.post("", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
def create_link(
    data: LinkCreate,
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service),
):
    """Add a link to the end of the caller's profile"""
    return link_service.create(user, data)


@router.get("", response_model=List[LinkResponse])
def list_links(
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service),
):
    """All of the caller's links, active or not, in display order"""
    return link_service.list_for_user(user)


@router.post("/reorder", response_model=List[LinkResponse])
def reorder_links(
    data: ReorderLinks,
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service),
):
    """Set display order from the full list of the caller's link IDs"""
    return link_service.reorder(user, data.link_ids)


@router.get("/{link_id}", response_model=LinkResponse)
def get_link(
    link_id: str,
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service),
):
    return link_service.get(link_id, user)


@router.patch("/{link_id}", response_model=LinkResponse)
def update_link(
    link_id: str,
    data: LinkUpdate,
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service),
):
    return link_service.update(link_id, user, data)


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_link(
    link_id: str,
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service),
):
    """Deactivate a link (soft delete)"""
    link_service.remove(link_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{link_id}/hard", status_code=status.HTTP_204_NO_CONTENT)
def hard_delete_link(
    link_id: str,
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service),
):
    """Permanently delete a link and its click history"""
    link_service.hard_delete(link_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
