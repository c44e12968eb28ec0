from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from linkpage_app.dependencies import get_link_service
from linkpage_app.services.link_service import LinkService

router = APIRouter(prefix="/links", tags=["redirect"])


@router.get("/{link_id}/click")
def track_click_and_redirect(
    link_id: str,
    request: Request,
    link_service: LinkService = Depends(get_link_service),
):
    """
    Count a click and send the visitor on to the link's URL.

    Public: no authentication. Flow:
    1. Look up the active link (404 if missing or deactivated)
    2. Bump click_count and append a ClickEvent with IP, user agent, referer
    3. Redirect with 302
    """
    referer = request.headers.get("referer") or request.headers.get("referrer")
    link = link_service.track_click(
        link_id,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        referer=referer,
    )
    return RedirectResponse(url=link.url, status_code=status.HTTP_302_FOUND)
