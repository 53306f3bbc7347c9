from fastapi import APIRouter, Depends, Response, status

from redirection_service.dependencies import get_service_state
from redirection_service.errors import StorageUnknownError
from redirection_service.schemas.url import is_header_safe
from redirection_service.services.visits import record_visit
from redirection_service.state import ServiceState

router = APIRouter(tags=["redirect"])

ROUTE_GET_URL = "/{key}"


@router.get(ROUTE_GET_URL, status_code=status.HTTP_308_PERMANENT_REDIRECT, response_class=Response)
async def redirect_to_url(
    key: str,
    state: ServiceState = Depends(get_service_state),
):
    """
    Redirect to the stored URL.

    Flow:
    1. Look the key up in storage (404 if absent, no visit recorded)
    2. Prepare the permanent redirect, Location set to the stored URL as-is
    3. Record the visit (best-effort; never changes the response)
    """
    url = await state.storage.get(key)

    # Written outside the create endpoint, e.g. by another service
    if not is_header_safe(url):
        raise StorageUnknownError(f"Stored URL for key {key} is not a valid Location header")

    response = Response(
        status_code=status.HTTP_308_PERMANENT_REDIRECT,
        headers={"location": url},
    )

    await record_visit(state.dispatcher, key, detach=state.detach_dispatch)

    return response
