import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from redirection_service.dependencies import get_service_state
from redirection_service.errors import BadRequestError
from redirection_service.schemas.url import CreateURLRequest
from redirection_service.state import ServiceState

logger = logging.getLogger(__name__)

router = APIRouter(tags=["create"])

MAX_PAYLOAD_SIZE = 5 * 1024  # 5 KiB

ROUTE_CREATE_URL = "/create"


async def read_bounded_body(request: Request, limit: int = MAX_PAYLOAD_SIZE) -> bytes:
    """
    Read the request body, refusing anything larger than ``limit`` bytes.

    The body is streamed so an oversized upload is rejected as soon as it
    crosses the limit instead of being buffered whole.
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise BadRequestError(f"Error reading request body: length limit exceeded ({limit} bytes)")

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise BadRequestError(f"Error reading request body: length limit exceeded ({limit} bytes)")
    return bytes(body)


def parse_create_request(body: bytes) -> CreateURLRequest:
    try:
        return CreateURLRequest.model_validate_json(body)
    except ValidationError as e:
        raise BadRequestError(f"Error deserializing request body: {e}") from e


def build_short_url(request: Request, key: str) -> str:
    """``scheme://host/key`` as seen by the client, defaulting to http://localhost"""
    scheme = request.url.scheme or "http"
    host = request.headers.get("host") or "localhost"
    return f"{scheme}://{host}/{key}"


@router.post(
    ROUTE_CREATE_URL,
    status_code=status.HTTP_201_CREATED,
    response_class=PlainTextResponse,
)
async def create_url(
    request: Request,
    state: ServiceState = Depends(get_service_state),
):
    """
    Create a new short URL.

    Flow:
    1. Read and decode the body (400 on oversized or malformed input)
    2. Ask the key generator for a fresh key
    3. Persist key -> URL
    4. Return the fully-qualified short URL as plain text

    Capability errors propagate unchanged and are rendered by the
    application's ServiceError handler.
    """
    try:
        payload = parse_create_request(await read_bounded_body(request))
    except BadRequestError as e:
        logger.warning("%s", e)
        raise

    key = await state.key_generator.generate()
    await state.storage.put(key, payload.url)

    return PlainTextResponse(build_short_url(request, key), status_code=status.HTTP_201_CREATED)
