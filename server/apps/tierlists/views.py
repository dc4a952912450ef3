"""JSON views for the tierlist catalog.

Views only parse requests and render responses. All store access goes
through the logic layer with the app's StoreContext, and every
TierlistError is rendered by ``json_errors`` as::

    {"error": {"code": "...", "message": "..."}}
"""

import json
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, Final

from django.apps import apps
from django.http import (
    FileResponse,
    HttpRequest,
    HttpResponse,
    HttpResponseBase,
    JsonResponse,
)
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from server.apps.tierlists.exceptions import MalformedBodyError, TierlistError
from server.apps.tierlists.infrastructure.context import StoreContext
from server.apps.tierlists.logic.entry_operations import move_entry
from server.apps.tierlists.logic.retrieval_operations import open_image
from server.apps.tierlists.logic.tierlist_operations import (
    assemble_tierlist,
    create_tierlist,
)
from server.apps.tierlists.logic.upload_operations import (
    check_upload_size,
    upload_entry,
)

# Room for multipart boundaries and part headers around the image
_MULTIPART_OVERHEAD_BYTES: Final = 64 * 1024

logger = logging.getLogger(__name__)

_View = Callable[..., HttpResponseBase]


def json_errors(view: _View) -> _View:
    """Render TierlistError raised by a view as a JSON error payload.

    Args:
        view: View function to wrap.

    Returns:
        Wrapped view.
    """
    @wraps(view)
    def wrapper(
        request: HttpRequest,
        *args: Any,
        **kwargs: Any,
    ) -> HttpResponseBase:
        try:
            return view(request, *args, **kwargs)
        except TierlistError as error:
            logger.info(
                '%s %s failed with %s: %s',
                request.method,
                request.path,
                error.code,
                error,
            )
            return JsonResponse(
                {'error': {'code': error.code, 'message': str(error)}},
                status=error.status_code,
            )

    return wrapper


def _stores() -> StoreContext:
    return apps.get_app_config('tierlists').stores  # type: ignore[attr-defined]


def _parse_json_object(request: HttpRequest) -> dict[str, Any]:
    """Decode a JSON object request body.

    Raises:
        MalformedBodyError: If the body is not a JSON object.
    """
    try:
        body = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as error:
        raise MalformedBodyError('Invalid request payload') from error
    if not isinstance(body, dict):
        raise MalformedBodyError('Invalid request payload')
    return body


def _optional_int(body: dict[str, Any], *keys: str) -> int | None:
    for key in keys:
        if key in body:
            value = body[key]
            if value is None:
                return None
            if isinstance(value, bool) or not isinstance(value, int):
                raise MalformedBodyError(f'{key} must be an integer or null')
            return value
    return None


def _declared_length(request: HttpRequest) -> int | None:
    try:
        return int(request.META.get('CONTENT_LENGTH') or '')
    except ValueError:
        return None


@require_GET
def health(request: HttpRequest) -> HttpResponse:
    """Health check endpoint."""
    return JsonResponse({'ok': True})


@require_GET
@json_errors
def get_image(request: HttpRequest, key: str) -> HttpResponseBase:
    """Stream an image with the content type stored at upload time.

    FileResponse closes the blob handle once the body is consumed
    or the connection fails.
    """
    image = open_image(_stores(), key)
    response = FileResponse(image.body, content_type=image.content_type)
    response['Content-Length'] = str(image.size_bytes)
    return response


@csrf_exempt
@require_POST
@json_errors
def create_tierlist_view(request: HttpRequest) -> HttpResponse:
    """Create a tierlist with its default tiers."""
    body = _parse_json_object(request)
    payload = create_tierlist(_stores(), body.get('name'))
    return JsonResponse(payload, status=201)


@require_GET
@json_errors
def get_tierlist_view(request: HttpRequest, tierlist_uuid: str) -> HttpResponse:
    """Return a tierlist with tiers and unassigned entries."""
    payload = assemble_tierlist(_stores(), tierlist_uuid)
    return JsonResponse(payload)


@csrf_exempt
@require_POST
@json_errors
def upload_image_view(
    request: HttpRequest,
    tierlist_uuid: str,
) -> HttpResponse:
    """Upload an image into the tierlist's unassigned entries."""
    stores = _stores()
    declared = _declared_length(request)
    if declared is not None:
        check_upload_size(stores, declared - _MULTIPART_OVERHEAD_BYTES)

    entry = upload_entry(stores, tierlist_uuid, request.FILES.get('image'))
    return JsonResponse(
        {'id': entry.id, 'filename': entry.file_key},
        status=201,
    )


@csrf_exempt
@require_POST
@json_errors
def move_entry_view(
    request: HttpRequest,
    tierlist_uuid: str,
) -> HttpResponse:
    """Move an entry to a tier, or to unassigned when tier is null.

    The path's tierlist is not used to scope the move.
    """
    body = _parse_json_object(request)
    if 'id' not in body:
        raise MalformedBodyError('Invalid request payload: missing id')
    entry_id = _optional_int(body, 'id')
    if entry_id is None:
        raise MalformedBodyError('Invalid request payload: id is null')
    tier_id = _optional_int(body, 'tier_id', 'tierId')

    entry = move_entry(_stores(), entry_id, tier_id)
    return JsonResponse(entry.to_dict())
