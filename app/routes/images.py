"""
Image Routes - Same-origin proxy and fallback resolution
"""

from flask import Blueprint, Response, current_app, request, stream_with_context

from api_responses import success_response, handle_api_errors
from exceptions import ValidationError
from image_fallback import ImageFallbackMachine
from image_probe import probe_image
from image_proxy import proxy_image

images_bp = Blueprint("images", __name__, url_prefix="/api")


@images_bp.route("/image-proxy", methods=["GET"])
def image_proxy_api():
    """
    Relay an image fetched server-side.

    Query parameters:
    - url: percent-encoded absolute URL of the image (required)
    """
    timeout = current_app.config["STOREFRONT_SETTINGS"]["images"].get("proxy_timeout", 20)
    session = getattr(current_app, "http_session", None)

    # ProxyUpstreamError -> upstream status, ProxyTransportError -> 500,
    # both rendered as plain text by the app's exception handlers
    try:
        body, content_type = proxy_image(request.args.get("url"), session=session, timeout=timeout)
    except ValidationError as e:
        return e.message, 400, {"Content-Type": "text/plain; charset=utf-8"}

    response = Response(stream_with_context(body), status=200)
    if content_type:
        response.headers["Content-Type"] = content_type
    else:
        response.headers.pop("Content-Type", None)
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


@images_bp.route("/image/resolve", methods=["GET"])
@handle_api_errors
def resolve_image_api():
    """
    Fallback plan for one image.

    Query parameters:
    - url: raw image link as found in the sheet
    - t: refresh token (default 0)
    - variant: viewer or card (default viewer)
    - probe: 1 to drive the fallback sequence against the network
    """
    settings = current_app.config["STOREFRONT_SETTINGS"]["images"]
    variant = request.args.get("variant", "viewer")
    token = request.args.get("t", "0")
    placeholder = settings.get("card_placeholder") if variant == "card" else settings.get("placeholder")
    options = {"placeholder": placeholder} if placeholder else {}

    machine = ImageFallbackMachine.for_variant(variant, request.args.get("url", ""), token, **options)

    if request.args.get("probe") in ("1", "true"):
        session = getattr(current_app, "http_session", None)
        probe_image(machine, session=session, timeout=settings.get("probe_timeout", 10))

    return success_response(data=machine.describe())
