import json
import logging

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = frozenset(
    {
        "password",
        "current_password",
        "new_password",
        "token",
        "refresh_token",
        "access_token",
        "two_factor_code",
        "code",
        "secret",
    }
)
MASK = "********"


def mask_sensitive(payload):
    """Replace the values of credential-bearing keys anywhere in a JSON payload."""
    if isinstance(payload, dict):
        return {
            key: MASK if key in SENSITIVE_FIELDS else mask_sensitive(value)
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [mask_sensitive(item) for item in payload]
    return payload


def render_body(raw, content_type):
    """Decode a request/response body for logging, masking JSON credentials."""
    if not raw:
        return ""
    text = raw.decode("utf-8")
    if content_type.startswith("application/json"):
        try:
            return json.dumps(mask_sensitive(json.loads(text)))
        except ValueError:
            return text
    return text


class RequestResponseLoggingMiddleware:
    """
    Middleware that logs each request method, path, body,
    and the corresponding response status and content.

    Passwords, tokens and 2FA codes in JSON bodies are masked.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_body = ""
        content_type = request.META.get("CONTENT_TYPE", "")

        # Skip logging body for file uploads
        if "multipart/form-data" in content_type:
            request_body = "<Multipart form data - body not logged>"
        elif request.method in ("POST", "PUT", "PATCH"):
            try:
                request_body = render_body(request.body, content_type)
            except UnicodeDecodeError:
                request_body = "<Could not decode body>"

        logger.info(
            "API Request: %s %s Body: %s",
            request.method,
            request.get_full_path(),
            request_body,
        )

        response = self.get_response(request)

        response_type = response.get("Content-Type", "")
        if getattr(response, "streaming", False):
            response_content = "<Streaming content>"
        elif response_type.startswith(("application/json", "text/", "application/xml")):
            try:
                response_content = render_body(response.content, response_type)
            except UnicodeDecodeError:
                response_content = "<Could not decode content>"
        else:
            response_content = f"<Content-Type: {response_type}>"

        logger.info(
            "API Response: %s %s Status: %s Content: %s",
            request.method,
            request.get_full_path(),
            response.status_code,
            response_content,
        )

        return response
