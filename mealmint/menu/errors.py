"""Coded errors raised by the menu recommendation pipeline."""

from __future__ import annotations

NO_MENU_ITEMS = "NO_MENU_ITEMS"
MISSING_IMAGE = "MISSING_IMAGE"
INVALID_MIMETYPE = "INVALID_MIMETYPE"
IMAGE_TOO_LARGE = "IMAGE_TOO_LARGE"
INVALID_BUDGET = "INVALID_BUDGET"
MISSING_IMAGE_BUFFER = "MISSING_IMAGE_BUFFER"
NO_CACHE = "NO_CACHE"
VISION_API_ERROR = "VISION_API_ERROR"
BUDGET_API_ERROR = "BUDGET_API_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"
INVALID_ID = "INVALID_ID"
NOT_FOUND = "NOT_FOUND"

STATUS_CODES: dict[str, int] = {
    NO_MENU_ITEMS: 422,
    MISSING_IMAGE: 400,
    INVALID_MIMETYPE: 400,
    IMAGE_TOO_LARGE: 413,
    INVALID_BUDGET: 400,
    MISSING_IMAGE_BUFFER: 400,
    NO_CACHE: 404,
    VISION_API_ERROR: 500,
    BUDGET_API_ERROR: 500,
    INTERNAL_ERROR: 500,
    INVALID_ID: 400,
    NOT_FOUND: 404,
}


class MenuAnalysisError(Exception):
    """An error with a stable ``code`` that callers can branch on."""

    def __init__(
        self,
        code: str,
        message: str,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = STATUS_CODES.get(code, 500)
        self.original_error = original_error

    def __repr__(self) -> str:
        return f"MenuAnalysisError({self.code!r}, {self.message!r})"


def no_menu_items(
    message: str = "No menu items could be extracted from the image",
) -> MenuAnalysisError:
    return MenuAnalysisError(NO_MENU_ITEMS, message)


def missing_image(
    message: str = 'Missing image file in field "image"',
) -> MenuAnalysisError:
    return MenuAnalysisError(MISSING_IMAGE, message)


def invalid_mime_type(message: str = "Invalid image mime type") -> MenuAnalysisError:
    return MenuAnalysisError(INVALID_MIMETYPE, message)


def image_too_large(
    message: str = "Image file too large. Maximum size is 6MB.",
) -> MenuAnalysisError:
    return MenuAnalysisError(IMAGE_TOO_LARGE, message)


def invalid_budget(
    message: str = "Invalid budget. Provide a positive number.",
) -> MenuAnalysisError:
    return MenuAnalysisError(INVALID_BUDGET, message)


def missing_image_buffer(
    message: str = "Missing image buffer or mime type",
) -> MenuAnalysisError:
    return MenuAnalysisError(MISSING_IMAGE_BUFFER, message)


def no_cache(
    message: str = "No cached menu available. Please upload a menu first.",
) -> MenuAnalysisError:
    return MenuAnalysisError(NO_CACHE, message)


def vision_api_error(
    message: str = "Vision API error",
    original_error: BaseException | None = None,
) -> MenuAnalysisError:
    return MenuAnalysisError(VISION_API_ERROR, message, original_error)


def budget_api_error(
    message: str = "Budget API error",
    original_error: BaseException | None = None,
) -> MenuAnalysisError:
    return MenuAnalysisError(BUDGET_API_ERROR, message, original_error)


def internal_error(
    message: str = "Internal server error",
    original_error: BaseException | None = None,
) -> MenuAnalysisError:
    return MenuAnalysisError(INTERNAL_ERROR, message, original_error)


def invalid_id(message: str = "Invalid ID format") -> MenuAnalysisError:
    return MenuAnalysisError(INVALID_ID, message)


def not_found(message: str = "Resource not found") -> MenuAnalysisError:
    return MenuAnalysisError(NOT_FOUND, message)


def to_response(error: BaseException) -> tuple[int, dict]:
    """Map any exception to an HTTP status and JSON-ready error body.

    Unknown exceptions are reported as ``INTERNAL_ERROR`` without leaking
    their message.
    """
    if isinstance(error, MenuAnalysisError):
        return error.status_code, {"error": error.message, "code": error.code}
    return 500, {"error": "Internal server error", "code": INTERNAL_ERROR}
