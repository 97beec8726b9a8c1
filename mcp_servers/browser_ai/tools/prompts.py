"""Synthetic instructions appended to user actions.

The remote agent only returns structured data when asked for it, so every
tool closes its batch with an extraction instruction in a fixed format.
"""

from __future__ import annotations

_ELEMENTS_FORMAT = '"interactive_elements": ["element1", "element2", ...], "html_markup": "complete_html_string"'
_NO_EXTRA = "Do not add any extra text or formatting."


def _extract_elements(prefix: str, where: str, *, extra_fields: str = "", extra_markup: str = "") -> str:
    fields = _ELEMENTS_FORMAT + (f", {extra_fields}" if extra_fields else "")
    return (
        f"{prefix} extract all clickable elements, input fields, buttons, and links from {where}. "
        f"Also get the complete HTML markup{extra_markup}. "
        f"Return the result as a JSON object with this exact format: {{{fields}}}. "
    )


def extract_page_elements() -> str:
    return (
        "Extract all clickable elements, input fields, buttons, and links from the page. "
        "Also get the complete HTML markup. "
        f"Return the result as a JSON object with this exact format: {{{_ELEMENTS_FORMAT}}}. {_NO_EXTRA}"
    )


def extract_after_actions() -> str:
    return _extract_elements("After performing the actions,", "the current page") + _NO_EXTRA


def extract_after_batch(actions_count: int) -> str:
    return (
        _extract_elements(
            "After completing all actions,",
            "the final page",
            extra_fields=f'"actions_completed": {actions_count}',
        )
        + _NO_EXTRA
    )


def extract_after_navigation() -> str:
    return (
        _extract_elements(
            "After navigation completes,",
            "the page",
            extra_fields='"current_url": "actual_url"',
            extra_markup=" and current URL",
        )
        + _NO_EXTRA
    )


def extract_when_found() -> str:
    return (
        _extract_elements("Once the element is found,", "the current page", extra_fields='"element_found": true')
        + 'If timeout occurs, return {"element_found": false, "error": "Element not found within timeout"}.'
    )


def wait_after_interaction(seconds: float) -> str:
    return f"Wait {_seconds(seconds)} seconds for the page to update after the interaction"


def wait_between_actions(seconds: float) -> str:
    return f"Wait {_seconds(seconds)} seconds before next action"


def wait_for_element(instruction: str, timeout: float) -> str:
    return f"Wait up to {_seconds(timeout)} seconds for this element to appear: {instruction}"


def navigate(url: str) -> str:
    return f"Navigate to {url}"


CLEAN_JSON_RESULT = (
    "Return the extracted data as a clean JSON object. "
    "No additional text, explanations, or formatting. "
    "Just the JSON response as specified in the extraction instruction."
)

PAGE_INFO = (
    "Extract comprehensive page information including title, URL, meta description, meta keywords, "
    "and page structure"
)

PAGE_INFO_FORMAT = (
    "Return the page information as a JSON object with this exact format: "
    '{"title": "page_title", "url": "current_url", "meta_description": "description", "meta_keywords": "keywords", '
    '"page_structure": {"headings": ["h1", "h2", ...], "forms": ["form1", "form2", ...], "images": ["img1", "img2", ...]}}. '
    + _NO_EXTRA
)


def _seconds(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
