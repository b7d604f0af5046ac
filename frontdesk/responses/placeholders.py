"""Placeholder substitution in reply text."""

import re

from pydantic import BaseModel

_NAME = re.compile(r",?[ \t]*\{name\}([ \t]*,)?")
_PLACEHOLDER = re.compile(r"\{(company_name|technician|time|phone)\}")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([,.!?])")
_SPACES = re.compile(r"[ \t]{2,}")


class PlaceholderValues(BaseModel):
    """Values available to reply templates."""

    name: str | None = None
    company_name: str = "our company"
    technician: str = "our technician"
    time: str = "soon"
    phone: str = "our main number"


def render(text: str, values: PlaceholderValues) -> str:
    """Fill known placeholders; unknown braces are left as written.

    A missing name removes the placeholder together with the comma that
    set it off, so "Thanks, {name}!" becomes "Thanks!".
    """
    leading_name = text.lstrip().startswith("{name}")
    if values.name:
        text = text.replace("{name}", values.name)
    elif "{name}" in text:
        text = _NAME.sub("", text)

    text = _PLACEHOLDER.sub(lambda m: getattr(values, m.group(1)), text)
    text = _SPACES.sub(" ", text)
    text = _SPACE_BEFORE_PUNCT.sub(r"\1", text).strip()
    if leading_name and not values.name and text:
        text = text[0].upper() + text[1:]
    return text
