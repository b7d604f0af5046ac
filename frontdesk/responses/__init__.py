"""Response assembly."""

from frontdesk.responses.assembler import ResponseAssembler
from frontdesk.responses.models import AssembledResponse, AssemblyStrategy
from frontdesk.responses.placeholders import PlaceholderValues, render

__all__ = [
    "AssembledResponse",
    "AssemblyStrategy",
    "PlaceholderValues",
    "ResponseAssembler",
    "render",
]
