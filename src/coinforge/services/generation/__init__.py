"""Coinforge generation package: provider capability and site templates."""

from coinforge.services.generation.provider import (
    GeneratedImage,
    GenerationProvider,
    OpenAIGenerationProvider,
)
from coinforge.services.generation.templates import (
    BACKGROUND_TOKEN,
    LOGO_TOKEN,
    ImageSlot,
    SiteTemplate,
    get_template,
)

__all__ = [
    "GeneratedImage",
    "GenerationProvider",
    "OpenAIGenerationProvider",
    "ImageSlot",
    "SiteTemplate",
    "get_template",
    "LOGO_TOKEN",
    "BACKGROUND_TOKEN",
]
