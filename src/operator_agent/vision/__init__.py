"""Multimodal query handling for image attachments."""

from operator_agent.vision.describer import (
    IMAGE_DEFAULT_PROMPT,
    IMAGE_FAILURE_REPLY,
    MultimodalQueryHandler,
    is_image,
)

__all__ = ["MultimodalQueryHandler", "IMAGE_DEFAULT_PROMPT", "IMAGE_FAILURE_REPLY", "is_image"]
