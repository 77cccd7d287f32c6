"""Multimodal query handling: describe an image attachment with the vision model.

Image queries bypass the session store and the intent router entirely. The
attachment is downloaded, inlined into a single vision request, and the
model's text is returned for the caller to reply with.
"""

import httpx

from operator_agent.errors import AttachmentFetchFailed, ModelUnavailable
from operator_agent.llm_client import LLMClient, LLMClientError, ModelRole
from operator_agent.llm_client.adapters import build_image_message
from operator_agent.telemetry import (
    ATTACHMENT_DESCRIBED,
    ATTACHMENT_FETCH_FAILED,
    TraceContext,
    get_logger,
)

log = get_logger(__name__)

IMAGE_DEFAULT_PROMPT = "Describe this image in detail."
IMAGE_FAILURE_REPLY = "Sorry, I had trouble analyzing that image."


def is_image(content_type: str | None) -> bool:
    """True if a declared content type is an image type."""
    return bool(content_type) and content_type.lower().startswith("image/")


class MultimodalQueryHandler:
    """Fetches an image and asks the vision model about it."""

    def __init__(
        self,
        llm_client: LLMClient,
        timeout_seconds: float = 30.0,
        max_bytes: int = 20 * 1024 * 1024,
    ) -> None:
        """Initialize the handler.

        Args:
            llm_client: Client used for the vision call.
            timeout_seconds: Download timeout for the attachment.
            max_bytes: Largest attachment accepted.
        """
        self.llm_client = llm_client
        self.timeout_seconds = timeout_seconds
        self.max_bytes = max_bytes

    async def fetch(self, url: str) -> bytes:
        """Download attachment bytes.

        Raises:
            AttachmentFetchFailed: On network failure, error status, or oversize body.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, follow_redirects=True
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                data = response.content
        except httpx.HTTPError as e:
            log.warning(ATTACHMENT_FETCH_FAILED, url=url, error_type=type(e).__name__, error=str(e))
            raise AttachmentFetchFailed(f"Could not download attachment: {e}") from e

        if len(data) > self.max_bytes:
            log.warning(ATTACHMENT_FETCH_FAILED, url=url, size=len(data), max_bytes=self.max_bytes)
            raise AttachmentFetchFailed(
                f"Attachment is {len(data)} bytes, larger than the {self.max_bytes} byte limit"
            )
        return data

    async def describe(
        self,
        url: str,
        content_type: str | None,
        prompt: str | None = None,
        trace_ctx: TraceContext | None = None,
    ) -> str:
        """Answer a prompt about an image.

        Args:
            url: Attachment URL.
            content_type: Declared MIME type; must be image/*.
            prompt: Operator text; IMAGE_DEFAULT_PROMPT when empty.
            trace_ctx: Trace context for log correlation.

        Returns:
            The model's text (may be empty).

        Raises:
            AttachmentFetchFailed: If the attachment is not an image or cannot be fetched.
            ModelUnavailable: If the vision call fails.
        """
        if not is_image(content_type):
            raise AttachmentFetchFailed(f"Unsupported attachment type: {content_type}")

        data = await self.fetch(url)
        message = build_image_message(prompt or IMAGE_DEFAULT_PROMPT, data, str(content_type))

        try:
            response = await self.llm_client.respond(
                role=ModelRole.VISION,
                messages=[message],
                trace_ctx=trace_ctx,
            )
        except LLMClientError as e:
            raise ModelUnavailable(str(e)) from e

        log.info(
            ATTACHMENT_DESCRIBED,
            content_type=content_type,
            size=len(data),
            trace_id=trace_ctx.trace_id if trace_ctx else None,
        )
        return response["content"]
