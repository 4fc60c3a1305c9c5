"""
EventSnap Backend — Abstract Vision Service Interface
=======================================================

What:  Abstract base class defining the contract for image-to-text providers.
Why:   ExtractionService only needs "image in, answer text out". Keeping the
       provider behind this interface lets tests substitute a fake and keeps
       DashScope specifics (headers, payload shape) in one module.
How:   Concrete implementations inherit from VisionService and implement
       extract_text().
"""

from abc import ABC, abstractmethod


class VisionService(ABC):
    """
    Abstract interface for AI-powered recognition of an image.

    Contract:
        - extract_text() accepts the image exactly as the client sent it
          (base64 or data URI) and returns the model's answer text
        - Implementations perform exactly one upstream call, with no retries
        - Provider failures are raised as EventSnapError subclasses

    Implementations:
        - DashScopeService: Alibaba Cloud DashScope, Qwen-VL models
    """

    @abstractmethod
    async def extract_text(self, image: str) -> str:
        """
        Ask the vision model about the image and return its answer text.

        Args:
            image: Base64-encoded image or data URI, passed through untouched.

        Returns:
            str: The first non-empty text item of the model answer.
                 Never empty; "nothing found" is an ExtractionError.

        Raises:
            MisconfiguredServerError: No credentials configured.
            UpstreamError: The provider answered with a non-2xx status.
            ExtractionError: The answer carries no text item.
        """
        ...

    @abstractmethod
    def is_configured(self) -> bool:
        """
        Whether credentials are present. Used by the health endpoint;
        does not contact the provider.
        """
        ...
