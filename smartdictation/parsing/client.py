"""HTTP client for the transcript parsing service."""

import asyncio
import logging
from typing import Optional

import aiohttp
from pydantic import ValidationError

from .schema import ErrorBody, ParseDictationRequest, ParseDictationResponse

logger = logging.getLogger(__name__)


class TranscriptParseError(Exception):
    """The parsing service could not turn a transcript into sections."""

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message or f"Transcript parse failed (status={status})")
        self.message = message  # Human-readable message from the service, if it sent one
        self.status = status


class TranscriptParserClient:
    """Posts transcripts to the parsing service and returns its structured sections."""

    def __init__(self,
                 base_url: str,
                 endpoint: str = "/hp/parse-dictation",
                 timeout_seconds: float = 60.0,
                 auth_token: Optional[str] = None):
        """Initialize parser client.
        
        Args:
            base_url: Service root, e.g. "http://localhost:5000/api"
            endpoint: Path of the parse endpoint below base_url
            timeout_seconds: Total time allowed for one request
            auth_token: Bearer token sent in the Authorization header
        """
        self.base_url = base_url.rstrip("/")
        self.endpoint = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        self.timeout_seconds = timeout_seconds
        self.auth_token = auth_token

        logger.info(f"TranscriptParserClient initialized for {self.url}")

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.endpoint}"

    async def parse(self, transcript: str) -> ParseDictationResponse:
        """Send a transcript for parsing.
        
        Args:
            transcript: Non-blank dictation text
            
        Returns:
            Validated parse response
            
        Raises:
            ValueError: If the transcript is blank
            TranscriptParseError: If the request fails or the response is unusable
        """
        if not transcript or not transcript.strip():
            raise ValueError("Transcript is required")

        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"

        payload = ParseDictationRequest(transcript=transcript).model_dump()
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        logger.debug(f"Posting transcript ({len(transcript)} chars) to {self.url}")
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.url, headers=headers, json=payload) as response:
                    if response.status >= 400:
                        message = await self._read_error_message(response)
                        logger.error(f"Parse service error: {response.status} - {message}")
                        raise TranscriptParseError(message, status=response.status)

                    body = await response.json(content_type=None)
                    return ParseDictationResponse.model_validate(body)

        except ValidationError as e:
            logger.error(f"Malformed parse response: {e}")
            raise TranscriptParseError(None) from e
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Parse request failed: {e}")
            raise TranscriptParseError(None) from e

    async def _read_error_message(self, response: aiohttp.ClientResponse) -> Optional[str]:
        try:
            body = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            return None
        if not isinstance(body, dict):
            return None
        try:
            error = ErrorBody.model_validate(body)
        except ValidationError:
            return None
        return error.error or error.message
