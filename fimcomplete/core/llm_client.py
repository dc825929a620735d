"""
llm_client.py

A client that sends a fill-in-middle prompt to a local inference server and
retrieves the suggested middle.
"""

import logging
import requests
from ..config import settings

logger = logging.getLogger(__name__)

FIM_PREFIX = "<|fim_prefix|>"
FIM_SUFFIX = "<|fim_suffix|>"
FIM_MIDDLE = "<|fim_middle|>"
EOT = "<|endoftext|>"

SPECIAL_TOKENS = (FIM_PREFIX, FIM_SUFFIX, FIM_MIDDLE, EOT)
STOP_SEQUENCES = [FIM_MIDDLE, "\n\n", EOT]


class CompletionError(Exception):
    """Base class for failures talking to the inference server."""


class TransportError(CompletionError):
    """The server was unreachable, timed out, or answered with a non-2xx status."""


class MalformedResponse(CompletionError):
    """The server answered, but not with a JSON object carrying a string `content`."""


def build_prompt(prefix, suffix):
    """Bracket the known text with FIM markers so the model generates the middle."""
    return f"{FIM_PREFIX}{prefix}{FIM_SUFFIX}{suffix}{FIM_MIDDLE}"


def normalize_completion(text):
    """Remove every special token from the raw completion and trim it."""
    for token in SPECIAL_TOKENS:
        text = text.replace(token, "")
    return text.strip()


class LLMClient:
    """Client for obtaining fill-in-middle completions from an inference server."""

    def __init__(self, endpoint=None, model=None, api_key=None, timeout=None):
        """
        :param endpoint: Optional override for the completion endpoint URL.
        :param model:    Model name sent with every request.
        :param api_key:  Bearer token for the Authorization header.
        :param timeout:  Seconds to wait for the server; 0 means wait forever.
        """
        # Anything not given here falls back to settings
        self.endpoint = endpoint or settings.LLM_ENDPOINT
        self.model = model or settings.LLM_MODEL
        self.api_key = api_key or settings.LLM_API_KEY
        if timeout is None:
            timeout = settings.LLM_TIMEOUT
        self.timeout = timeout or None

    def build_payload(self, request):
        """
        :param request: A CompletionRequest (prefix, suffix, cursor_offset).
        :return: The JSON body for the completion endpoint.
        """
        return {
            "model": self.model,
            "stream": False,
            "prompt": build_prompt(request.prefix, request.suffix),
            "temperature": settings.LLM_TEMPERATURE,
            "max_new_tokens": settings.LLM_MAX_NEW_TOKENS,
            "do_sample": settings.LLM_DO_SAMPLE,
            "stop": list(STOP_SEQUENCES),
        }

    def get_suggestion(self, request):
        """
        Request the middle for the given prefix/suffix split. Blocks until the server answers.

        :param request: A CompletionRequest.
        :return: The normalized completion, or an empty string if the server had none.
        :raises TransportError: on connection failures, timeouts and non-2xx statuses.
        :raises MalformedResponse: if the body is not a JSON object with a string `content`.
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        try:
            response = requests.post(
                self.endpoint,
                json=self.build_payload(request),
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()  # Raises an HTTPError if the status is 4xx, 5xx
        except requests.RequestException as e:
            raise TransportError(f"completion request to {self.endpoint} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse(f"response body is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise MalformedResponse(f"expected a JSON object, got {type(data).__name__}")

        content = data.get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise MalformedResponse(f"`content` must be a string, got {type(content).__name__}")

        return normalize_completion(content)
