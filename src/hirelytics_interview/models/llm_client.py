"""
LLM client abstraction.

Provides the single text-generation call used by the orchestrator. Two
backends are supported: the local Ollama CLI and any OpenAI-compatible
chat-completions HTTP API.
"""

import asyncio
import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Literal

import httpx
from pydantic import BaseModel, Field

from hirelytics_interview.config import get_settings

logger = logging.getLogger(__name__)

# Default model for Ollama
DEFAULT_OLLAMA_MODEL = "gpt-oss:20b"

Provider = Literal["ollama", "openai"]


class GenerationRequest(BaseModel):
    """Parameters of one generation call."""

    provider: Provider = Field(default="ollama", description="Generation backend")
    model: str = Field(default=DEFAULT_OLLAMA_MODEL, description="Model name")
    prompt: str = Field(..., description="Full prompt text")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int | None = Field(default=None, ge=1, description="Maximum tokens to generate")


class GenerationResult(BaseModel):
    """Response from an LLM."""

    text: str = Field(..., description="Generated text content")
    model: str = Field(default="", description="Model used for generation")
    provider: str = Field(default="", description="Backend used for generation")
    raw_response: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw response from the backend",
    )


class LLMError(Exception):
    """Exception raised when a generation call fails."""

    def __init__(self, message: str, return_code: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.return_code = return_code
        self.stderr = stderr


class LLMClientBase(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Generate text for a prompt.

        Args:
            request: Generation parameters.

        Returns:
            Generated response.

        Raises:
            LLMError: If the backend fails or returns no text.
        """
        ...

    async def close(self) -> None:
        """Close the client and release resources."""


class LLMClient(LLMClientBase):
    """
    Multi-backend LLM client.

    The Ollama backend shells out to ``ollama run`` with the prompt on stdin.
    The OpenAI backend posts to ``{base_url}/chat/completions``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: int | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the LLM client.

        Args:
            base_url: OpenAI-compatible API base URL (uses config if not provided).
            api_key: API bearer token (uses config if not provided).
            timeout: Transport timeout in seconds (uses config if not provided).
            http_client: Preconfigured HTTP client for the openai provider.
        """
        settings = get_settings()
        self._base_url = (base_url or settings.llm_base_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.llm_api_key
        self._timeout = timeout or settings.llm_timeout
        self._http: httpx.AsyncClient | None = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http is None:
            headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
            self._http = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=self._timeout,
            )
        return self._http

    def _run_ollama_sync(self, model: str, prompt: str) -> str:
        """
        Run the Ollama CLI synchronously.

        Ollama's ``run`` command takes no sampling flags, so temperature and
        token limits are left to the model's defaults.

        Raises:
            LLMError: If Ollama cannot be started, times out or exits non-zero.
        """
        cmd = ["ollama", "run", model]
        logger.debug(f"Running Ollama: {' '.join(cmd)}")
        try:
            process = subprocess.run(
                cmd,
                input=prompt,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            raise LLMError(f"Ollama timed out after {self._timeout} seconds")
        except FileNotFoundError:
            raise LLMError("Ollama CLI not found. Please install Ollama: https://ollama.ai")
        except OSError as e:
            raise LLMError(f"Failed to run Ollama: {e}")

        if process.returncode != 0:
            error_msg = process.stderr.strip() or f"Exit code: {process.returncode}"
            raise LLMError(
                f"Ollama exited with code {process.returncode}: {error_msg}",
                return_code=process.returncode,
                stderr=process.stderr,
            )
        return process.stdout.strip()

    async def _generate_ollama(self, request: GenerationRequest) -> GenerationResult:
        loop = asyncio.get_running_loop()
        text = await loop.run_in_executor(
            None,
            lambda: self._run_ollama_sync(request.model, request.prompt),
        )
        return GenerationResult(
            text=text,
            model=request.model,
            provider="ollama",
            raw_response={"response": text},
        )

    async def _generate_openai(self, request: GenerationRequest) -> GenerationResult:
        payload: dict[str, Any] = {
            "model": request.model,
            "messages": [{"role": "user", "content": request.prompt}],
            "temperature": request.temperature,
        }
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        client = await self._get_http_client()
        try:
            response = await client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"Generation API returned {e.response.status_code}",
                return_code=e.response.status_code,
                stderr=e.response.text,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise LLMError(f"Generation API request failed: {e}")

        try:
            text = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            raise LLMError("Generation API returned an unexpected payload")
        if not isinstance(text, str):
            raise LLMError("Generation API returned an unexpected payload")

        return GenerationResult(
            text=text.strip(),
            model=str(data.get("model") or request.model),
            provider="openai",
            raw_response=data,
        )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Generate text for a prompt.

        No retries are attempted; failures surface as LLMError.

        Args:
            request: Generation parameters.

        Returns:
            Generated response with non-empty text.

        Raises:
            LLMError: If the backend fails or returns no text.
        """
        if request.provider == "openai":
            result = await self._generate_openai(request)
        else:
            result = await self._generate_ollama(request)

        if not result.text:
            raise LLMError(f"{result.provider} returned an empty response")
        logger.debug(f"Generated {len(result.text)} chars with {result.provider}/{result.model}")
        return result

    async def close(self) -> None:
        """Close the client and release resources."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
