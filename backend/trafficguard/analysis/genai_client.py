"""
Generative AI Client

Thin async client for the Gemini ``generateContent`` REST endpoint.

Features:
- Inline JPEG parts from data URLs or raw base64
- Structured JSON output with a response schema
- Thinking budget and maps grounding tool configuration
- Request/error statistics
"""

import aiohttp
import asyncio
import os
import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from trafficguard.errors import GenAIError


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GenAIStatus(BaseModel):
    """Status of the AI service connection"""
    is_configured: bool = False
    request_count: int = 0
    error_count: int = 0
    last_request_time: Optional[float] = None
    last_success_time: Optional[float] = None
    last_error: Optional[str] = None


class GenAIResponse(BaseModel):
    """Text and grounding extracted from the first candidate"""
    text: str = ""
    grounding_chunks: Optional[List[Any]] = None


def strip_data_url(data: str) -> str:
    """``data:image/jpeg;base64,XXXX`` -> ``XXXX``; raw base64 passes through"""
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


def image_part(data: str, mime_type: str = "image/jpeg") -> Dict[str, Any]:
    """Inline image request part"""
    return {"inlineData": {"mimeType": mime_type, "data": strip_data_url(data)}}


def text_part(text: str) -> Dict[str, Any]:
    return {"text": text}


class GenAIClient:
    """
    Call generative models over HTTP

    Usage:
        client = GenAIClient()
        await client.initialize()

        response = await client.generate(
            model="gemini-2.5-flash",
            parts=[text_part("Hello")],
        )
        print(response.text)

        await client.close()
    """

    def __init__(self, api_key: Optional[str] = None, base_url: str = None, timeout: float = 60):
        """
        Initialize the client

        Args:
            api_key: API key (defaults to GEMINI_API_KEY, then API_KEY env var)
            base_url: REST base URL
            timeout: Total request timeout in seconds
        """
        self.api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout

        self._session: Optional[aiohttp.ClientSession] = None
        self._status = GenAIStatus(is_configured=bool(self.api_key))

    async def initialize(self):
        """Initialize the HTTP session"""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout, connect=10)
            self._session = aiohttp.ClientSession(timeout=timeout)

    async def close(self):
        """Close the HTTP session"""
        if self._session and not self._session.closed:
            await self._session.close()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def status(self) -> GenAIStatus:
        return self._status

    def build_request(
        self,
        parts: List[Dict[str, Any]],
        response_schema: Optional[Dict[str, Any]] = None,
        thinking_budget: Optional[int] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_config: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Assemble a generateContent request body"""
        body: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}

        generation_config: Dict[str, Any] = {}
        if response_schema is not None:
            generation_config["responseMimeType"] = "application/json"
            generation_config["responseSchema"] = response_schema
        if thinking_budget is not None:
            generation_config["thinkingConfig"] = {"thinkingBudget": thinking_budget}
        if generation_config:
            body["generationConfig"] = generation_config

        if tools:
            body["tools"] = tools
        if tool_config:
            body["toolConfig"] = tool_config
        return body

    async def generate(
        self,
        model: str,
        parts: List[Dict[str, Any]],
        response_schema: Optional[Dict[str, Any]] = None,
        thinking_budget: Optional[int] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_config: Optional[Dict[str, Any]] = None,
    ) -> GenAIResponse:
        """
        Run one generateContent call

        Raises:
            GenAIError: missing key, transport failure, non-200 or malformed response
        """
        if not self.is_configured:
            raise GenAIError("GEMINI_API_KEY not configured")

        await self.initialize()

        url = f"{self.base_url}/models/{model}:generateContent"
        body = self.build_request(parts, response_schema, thinking_budget, tools, tool_config)

        self._status.request_count += 1
        self._status.last_request_time = time.time()

        try:
            async with self._session.post(
                url,
                params={"key": self.api_key},
                json=body,
            ) as response:
                if response.status != 200:
                    detail = await response.text()
                    raise GenAIError(f"AI service returned HTTP {response.status}: {detail[:200]}")
                try:
                    payload = await response.json()
                except ValueError as e:
                    raise GenAIError(f"AI service returned malformed JSON: {e}") from e
        except GenAIError as e:
            self._record_error(str(e))
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._record_error(str(e) or type(e).__name__)
            raise GenAIError(f"AI service request failed: {e}") from e

        if not isinstance(payload, dict):
            self._record_error(f"Unexpected response payload: {type(payload).__name__}")
            raise GenAIError("AI service returned an unexpected payload")

        self._status.last_success_time = time.time()
        return self.parse_response(payload)

    def _record_error(self, message: str):
        self._status.error_count += 1
        self._status.last_error = message
        print(f"[AI] Request error: {message}")

    @staticmethod
    def parse_response(payload: Dict[str, Any]) -> GenAIResponse:
        """Concatenate the non-thought text parts of the first candidate"""
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return GenAIResponse()

        candidate = candidates[0]
        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            parts = []
        text = "".join(
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str) and not part.get("thought")
        )
        metadata = candidate.get("groundingMetadata")
        grounding = metadata.get("groundingChunks") if isinstance(metadata, dict) else None
        if not isinstance(grounding, list):
            grounding = None
        return GenAIResponse(text=text, grounding_chunks=grounding)
