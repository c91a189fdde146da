from __future__ import annotations
import logging
import httpx
from typing import Any, AsyncIterator, Dict, List, Optional
from .errors import GenerationServiceError
from .settings import settings

logger = logging.getLogger(__name__)


class CompletionClient:
	"""Thin async client for an OpenAI-style chat-completions endpoint."""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.llm_api_key
		self.model = model or settings.llm_model
		self.base_url = base_url or settings.llm_base_url
		self._headers = {
			"Authorization": f"Bearer {self.api_key}",
			"Content-Type": "application/json",
		}
		self._client = httpx.AsyncClient(timeout=timeout or settings.llm_timeout_seconds, transport=transport)

	async def complete(
		self,
		messages: List[Dict[str, str]],
		*,
		temperature: float = 0.8,
		max_tokens: Optional[int] = None,
	) -> str:
		"""Send ``messages`` and return the first choice's message content.

		Every transport-level problem (network error, non-2xx status, missing
		content) is raised as GenerationServiceError.
		"""
		if not self.api_key:
			raise GenerationServiceError("PERPLEXITY_API_KEY is not configured")
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": messages,
			"temperature": temperature,
			"max_tokens": max_tokens or settings.llm_max_tokens,
		}
		try:
			r = await self._client.post(self.base_url, headers=self._headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			raise GenerationServiceError(
				f"Completion API error: {http_err.response.status_code} - {http_err.response.text}"
			) from http_err
		except httpx.RequestError as net_err:
			raise GenerationServiceError(f"Completion API unreachable: {net_err}") from net_err
		try:
			data = r.json()
			content = data["choices"][0]["message"]["content"]
		except (ValueError, KeyError, IndexError, TypeError) as err:
			raise GenerationServiceError(f"Unexpected completion response: {r.text}") from err
		if not isinstance(content, str) or not content.strip():
			raise GenerationServiceError(f"Empty completion content: {r.text}")
		return content

	async def aclose(self) -> None:
		await self._client.aclose()


async def get_completion_client() -> AsyncIterator[CompletionClient]:
	client = CompletionClient()
	try:
		yield client
	finally:
		await client.aclose()
