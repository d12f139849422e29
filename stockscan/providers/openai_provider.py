import json
from collections.abc import Sequence
from typing import Any

import httpx
import openai

from stockscan.logging.logger import Log
from stockscan.normalization.exceptions import PayloadValidationError
from stockscan.normalization.validator import build_control_rows, build_transaction
from stockscan.processor.models import ControlRows, ExtractedTransaction, ProcessedDocument
from stockscan.providers.base import BaseRemoteProvider
from stockscan.providers.exceptions import ProviderError, ProviderNetworkError
from stockscan.providers.models import ChatMessage
from stockscan.providers.prompt_loader import load_json_schema, load_prompt


class OpenAIProvider(BaseRemoteProvider):
    """Remote provider built on the OpenAI-compatible chat completions API.

    Serves OpenAI itself and every service exposing the same API under a
    different base URL (Gemini, OpenRouter, Groq, Ollama, ...).
    """

    EXTRACTION_TEMPERATURE = 0.0
    ANSWER_TEMPERATURE = 0.2

    def __init__(
        self,
        *,
        name: str,
        label: str,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self.name = name
        self.label = label
        self._api_key = api_key
        self._model = model
        self._client: openai.OpenAI | None = None
        if api_key:
            self._client = openai.OpenAI(
                api_key=api_key,
                timeout=timeout_seconds,
                base_url=base_url,
            )
        self._transaction_prompt = load_prompt("transaction_prompt.txt")
        self._control_sheet_prompt = load_prompt("control_sheet_prompt.txt")
        self._document_user_prompt = load_prompt("document_user_prompt.txt")
        self._assistant_prompt = load_prompt("assistant_system_prompt.txt")
        self._transaction_schema = load_json_schema("transaction_schema.json")
        self._control_sheet_schema = load_json_schema("control_sheet_schema.json")

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def extract_transaction(self, document: ProcessedDocument) -> ExtractedTransaction:
        data = self._request_document_json(
            document,
            instruction=self._transaction_prompt,
            schema_name="transaction_extraction",
            schema=self._transaction_schema,
        )
        try:
            return build_transaction(data)
        except PayloadValidationError as exc:
            raise ProviderError(f"Malformed transaction response: {exc}") from exc

    def extract_control_sheet(self, document: ProcessedDocument) -> ControlRows:
        data = self._request_document_json(
            document,
            instruction=self._control_sheet_prompt,
            schema_name="control_sheet_extraction",
            schema=self._control_sheet_schema,
        )
        try:
            return build_control_rows(data)
        except PayloadValidationError as exc:
            raise ProviderError(f"Malformed control sheet response: {exc}") from exc

    def answer(
        self,
        context: str,
        question: str,
        history: Sequence[ChatMessage] = (),
    ) -> str:
        messages: list[dict[str, Any]] = [{"role": "system", "content": self._assistant_prompt}]
        for message in history:
            role = "assistant" if message.role == "assistant" else "user"
            messages.append({"role": role, "content": message.text})
        messages.append({
            "role": "user",
            "content": f"Inventory data (JSON):\n{context}\n\nUser question:\n{question}",
        })
        return self._create_chat_completion(
            messages=messages,
            temperature=self.ANSWER_TEMPERATURE,
        )

    def _request_document_json(
        self,
        document: ProcessedDocument,
        *,
        instruction: str,
        schema_name: str,
        schema: dict[str, object],
    ) -> Any:
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": instruction},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": self._document_user_prompt},
                    {"type": "image_url", "image_url": {"url": document.as_data_url()}},
                ],
            },
        ]
        raw = self._create_chat_completion(
            messages=messages,
            temperature=self.EXTRACTION_TEMPERATURE,
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                },
            },
        )
        Log.debug(f"{self.label} raw response:\n{raw}")
        return self._parse_json(raw)

    def _create_chat_completion(
        self,
        *,
        messages: list[dict[str, Any]],
        temperature: float,
        response_format: dict[str, Any] | None = None,
    ) -> str:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "temperature": temperature,
            "messages": messages,
        }
        if response_format is not None:
            kwargs["response_format"] = response_format
        if self._client is None:
            raise ProviderError("no API key configured")
        try:
            response = self._client.chat.completions.create(**kwargs)
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ProviderNetworkError(f"network error: {exc}") from exc
        except openai.APIError as exc:
            raise ProviderNetworkError(f"API error: {exc}") from exc

        if not response.choices:
            raise ProviderError("returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise ProviderError("returned an empty response")
        return content

    @staticmethod
    def _parse_json(raw: str) -> Any:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ProviderError(f"Invalid JSON response: {exc}") from exc
