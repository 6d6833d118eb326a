import httpx
import openai

from bulkgen.generation.client_base import BaseChatClient
from bulkgen.generation.exceptions import (
    GenerationError,
    GenerationTimeoutError,
    GenerationUpstreamError,
)


class OpenAIClientAdapter(BaseChatClient):
    """Chat client adapter built on the OpenAI-compatible chat completions API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        base_url: str | None = None,
        max_tokens: int = 4000,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )
        self._max_tokens = max_tokens

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=self._max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise GenerationTimeoutError(
                f"AI provider timed out: {exc}"
            ) from exc
        except openai.RateLimitError as exc:
            raise GenerationUpstreamError(
                "Rate limit exceeded. Please try again later."
            ) from exc
        except openai.AuthenticationError as exc:
            raise GenerationUpstreamError(
                "Invalid API key. Please check the provider configuration."
            ) from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise GenerationUpstreamError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise GenerationUpstreamError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise GenerationError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise GenerationError("AI returned empty response")
        return content
