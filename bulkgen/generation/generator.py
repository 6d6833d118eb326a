"""AI-powered text generator for single project files."""

from collections.abc import Mapping

from bulkgen.generation.base import BaseGenerationClient
from bulkgen.generation.client_base import BaseChatClient
from bulkgen.logging.logger import Log


class Generator(BaseGenerationClient):
    """Sends assembled prompts to a chat client.

    The agent config may override ``model``, ``temperature`` and
    ``system_prompt`` for one job; everything else in it is only part of
    the prompt text.
    """

    def __init__(
        self,
        *,
        client: BaseChatClient,
        model: str,
        temperature: float = 0.1,
        system_prompt: str = "",
        configured: bool = True,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = self._clamp_temperature(temperature)
        self._system_prompt = system_prompt
        self._configured = configured

    def is_configured(self) -> bool:
        return self._configured and bool(self._model)

    def generate(self, prompt: str, config: Mapping[str, object]) -> str:
        model = self._option(config, "model", self._model)
        temperature = self._clamp_temperature(
            self._option(config, "temperature", self._temperature)
        )
        system_prompt = self._option(config, "system_prompt", self._system_prompt)
        Log.debug(f"Generation prompt for model {model}:\n{prompt}")

        response = self._client.create_chat_completion(
            model=str(model),
            temperature=temperature,
            system_prompt=str(system_prompt),
            user_prompt=prompt,
        )
        Log.debug(f"AI raw response:\n{response}")
        return response

    @staticmethod
    def _option(config: Mapping[str, object], key: str, default: object) -> object:
        value = config.get(key)
        return default if value in (None, "") else value

    @staticmethod
    def _clamp_temperature(value: object) -> float:
        try:
            temperature = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, min(2.0, temperature))
