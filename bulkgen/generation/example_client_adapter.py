"""Example chat client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseChatClient and register the provider in GeneratorFactory.
"""

from typing import ClassVar

from bulkgen.generation.client_base import BaseChatClient


class ExampleClientAdapter(BaseChatClient):
    """Example adapter that answers without any network call.

    Returns a fixed header followed by the user prompt, which makes outputs
    predictable in local development and tests.
    """

    RESPONSE_HEADER: ClassVar[str] = "# Generated by example provider\n"

    def __init__(self) -> None:
        pass

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        _ = model, temperature, system_prompt
        return f"{self.RESPONSE_HEADER}{user_prompt}"
