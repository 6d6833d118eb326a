import json
from collections.abc import Mapping
from pathlib import Path, PurePosixPath

from bulkgen.generation.prompt_loader import load_prompt_template


class PromptBuilder:
    """Combines a file's name and content with the agent config into one prompt."""

    def __init__(self, template_path: Path | None = None) -> None:
        self._template = load_prompt_template(template_path)

    def build(
        self,
        *,
        file_name: str,
        file_content: str,
        agent_config: Mapping[str, object],
    ) -> str:
        return self._template.format(
            file_name=file_name,
            file_extension=PurePosixPath(file_name).suffix or "text",
            file_content=file_content,
            agent_config=json.dumps(
                dict(agent_config), indent=2, ensure_ascii=False, default=str
            ),
        )
