from pathlib import Path

from bulkgen.generation.exceptions import GenerationError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the generation prompt template from a file.

    Args:
        path: Path to the prompt template file.
              Defaults to the bundled generation_prompt.txt.

    Returns:
        The raw template string with placeholders.

    Raises:
        GenerationError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "generation_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GenerationError(f"Failed to load prompt template: {exc}") from exc
