import json
from pathlib import Path

from stockscan.providers.exceptions import ProviderError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt(name: str, prompt_dir: Path | None = None) -> str:
    """Load a bundled prompt text file.

    Args:
        name: File name inside the prompt directory, e.g. "transaction_prompt.txt".
        prompt_dir: Directory override. Defaults to the bundled prompts/.

    Raises:
        ProviderError: if the file cannot be read.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / name
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ProviderError(f"Failed to load prompt {name}: {exc}") from exc


def load_json_schema(name: str, prompt_dir: Path | None = None) -> dict[str, object]:
    """Load a bundled JSON schema.

    Raises:
        ProviderError: if the file cannot be read or is not a JSON object.
    """
    raw = load_prompt(name, prompt_dir)
    try:
        schema = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ProviderError(f"Invalid JSON schema {name}: {exc}") from exc
    if not isinstance(schema, dict):
        raise ProviderError(f"JSON schema {name} must be an object")
    return schema
