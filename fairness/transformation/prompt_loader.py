from pathlib import Path

from fairness.transformation.exceptions import TransformationError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(name: str, path: Path | None = None) -> str:
    """Load a prompt template from a file.

    Args:
        name: Template name; resolves to ``prompts/{name}.txt``.
        path: Explicit path overriding the bundled template.

    Returns:
        The raw template string with a ``{text}`` placeholder.

    Raises:
        TransformationError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / f"{name}.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TransformationError(f"Failed to load prompt template: {exc}") from exc
