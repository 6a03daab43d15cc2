"""Utility functions for loading and filling prompt text files."""
from pathlib import Path
import typing as t

PROMPTS_DIR = Path(__file__).resolve().parent


def load_prompt(prompt_name: str, prompts_dir: t.Optional[str] = None) -> str:
    """
    Load a prompt from a text file.

    Args:
        prompt_name: Name of the prompt file (without .txt extension)
        prompts_dir: Optional custom path to prompts directory.
                    Defaults to this package's directory.

    Returns:
        The content of the prompt file, without the trailing newline.

    Raises:
        FileNotFoundError: If the prompt file doesn't exist.
    """
    prompt_file = Path(prompts_dir or PROMPTS_DIR) / f"{prompt_name}.txt"
    if not prompt_file.is_file():
        raise FileNotFoundError(f"Prompt file not found: {prompt_file}")
    return prompt_file.read_text(encoding="utf-8").rstrip("\n")


def render_prompt(prompt_name: str, **values: t.Any) -> str:
    """
    Load a prompt template and fill its ``{placeholders}``.

    Raises:
        KeyError: If the template references a value that was not given.
    """
    return load_prompt(prompt_name).format(**values)
