"""Utility for loading system prompts from files."""

from pathlib import Path
from typing import Dict, Optional, Tuple

from policy_bot.config import settings
from .logger import get_logger

logger = get_logger(__name__)

# cache loaded prompts
_prompt_cache: Dict[Tuple[str, str], str] = {}


def load_prompt(name: str, prompts_dir: Optional[Path] = None) -> str:
    """
    Load a system prompt from file.

    Prompts are cached after first load.

    Args:
        name: Prompt file stem (e.g. "policy_assistant")
        prompts_dir: Directory to read from (defaults to settings.PROMPTS_DIR)

    Returns:
        System prompt string

    Raises:
        FileNotFoundError: If the prompt file does not exist

    Example:
        >>> prompt = load_prompt("policy_assistant")
        >>> "ONLY" in prompt
        True
    """
    prompts_dir = prompts_dir or settings.PROMPTS_DIR
    key = (str(prompts_dir), name)
    if key in _prompt_cache:
        return _prompt_cache[key]

    prompt_file = prompts_dir / f"{name}.txt"

    if not prompt_file.exists():
        logger.error(f"Prompt file not found: {prompt_file}")
        raise FileNotFoundError(f"Prompt file not found: {prompt_file}")

    prompt = prompt_file.read_text(encoding="utf-8")
    _prompt_cache[key] = prompt
    logger.info(f"Loaded prompt {name} ({len(prompt)} chars)")
    return prompt


def get_policy_assistant_prompt() -> str:
    """Get the policy assistant system prompt."""
    return load_prompt("policy_assistant")


def clear_prompt_cache() -> None:
    """Clear the prompt cache (useful for testing)."""
    _prompt_cache.clear()
    logger.info("Prompt cache cleared")
