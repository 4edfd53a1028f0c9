"""Prompt text for the personas, the idol hint and the sentiment classifier.

Each prompt is a ``.txt`` file shipped with the package. A file of the same
name in ``./prompts/`` under the working directory takes precedence, so a
deployment can restyle Toodles without code changes.
"""

from functools import lru_cache
from pathlib import Path

PACKAGE_PROMPTS = Path(__file__).parent
OVERRIDE_DIRNAME = "prompts"


def prompt_paths(name: str) -> list[Path]:
    """Candidate files for a prompt, highest precedence first."""
    filename = f"{name}.txt"
    return [Path.cwd() / OVERRIDE_DIRNAME / filename, PACKAGE_PROMPTS / filename]


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Read a prompt's raw text.

    Raises:
        FileNotFoundError: If no candidate file exists
    """
    candidates = prompt_paths(name)
    for path in candidates:
        if path.is_file():
            return path.read_text(encoding="utf-8")

    searched = "\n".join(f"  - {path}" for path in candidates)
    raise FileNotFoundError(f"Prompt '{name}' not found. Searched:\n{searched}")


def render_prompt(name: str, **values: str) -> str:
    """Load a prompt and substitute its ``{placeholders}``.

    Raises:
        KeyError: If the prompt uses a placeholder missing from ``values``
    """
    return load_prompt(name).strip().format(**values)


def clear_cache() -> None:
    """Forget loaded prompts so edited files are read again."""
    load_prompt.cache_clear()


__all__ = ["clear_cache", "load_prompt", "prompt_paths", "render_prompt"]
