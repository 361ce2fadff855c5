"""Provider registry for resolving judge provider names to classes.

Supports builtin names ("openai", "anthropic") and dotted paths to a
custom BaseProvider subclass ("my.module.MyProvider").
"""

from __future__ import annotations

import importlib

from evalstudio.judge.providers.base import BaseProvider

# Lazily imported -- the provider SDK must be installed.
BUILTIN_PROVIDERS: dict[str, str] = {
    "openai": "evalstudio.judge.providers.openai_provider.OpenAIProvider",
    "anthropic": "evalstudio.judge.providers.anthropic_provider.AnthropicProvider",
}


def get_provider(name: str) -> BaseProvider:
    """Resolve a provider by name or dotted path and return an instance.

    Raises:
        ValueError: If the name is neither builtin nor a dotted path.
        ImportError: If a custom provider module cannot be imported.
        TypeError: If the resolved class is not a BaseProvider subclass.
    """
    if name in BUILTIN_PROVIDERS:
        dotted_path = BUILTIN_PROVIDERS[name]
    elif "." in name:
        dotted_path = name
    else:
        available = ", ".join(sorted(BUILTIN_PROVIDERS))
        raise ValueError(
            f"Unknown judge adapter '{name}'. "
            f"Available builtin adapters: {available}. "
            f"For custom providers, give the full dotted path "
            f"(e.g., 'my.module.MyProvider')."
        )

    module_path, _, class_name = dotted_path.rpartition(".")
    if not module_path or not class_name:
        raise ValueError(
            f"Invalid provider path '{dotted_path}'. "
            f"Expected format: 'module.path.ClassName'."
        )

    module = importlib.import_module(module_path)

    try:
        cls = getattr(module, class_name)
    except AttributeError:
        raise ImportError(
            f"Module '{module_path}' has no attribute '{class_name}'."
        ) from None

    if not isinstance(cls, type) or not issubclass(cls, BaseProvider):
        raise TypeError(
            f"'{dotted_path}' is not a subclass of BaseProvider. "
            f"Custom providers must inherit from "
            f"evalstudio.judge.providers.base.BaseProvider."
        )

    return cls()
