from .pagerun_config import DEFAULT_TIMEOUT_MS, PagerunConfig

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "PagerunConfig",
]
