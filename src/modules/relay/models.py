from dataclasses import dataclass
from typing import Any

from src.config.settings import Settings

DEFAULT_MODEL = "llama-3.1-8b-instant"
DEFAULT_MAX_TOKENS = 512
TEMPERATURE = 0.15


@dataclass(frozen=True)
class Provider:
    name: str
    api_key: str
    endpoint: str

    def __repr__(self) -> str:
        return f"Provider(name={self.name!r}, endpoint={self.endpoint!r})"


# First configured key wins.
PROVIDER_ENDPOINTS: list[tuple[str, str, str]] = [
    ("groq", "groq_api_key", "https://api.groq.com/openai/v1/chat/completions"),
    ("openai", "openai_api_key", "https://api.openai.com/v1/chat/completions"),
]


def resolve_provider(settings: Settings) -> Provider | None:
    for name, key_field, endpoint in PROVIDER_ENDPOINTS:
        api_key = getattr(settings, key_field)
        if api_key:
            return Provider(name=name, api_key=api_key, endpoint=endpoint)
    return None


@dataclass
class UpstreamResult:
    ok: bool
    status: int
    text: str = ""
    json: Any = None
    error: str | None = None
