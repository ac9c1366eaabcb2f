# Provider adapters submodule
from app.domain.providers.adapters.chat_completions import (
    ChatCompletionsAdapter,
    ChatGPTAdapter,
    DeepSeekAdapter,
)
from app.domain.providers.adapters.gemini import GeminiAdapter

__all__ = [
    "ChatCompletionsAdapter",
    "ChatGPTAdapter",
    "DeepSeekAdapter",
    "GeminiAdapter",
]
