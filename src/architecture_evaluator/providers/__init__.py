"""
Language-model providers used for description decomposition and narrative
explanations.

Bedrock is the primary provider; an OpenAI-compatible chat-completions
gateway is the fallback. The scoring core never depends on this package.
"""

from .base import LanguageModelProvider, strip_code_fences
from .bedrock import BedrockProvider
from .chain import Completion, ProviderChain
from .chat_completions import ChatCompletionsProvider

__all__ = [
    'LanguageModelProvider',
    'BedrockProvider',
    'ChatCompletionsProvider',
    'ProviderChain',
    'Completion',
    'strip_code_fences',
]
