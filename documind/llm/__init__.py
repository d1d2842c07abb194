"""
AI Provider Package

Public API::

    from documind.llm import OpenRouterClient

    client = OpenRouterClient(settings)
    content = await client.complete(build_analysis_messages(name, data_uri))
"""

from documind.llm.openrouter import OpenRouterClient
from documind.llm.prompts import ANALYSIS_PROMPT, build_analysis_messages, plugins_for, to_data_uri

__all__ = [
    "ANALYSIS_PROMPT",
    "OpenRouterClient",
    "build_analysis_messages",
    "plugins_for",
    "to_data_uri",
]
