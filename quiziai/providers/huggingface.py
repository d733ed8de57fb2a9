"""
Hugging Face provider implementation.

Uses the Inference Providers router, which exposes an OpenAI-compatible
chat completions API. Models without an explicit provider suffix are
routed to the free hf-inference backend.
"""

from typing import Any, Optional

from .chat import ChatCompletionsProvider

DEFAULT_HF_MODEL = "HuggingFaceTB/SmolLM3-3B"
DEFAULT_ROUTE = "hf-inference"


def with_route(model: str, route: str = DEFAULT_ROUTE) -> str:
    """Append a router suffix unless the model already names one.

    >>> with_route("HuggingFaceTB/SmolLM3-3B")
    'HuggingFaceTB/SmolLM3-3B:hf-inference'
    """
    if ":" in model:
        return model
    return f"{model}:{route}"


class HuggingFaceProvider(ChatCompletionsProvider):
    """Provider for the Hugging Face router.

    Configuration:
        api_key: Hugging Face access token (required)
        base_url: Router URL (default: "https://router.huggingface.co/v1")
        default_model: Model id (default: "HuggingFaceTB/SmolLM3-3B")
        models: Models to try in order (overrides default_model)
    """

    name = "huggingface"
    DEFAULT_BASE_URL = "https://router.huggingface.co/v1"
    DEFAULT_MODELS = (DEFAULT_HF_MODEL,)

    def __init__(self, config: Optional[dict[str, Any]] = None):
        super().__init__(config)
        self.models = [with_route(model) for model in self.models]
