# Generator package

# Makes generate/ importable and exposes key interfaces.

from .generator import TextGenerator, build_generator, build_model_client
from .types import ModelParams
from .clients.echo_dev_client import EchoDevClient
from .clients.gemini_client import GeminiClient

__all__ = ["TextGenerator", "build_generator", "build_model_client", "ModelParams", "EchoDevClient", "GeminiClient"]
