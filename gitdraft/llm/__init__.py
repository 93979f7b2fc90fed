"""LLM Client Package"""

from gitdraft.llm.base import Draft, LLMClient, LLMResponse, LLMError
from gitdraft.llm.claude import ClaudeClient
from gitdraft.llm.ollama import OllamaClient
from gitdraft.llm.vertex import VertexClient
from gitdraft.llm.generator import DraftGenerator, clean_commit_message, parse_pull_request_content

AUTO_DETECT_ORDER = ["ollama", "claude", "vertex"]


def _build(provider: str, model: str | None, project_id: str | None, location: str | None) -> LLMClient:
    if provider == "claude":
        return ClaudeClient(model=model)
    if provider == "ollama":
        return OllamaClient(model=model)
    return VertexClient(model=model, project_id=project_id, location=location)


def get_client(provider: str = "auto", model: str | None = None,
               project_id: str | None = None, location: str | None = None) -> LLMClient:
    """Get an LLM client. Provider can be 'claude', 'ollama', 'vertex', or 'auto'."""
    if provider in AUTO_DETECT_ORDER:
        return _build(provider, model, project_id, location)

    if provider == "auto":
        for candidate in AUTO_DETECT_ORDER:
            try:
                return _build(candidate, model, project_id, location)
            except LLMError:
                continue

        raise LLMError(
            "No LLM provider available.\n\n"
            "Option 1 - Use Ollama (free, local):\n"
            "  1. Install: https://ollama.ai\n"
            "  2. Start: ollama serve\n"
            "  3. Pull: ollama pull mistral:7b\n\n"
            "Option 2 - Use Claude API:\n"
            "  export ANTHROPIC_API_KEY='your-key-here'\n\n"
            "Option 3 - Use Vertex AI:\n"
            "  export GOOGLE_CLOUD_PROJECT='your-project'"
        )

    raise LLMError(f"Unknown provider: {provider}. Use 'claude', 'ollama', 'vertex', or 'auto'.")


__all__ = [
    "Draft",
    "LLMClient",
    "LLMResponse",
    "LLMError",
    "ClaudeClient",
    "OllamaClient",
    "VertexClient",
    "DraftGenerator",
    "clean_commit_message",
    "parse_pull_request_content",
    "get_client",
]
