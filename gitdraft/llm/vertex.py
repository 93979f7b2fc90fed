"""Vertex AI (Gemini) LLM Client using the google-genai SDK"""

import os
from typing import Iterator

from gitdraft.llm.base import LLMClient, LLMResponse, LLMError


class VertexClient(LLMClient):
    """Gemini on Vertex AI. Needs a project id and application default credentials.

    GITDRAFT_CREDENTIALS, when set, points at a service-account key file used
    instead of GOOGLE_APPLICATION_CREDENTIALS for this client only.
    """

    DEFAULT_MODEL = "gemini-2.5-flash"
    DEFAULT_LOCATION = "us-central1"

    def __init__(self, model: str | None = None, project_id: str | None = None,
                 location: str | None = None):
        self.model = model or self.DEFAULT_MODEL
        self.project_id = project_id or os.environ.get("GOOGLE_CLOUD_PROJECT")
        self.location = location or os.environ.get("GOOGLE_CLOUD_LOCATION") or self.DEFAULT_LOCATION

        if not self.project_id:
            raise LLMError(
                "No Google Cloud project configured. Set one of:\n"
                "  export GOOGLE_CLOUD_PROJECT='my-project'\n"
                '  "project_id": "my-project" in .gitdraftrc'
            )

        try:
            from google import genai
        except ImportError:
            raise LLMError(
                "Google Gen AI SDK not installed. Run:\n"
                "  pip install google-genai"
            )

        self._client = self._create_client(genai)

    def _create_client(self, genai):
        credentials = os.environ.get("GITDRAFT_CREDENTIALS")
        original = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
        if credentials:
            os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = credentials
        try:
            return genai.Client(vertexai=True, project=self.project_id, location=self.location)
        except Exception as e:
            raise LLMError(f"Failed to create Vertex AI client: {e}")
        finally:
            # The SDK reads the variable at construction time only
            if credentials:
                if original is None:
                    os.environ.pop("GOOGLE_APPLICATION_CREDENTIALS", None)
                else:
                    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = original

    @property
    def name(self) -> str:
        return f"Vertex AI ({self.model})"

    def _config(self, system: str | None, temperature: float | None):
        from google.genai import types
        return types.GenerateContentConfig(
            temperature=self.DEFAULT_TEMPERATURE if temperature is None else temperature,
            system_instruction=system or None,
        )

    def generate(self, prompt: str, system: str | None = None,
                 temperature: float | None = None) -> LLMResponse:
        from google.auth import exceptions as auth_errors
        from google.genai import errors

        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=self._config(system, temperature),
            )
        except errors.APIError as e:
            raise LLMError(f"Vertex AI error ({e.code}): {e.message}")
        except auth_errors.GoogleAuthError as e:
            raise LLMError(f"Vertex AI authentication failed: {e}")

        if not response.candidates:
            raise LLMError("No candidates in Vertex AI response")
        text = response.text or ""
        if not text.strip():
            raise LLMError("Empty text in Vertex AI response")

        usage = response.usage_metadata
        tokens = (usage.total_token_count or 0) if usage else 0
        return LLMResponse(content=text.strip(), model=self.model, tokens_used=tokens)

    def stream(self, prompt: str, system: str | None = None,
               temperature: float | None = None) -> Iterator[str]:
        from google.auth import exceptions as auth_errors
        from google.genai import errors

        try:
            for chunk in self._client.models.generate_content_stream(
                model=self.model,
                contents=prompt,
                config=self._config(system, temperature),
            ):
                if chunk.text:
                    yield chunk.text
        except errors.APIError as e:
            raise LLMError(f"Vertex AI error ({e.code}): {e.message}")
        except auth_errors.GoogleAuthError as e:
            raise LLMError(f"Vertex AI authentication failed: {e}")
