"""Ollama LLM Client for Local Models"""

import http.client
import json
import os
import socket
import urllib.error
import urllib.request
from typing import Iterator

from gitdraft.llm.base import LLMClient, LLMResponse, LLMError


class OllamaClient(LLMClient):
    """Ollama client for local models. Requires: ollama serve"""

    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_HOST = "http://localhost:11434"
    DEFAULT_TIMEOUT = 300  # 5 minutes for CPU inference
    NUM_PREDICT = 2000

    def __init__(self, model: str | None = None, host: str | None = None, verify: bool = True):
        self.model = model or self.DEFAULT_MODEL
        self.host = (host or os.environ.get("OLLAMA_HOST", self.DEFAULT_HOST)).rstrip('/')
        self.timeout = int(os.environ.get("GITDRAFT_TIMEOUT", self.DEFAULT_TIMEOUT))
        if verify:
            self._verify_connection()

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    def _verify_connection(self) -> None:
        """Check if Ollama is running and accessible."""
        try:
            req = urllib.request.Request(f"{self.host}/api/tags")
            with urllib.request.urlopen(req, timeout=5):
                pass
        except (urllib.error.URLError, OSError):
            raise LLMError("Ollama not running. Start with: ollama serve")

    def _payload(self, prompt: str, system: str | None, temperature: float | None, stream: bool) -> bytes:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": stream,
            "keep_alive": "10m",
            "options": {
                "temperature": self.DEFAULT_TEMPERATURE if temperature is None else temperature,
                "num_predict": self.NUM_PREDICT,
            }
        }
        if system:
            payload["system"] = system
        return json.dumps(payload).encode('utf-8')

    def _open(self, data: bytes):
        req = urllib.request.Request(
            f"{self.host}/api/generate",
            data=data,
            headers={"Content-Type": "application/json"},
        )
        return urllib.request.urlopen(req, timeout=self.timeout)

    def _translate(self, e: Exception) -> LLMError:
        """Map transport failures to a user-facing LLMError."""
        timeout_hint = (f"Request timed out after {self.timeout}s. Try:\n"
                        "  - Increase timeout: export GITDRAFT_TIMEOUT=600")
        if isinstance(e, urllib.error.HTTPError):
            if e.code == 404:
                return LLMError(f"Model '{self.model}' not found. Run: ollama pull {self.model}")
            return LLMError(f"Ollama error ({e.code}): {e.reason}")
        if isinstance(e, urllib.error.URLError):
            if isinstance(e.reason, socket.timeout):
                return LLMError(timeout_hint)
            if "Connection refused" in str(e):
                return LLMError("Ollama not running. Start with: ollama serve")
            return LLMError(f"Ollama request failed: {e}")
        if isinstance(e, socket.timeout):
            return LLMError(timeout_hint)
        if isinstance(e, json.JSONDecodeError):
            return LLMError("Invalid response from Ollama. Try a different model or simpler change.")
        if isinstance(e, http.client.HTTPException):
            return LLMError(f"Incomplete response from Ollama: {e}. The model may have run out of memory.")
        return LLMError(f"Connection to Ollama lost: {e}. Check that 'ollama serve' is still running.")

    def generate(self, prompt: str, system: str | None = None,
                 temperature: float | None = None) -> LLMResponse:
        """Call Ollama's generate API."""
        try:
            with self._open(self._payload(prompt, system, temperature, stream=False)) as response:
                result = json.loads(response.read().decode('utf-8'))
        except (urllib.error.URLError, socket.timeout, json.JSONDecodeError,
                http.client.HTTPException, OSError) as e:
            raise self._translate(e)

        return LLMResponse(
            content=result.get("response", "").strip(),
            model=self.model,
            tokens_used=result.get("eval_count", 0)
        )

    def stream(self, prompt: str, system: str | None = None,
               temperature: float | None = None) -> Iterator[str]:
        """Yield tokens from Ollama's newline-delimited JSON stream."""
        try:
            with self._open(self._payload(prompt, system, temperature, stream=True)) as response:
                for raw in response:
                    line = raw.decode('utf-8').strip()
                    if not line:
                        continue
                    chunk = json.loads(line)
                    if chunk.get("error"):
                        raise LLMError(f"Ollama error: {chunk['error']}")
                    if chunk.get("response"):
                        yield chunk["response"]
                    if chunk.get("done"):
                        break
        except (urllib.error.URLError, socket.timeout, json.JSONDecodeError,
                http.client.HTTPException, OSError) as e:
            raise self._translate(e)
