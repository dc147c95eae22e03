"""
Vertex AI REST client for Gemini content generation.
"""
import json
import logging
from typing import Optional, Dict, Any

import requests
import google.auth
import google.auth.transport.requests
from google.oauth2 import service_account

from ...config import VERTEX_LOCATION, MODEL_NAME, LLM_TIMEOUT, MAX_OUTPUT_TOKENS

logger = logging.getLogger("llm_client")

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class VertexRestClient:
    """REST-based client for Vertex AI Gemini models."""

    def __init__(self,
                 project: str,
                 location: str = VERTEX_LOCATION,
                 model: str = MODEL_NAME,
                 credentials_json: Optional[str] = None,
                 timeout: int = LLM_TIMEOUT):
        self.project = project
        self.location = location
        self.model = model
        self.credentials_json = credentials_json
        self.base_url = f"https://{self.location}-aiplatform.googleapis.com/v1"
        self._token = None
        self.timeout = timeout

    def _model_resource(self, model: str) -> str:
        return f"projects/{self.project}/locations/{self.location}/publishers/google/models/{model}"

    def _refresh_token(self):
        """Refresh the OAuth token for API calls."""
        if self.credentials_json:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_json,
                scopes=[CLOUD_PLATFORM_SCOPE],
            )
        else:
            creds, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])

        auth_req = google.auth.transport.requests.Request()
        creds.refresh(auth_req)
        self._token = creds.token

    def _ensure_token(self):
        """Ensure we have a valid token, refreshing if needed."""
        if not self._token:
            self._refresh_token()

    def generate_content(
        self,
        prompt_text: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.0,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
        response_mime_type: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str:
        """Generate content using the Vertex AI REST API."""
        self._ensure_token()
        url = f"{self.base_url}/{self._model_resource(model or self.model)}:generateContent"

        body: Dict[str, Any] = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt_text}],
                }
            ],
            "generationConfig": {
                "temperature": float(temperature),
                "maxOutputTokens": int(max_output_tokens),
            },
        }

        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if response_mime_type:
            body["generationConfig"]["responseMimeType"] = response_mime_type

        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

        resp = requests.post(url, headers=headers, json=body, timeout=self.timeout)
        if resp.status_code == 401:
            # Token expired mid-session; refresh once and resend
            self._refresh_token()
            headers["Authorization"] = f"Bearer {self._token}"
            resp = requests.post(url, headers=headers, json=body, timeout=self.timeout)
        if resp.status_code >= 400:
            raise RuntimeError(f"Vertex REST error {resp.status_code}: {resp.text}")

        return self._parse_response_text(resp.json())

    def _parse_response_text(self, resp_json: Dict[str, Any]) -> str:
        """
        Parse response JSON to extract text content.
        Tries Vertex schema first, then falls back to alternatives.
        """
        cands = resp_json.get("candidates", [])
        if cands:
            content = cands[0].get("content", {})
            parts = content.get("parts", [])
            if isinstance(parts, list):
                texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
                if texts:
                    return "".join(texts)
            if isinstance(content, dict) and isinstance(content.get("text"), str):
                return content["text"]

        if isinstance(resp_json.get("text"), str):
            return resp_json["text"]

        # Nothing usable; callers treat empty text as a blank reply
        logger.warning("No text in Vertex response: %s", json.dumps(resp_json, separators=(",", ":")))
        return ""

    def generate_json(self,
                      prompt: str,
                      system_instruction: Optional[str] = None,
                      temperature: float = 0.0,
                      model: Optional[str] = None) -> Dict[str, Any]:
        """
        Generate a JSON object from the model, tolerating fences and chatter.

        Raises:
            ValueError: If the reply holds no JSON object
        """
        text = self.generate_content(
            prompt,
            system_instruction=system_instruction,
            temperature=temperature,
            response_mime_type="application/json",
            model=model,
        )
        logger.debug("Raw LLM output: %r", text)
        return extract_json_object(text)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse a JSON object from model text, tolerating fences and chatter."""
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end <= start:
            raise ValueError(f"No JSON found in LLM response: {text!r}")
        try:
            parsed = json.loads(text[start:end + 1])
        except json.JSONDecodeError as e:
            raise ValueError(f"Could not extract valid JSON from LLM response: {text!r}") from e

    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object from LLM, got {type(parsed).__name__}")
    return parsed
