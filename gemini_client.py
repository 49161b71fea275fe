import os
import sys

from dotenv import load_dotenv
from google import genai
from google.genai import types

load_dotenv()

AVAILABLE_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-3-flash-preview",
    "gemini-3-pro-preview",
    "gemini-2.0-flash",
]

THINKING_MODELS = {
    "gemini-3-pro-preview",
    "gemini-3-flash-preview",
    "gemini-2.5-pro",
    "gemini-2.5-flash",
}

DEFAULT_MODEL = os.environ.get("GEMINI_MODEL", AVAILABLE_MODELS[0])

HTTP_TIMEOUT_MS = 120_000

_client = None


class NetworkError(Exception):
    """The Gemini call failed or came back without any text."""


def get_client():
    global _client
    if _client is None:
        _client = genai.Client(
            api_key=os.environ["GEMINI_API_KEY"],
            http_options=types.HttpOptions(timeout=HTTP_TIMEOUT_MS),
        )
    return _client


def build_config(model):
    kwargs = {"response_mime_type": "application/json"}
    if model in THINKING_MODELS:
        kwargs["thinking_config"] = types.ThinkingConfig(thinking_level="low")
    return types.GenerateContentConfig(**kwargs)


def generate_text(prompt, model=None):
    model = model or DEFAULT_MODEL
    try:
        response = get_client().models.generate_content(
            model=model,
            contents=prompt,
            config=build_config(model),
        )
    except Exception as e:
        raise NetworkError(str(e)) from e

    if not response.text:
        raise NetworkError(f"{model} returned no text")
    return response.text


if __name__ == "__main__":
    from shader_extract import ShaderResult, request_shader
    from shader_prompt import build_prompt

    description = " ".join(sys.argv[1:]) or "a slowly rotating rainbow plasma"
    result = request_shader(build_prompt(description), generate_text)
    if isinstance(result, ShaderResult):
        print(result.display)
    else:
        print(f"error: {result.message}")
        print(result.raw_code)
