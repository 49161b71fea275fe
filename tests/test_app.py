"""Tests for the Flask endpoints, with a fake generator in place of Gemini."""

import json

import pytest

from app import app
from gemini_client import NetworkError

VERTEX = "void main() { gl_Position = vec4(position, 1.0); }"
FRAGMENT = "void main() { gl_FragColor = vec4(1.0, 0.0, 0.0, 1.0); }"


class FakeGenerator:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def __call__(self, prompt, model=None):
        self.calls.append({"prompt": prompt, "model": model})
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def generator():
    fake = FakeGenerator()
    previous = app.config["SHADER_GENERATOR"]
    app.config["SHADER_GENERATOR"] = fake
    yield fake
    app.config["SHADER_GENERATOR"] = previous


@pytest.fixture
def client():
    app.config["TESTING"] = True
    return app.test_client()


def post(client, **body):
    return client.post("/api/generate", json=body)


class TestGenerate:
    def test_success(self, client, generator):
        generator.reply = "```json\n" + json.dumps({
            "mode": "3d", "geometry": "sphere",
            "vertex_shader": VERTEX, "fragment_shader": FRAGMENT,
        }) + "\n```"
        res = post(client, description="a red sphere")
        assert res.status_code == 200
        data = res.get_json()
        assert data["vertex_shader"] == VERTEX
        assert data["fragment_shader"] == FRAGMENT
        assert data["mode"] == "3d"
        assert data["geometry"] == "sphere"
        assert "// VERTEX SHADER" in data["raw_code"]
        assert "elapsed" in data

    def test_uses_requested_model_and_mode(self, client, generator):
        generator.reply = json.dumps({"vertex_shader": VERTEX, "fragment_shader": FRAGMENT})
        res = post(client, description="plasma", model="gemini-2.0-flash", mode="2d")
        assert res.status_code == 200
        call = generator.calls[0]
        assert call["model"] == "gemini-2.0-flash"
        assert "a_position" in call["prompt"]
        assert '"plasma"' in call["prompt"]

    def test_free_text_reply(self, client, generator):
        generator.reply = f"Vertex shader:\n{VERTEX}\n\nFragment shader:\n{FRAGMENT}"
        res = post(client, description="red")
        assert res.status_code == 200
        data = res.get_json()
        assert "mode" not in data
        assert data["fragment_shader"].endswith(FRAGMENT)

    def test_schema_mismatch(self, client, generator):
        generator.reply = json.dumps({"vertex_shader": VERTEX})
        res = post(client, description="red")
        assert res.status_code == 400
        assert res.get_json()["error"] == "Invalid JSON format - missing required shader fields"
        assert res.get_json()["raw_code"] == generator.reply

    def test_missing_main(self, client, generator):
        generator.reply = json.dumps({"vertex_shader": VERTEX, "fragment_shader": "// empty"})
        res = post(client, description="red")
        assert res.status_code == 400
        assert res.get_json()["error"] == "Generated shaders missing void main function"

    def test_unparseable_reply(self, client, generator):
        generator.reply = "Sorry, I can't help with that."
        res = post(client, description="red")
        assert res.status_code == 400
        assert res.get_json() == {
            "error": "Failed to parse LLM response as JSON",
            "raw_code": "Sorry, I can't help with that.",
            "elapsed": res.get_json()["elapsed"],
        }

    def test_network_error(self, client, generator):
        generator.error = NetworkError("quota exceeded")
        res = post(client, description="red")
        assert res.status_code == 400
        data = res.get_json()
        assert data["error"] == "Network or API error: quota exceeded"
        assert data["raw_code"] == ""

    def test_generate_shader_path(self, client, generator):
        generator.reply = json.dumps({"vertex_shader": VERTEX, "fragment_shader": FRAGMENT})
        res = client.post("/api/generate_shader", json={"description": "a red sphere"})
        assert res.status_code == 200
        assert res.get_json()["vertex_shader"] == VERTEX
        assert len(generator.calls) == 1


class TestRequestValidation:
    def test_empty_description(self, client, generator):
        res = post(client, description="   ")
        assert res.status_code == 400
        assert res.get_json()["error"] == "Description cannot be empty"
        assert generator.calls == []

    def test_missing_body(self, client, generator):
        res = client.post("/api/generate", data="not json")
        assert res.status_code == 400
        assert generator.calls == []

    def test_unknown_model(self, client, generator):
        res = post(client, description="red", model="gpt-4")
        assert res.status_code == 400
        assert "Unknown model" in res.get_json()["error"]
        assert generator.calls == []

    def test_unknown_mode(self, client, generator):
        res = post(client, description="red", mode="4d")
        assert res.status_code == 400
        assert "Unknown mode" in res.get_json()["error"]
        assert generator.calls == []

    def test_body_not_an_object(self, client, generator):
        res = client.post("/api/generate", json=[1, 2])
        assert res.status_code == 400
        assert res.get_json()["error"] == "Request body must be a JSON object"
        assert generator.calls == []

    def test_description_not_a_string(self, client, generator):
        res = post(client, description=5)
        assert res.status_code == 400
        assert res.get_json()["error"] == "Description must be a string"
        assert generator.calls == []


class TestIndex:
    def test_page_lists_models(self, client):
        res = client.get("/")
        assert res.status_code == 200
        page = res.get_data(as_text=True)
        assert "Shader Generator" in page
        assert 'value="gemini-2.0-flash"' in page
        assert "__MODEL_OPTIONS__" not in page
