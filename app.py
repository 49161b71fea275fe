import time

from flask import Flask, request, jsonify

import gemini_client
from shader_extract import ShaderResult, request_shader
from shader_prompt import PROMPT_MODES, build_prompt

app = Flask(__name__)
app.config.setdefault("SHADER_GENERATOR", gemini_client.generate_text)


@app.route("/")
def index():
    options = "\n".join(
        f'          <option value="{m}"{" selected" if m == gemini_client.DEFAULT_MODEL else ""}>{m}</option>'
        for m in gemini_client.AVAILABLE_MODELS
    )
    return HTML_PAGE.replace("<!--__MODEL_OPTIONS__-->", options)


@app.route("/api/generate", methods=["POST"])
@app.route("/api/generate_shader", methods=["POST"])
def generate():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    description = data.get("description") or ""
    if not isinstance(description, str):
        return jsonify({"error": "Description must be a string"}), 400
    description = description.strip()
    model = data.get("model") or gemini_client.DEFAULT_MODEL
    mode = data.get("mode") or PROMPT_MODES[0]

    if not description:
        return jsonify({"error": "Description cannot be empty"}), 400

    if model not in gemini_client.AVAILABLE_MODELS:
        return jsonify({"error": f"Unknown model: {model}"}), 400

    if mode not in PROMPT_MODES:
        return jsonify({"error": f"Unknown mode: {mode}"}), 400

    generator = app.config["SHADER_GENERATOR"]
    prompt = build_prompt(description, mode)

    start = time.time()
    result = request_shader(prompt, lambda text: generator(text, model=model))
    elapsed = round(time.time() - start, 1)

    payload = result.to_json()
    payload["elapsed"] = elapsed
    if isinstance(result, ShaderResult):
        app.logger.info("Generated shaders with %s in %ss", model, elapsed)
        return jsonify(payload), 200

    app.logger.warning("Shader generation failed: %s", result.message)
    return jsonify(payload), 400


HTML_PAGE = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Gemini Shader Studio</title>
<style>
  *, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }

  body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    background: #0f0f0f;
    color: #e0e0e0;
    min-height: 100vh;
  }

  .panel {
    max-width: 880px;
    margin: 0 auto;
    display: flex;
    flex-direction: column;
  }

  .panel-header {
    padding: 16px 24px;
    border-bottom: 1px solid #1e1e1e;
    display: flex;
    align-items: center;
    gap: 10px;
  }
  .panel-header h2 { font-size: 0.95rem; font-weight: 600; color: #fff; }
  .panel-header .badge {
    font-size: 0.65rem;
    padding: 2px 8px;
    border-radius: 4px;
    font-weight: 500;
    text-transform: uppercase;
    letter-spacing: 0.5px;
    background: #2e1e3a;
    color: #a78bfa;
  }

  .panel-body {
    padding: 20px 24px 80px;
    display: flex;
    flex-direction: column;
    gap: 16px;
  }

  .controls { display: flex; gap: 10px; align-items: center; }

  select {
    background: #1a1a1a;
    color: #e0e0e0;
    border: 1px solid #2a2a2a;
    border-radius: 8px;
    padding: 8px 12px;
    font-size: 0.82rem;
    cursor: pointer;
    outline: none;
  }
  select:hover, select:focus { border-color: #8b5cf6; }

  .input-area { position: relative; }

  textarea {
    width: 100%;
    min-height: 120px;
    background: #1a1a1a;
    color: #e0e0e0;
    border: 1px solid #2a2a2a;
    border-radius: 10px;
    padding: 14px 14px 46px;
    font-size: 0.9rem;
    font-family: inherit;
    resize: vertical;
    outline: none;
    line-height: 1.5;
  }
  textarea:focus { border-color: #8b5cf6; }

  .input-footer { position: absolute; bottom: 15px; right: 13px; }

  button {
    background: #8b5cf6;
    color: #fff;
    border: none;
    border-radius: 8px;
    padding: 8px 20px;
    font-size: 0.82rem;
    font-weight: 500;
    cursor: pointer;
  }
  button:hover { background: #7c3aed; }
  button:disabled { opacity: 0.5; cursor: not-allowed; }

  .output-card {
    background: #1a1a1a;
    border: 1px solid #2a2a2a;
    border-radius: 10px;
    padding: 16px;
    white-space: pre-wrap;
    word-break: break-word;
    font-family: ui-monospace, SFMono-Regular, Menlo, monospace;
    font-size: 0.8rem;
    line-height: 1.6;
    display: none;
  }
  .output-card.visible { display: block; }
  .output-card.error { border-color: #ef4444; color: #fca5a5; background: #1a1111; }

  .status { font-size: 0.78rem; color: #888; min-height: 1.2em; }
  .status .timer { color: #8b5cf6; font-variant-numeric: tabular-nums; }
</style>
</head>
<body>

<div class="panel">
  <div class="panel-header">
    <h2>Shader Generator</h2>
    <span class="badge">GLSL</span>
  </div>
  <div class="panel-body">
    <div class="controls">
      <select id="model">
<!--__MODEL_OPTIONS__-->
      </select>
      <select id="mode">
        <option value="auto" selected>Three.js (2D / 3D)</option>
        <option value="2d">Fullscreen quad (2D)</option>
      </select>
    </div>
    <div class="input-area">
      <textarea id="description" placeholder="Describe a visual effect..." autofocus></textarea>
      <div class="input-footer">
        <button id="send" onclick="generateShader()">Generate</button>
      </div>
    </div>
    <div id="status" class="status"></div>
    <div id="output" class="output-card"></div>
  </div>
</div>

<script>
  const descriptionEl = document.getElementById('description');
  const modelEl = document.getElementById('model');
  const modeEl = document.getElementById('mode');
  const sendBtn = document.getElementById('send');
  const outputEl = document.getElementById('output');
  const statusEl = document.getElementById('status');

  descriptionEl.addEventListener('keydown', e => {
    if (e.key === 'Enter' && (e.metaKey || e.ctrlKey)) { e.preventDefault(); generateShader(); }
  });

  async function generateShader() {
    const description = descriptionEl.value.trim();
    if (!description) return;

    sendBtn.disabled = true;
    sendBtn.textContent = 'Generating...';
    statusEl.textContent = 'waiting for response...';
    outputEl.className = 'output-card';

    try {
      const res = await fetch('/api/generate', {
        method: 'POST',
        headers: { 'Content-Type': 'application/json' },
        body: JSON.stringify({ description, model: modelEl.value, mode: modeEl.value }),
      });
      const data = await res.json();
      if (res.ok) {
        const meta = [data.mode, data.geometry].filter(Boolean).join(' / ');
        statusEl.innerHTML = '<span class="timer">' + data.elapsed + 's</span> ' + meta;
        outputEl.className = 'output-card visible';
        outputEl.textContent = data.raw_code;
      } else {
        statusEl.textContent = data.error;
        outputEl.className = 'output-card visible error';
        outputEl.textContent = data.raw_code || data.error;
      }
    } catch (err) {
      statusEl.textContent = '';
      outputEl.className = 'output-card visible error';
      outputEl.textContent = 'Error: ' + err.message;
    } finally {
      sendBtn.disabled = false;
      sendBtn.textContent = 'Generate';
    }
  }
</script>
</body>
</html>
"""

if __name__ == "__main__":
    app.run(debug=True, port=5001, threaded=True)
