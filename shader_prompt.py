SHADER_PROMPT = """\
You are a GLSL code generator for WebGL (Three.js ShaderMaterial).
A user will describe a visual effect or object.

Your job is to:
1. Infer whether it is a 2D screen-space shader or a 3D object shader.
2. Choose a simple geometry: plane, box, or sphere.
3. Generate vertex and fragment shader code.
4. Use the `iTime` and `iResolution` uniforms.
5. Make sure every GLSL function call matches a declared signature, with the right number and types of arguments.
6. There is no helper library. Implement every function you use; do not assume any helper exists.
7. Do not redeclare GLSL built-in functions such as refract, dot, normalize, mix, sin, clamp.
8. If you need a helper that GLSL does not provide, define it under a unique name, e.g. customRefract, fnNoise, myHelperFunc.

Three.js provides these automatically. Do NOT declare them:
- `attribute vec3 position;`
- `attribute vec2 uv;`
- `uniform mat4 modelViewMatrix;`
- `uniform mat4 projectionMatrix;`

Both shaders MUST define `void main()`.

Return ONLY a JSON object with this structure, nothing else:

{
  "mode": "2d" | "3d",
  "geometry": "plane" | "box" | "sphere",
  "vertex_shader": "VERTEX_SHADER_HERE",
  "fragment_shader": "FRAGMENT_SHADER_HERE"
}

Description:
"{description}"
"""

SHADER_PROMPT_2D = """\
Generate GLSL shaders for WebGL that render a fullscreen 2D visual effect on a quad drawn with `gl.drawArrays(gl.TRIANGLE_STRIP, 0, 4)`.

The effect should match the following description:
"{description}"

Requirements:
- The vertex shader must use the attribute `a_position` and write `gl_Position`.
- The fragment shader must use `precision mediump float`.
- Use `uniform vec2 iResolution` and `uniform float iTime` if needed.
- No 3D transforms or normals. Keep everything 2D and procedural.
- Both shaders MUST define `void main()`.

Your response MUST be a valid JSON object with the following structure and no other text:

{
  "vertex_shader": "<GLSL vertex shader code>",
  "fragment_shader": "<GLSL fragment shader code>"
}
"""

PROMPT_MODES = ("auto", "2d")

_TEMPLATES = {
    "auto": SHADER_PROMPT,
    "2d": SHADER_PROMPT_2D,
}


def build_prompt(description, mode="auto"):
    """Fill the prompt template for ``mode`` with the user's description.

    Templates hold literal JSON braces, so they are not str.format strings.
    """
    if mode not in _TEMPLATES:
        raise ValueError(f"Unknown prompt mode: {mode}")
    return _TEMPLATES[mode].replace("{description}", description.strip())
