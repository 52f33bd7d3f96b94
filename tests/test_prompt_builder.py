"""Tests for generation prompts and code extraction."""

from specforge.services.prompt_builder import PREVIOUS_CLIENT_HEADING, build_generation_prompt, extract_code


def test_first_generation_prompt():
    prompt = build_generation_prompt('{"openapi": "3.0.0"}', "1.0.0")
    assert "OpenAPI specification" in prompt
    assert '"1.0.0"' in prompt
    assert prompt.endswith('{"openapi": "3.0.0"}')
    assert PREVIOUS_CLIENT_HEADING not in prompt


def test_update_prompt_embeds_previous_client():
    prompt = build_generation_prompt("openapi: 3.0.0", "1.0.1", previous_client="export const old = 1;")
    assert f"{PREVIOUS_CLIENT_HEADING}\nexport const old = 1;" in prompt
    assert "Here's the new API specification:\nopenapi: 3.0.0" in prompt
    assert '"1.0.1"' in prompt


def test_extract_fenced_block():
    text = "Sure!\n```javascript\nconst a = 1;\n```\nAnything else?"
    assert extract_code(text) == "const a = 1;"


def test_extract_first_block_only():
    text = "```js\nfirst();\n```\n\n```js\nsecond();\n```"
    assert extract_code(text) == "first();"


def test_extract_without_language_tag():
    assert extract_code("```\nplain();\n```") == "plain();"


def test_extract_falls_back_to_full_text():
    assert extract_code("const unfenced = true;") == "const unfenced = true;"
