"""Prompt construction and code extraction for client generation."""

import re

PREVIOUS_CLIENT_HEADING = "Here's the previous client code:"

_FENCED_BLOCK = re.compile(r"```[\w+-]*[ \t]*\n?(.*?)```", re.DOTALL)

_INTRO = (
    "Generate a JavaScript client library for the following OpenAPI specification.\n"
    "The client should provide functions for all the endpoints defined in the spec."
)

_FORMAT_RULES = (
    "Format the output as JavaScript code only, with detailed comments for each function."
)


def build_generation_prompt(spec_text: str, version: str | None, previous_client: str | None = None) -> str:
    """Build the generation prompt for one spec version.

    With ``previous_client`` the model is asked to update that code for the
    new spec instead of starting over; working out what changed is left to
    the model.
    """
    version_rule = f'Make sure to include the version "{version}" in a comment at the top of the file.'

    if previous_client:
        sections = [
            _INTRO,
            "I have a previous version of the client code and need to update it "
            "based on the new API specification.",
            f"{PREVIOUS_CLIENT_HEADING}\n{previous_client}",
            f"Here's the new API specification:\n{spec_text}",
            "Please focus on updating only the parts affected by the changes in the spec.\n"
            + _FORMAT_RULES,
            version_rule,
        ]
    else:
        sections = [
            _INTRO,
            _FORMAT_RULES,
            version_rule,
            f"Here's the OpenAPI specification:\n{spec_text}",
        ]
    return "\n\n".join(sections)


def extract_code(generated_text: str) -> str:
    """Return the body of the first fenced code block, or the whole text."""
    match = _FENCED_BLOCK.search(generated_text)
    if match:
        return match.group(1).strip()
    return generated_text
