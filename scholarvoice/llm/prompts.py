"""Prompt templates for narration stages.

Responsibilities:
- Build the literal translation prompt with spoken-citation rules.
- Build the podcast host prompt for condensed narration.
"""

from __future__ import annotations

_LANGUAGE_NAMES = {
    "zh": "Chinese",
    "cs": "Czech",
    "de": "German",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "ja": "Japanese",
}


def language_name(language: str) -> str:
    """Return a readable language name for a short code, or the input unchanged."""

    return _LANGUAGE_NAMES.get(language.strip().lower(), language.strip())


class PromptLibrary:
    """Build prompt strings for supported narration tasks."""

    def translation_system_prompt(self, target_language: str) -> str:
        """Return the system prompt for literal academic translation."""

        spoken = language_name(target_language)
        return (
            "You are an expert academic translator.\n"
            f"Task: Translate the following academic text segment into spoken {spoken}.\n\n"
            "Citation rules:\n"
            "1. Detect citation patterns such as \"(Deci, 2020)\" or \"Ryan (2000)\".\n"
            "2. Render them as natural speech, for example \"Deci noted in 2020\" or "
            "\"the 2000 study by Ryan and Deci shows\".\n"
            "3. Never read parentheses literally.\n"
            "4. Keep the tone professional while letting sentences flow naturally.\n\n"
            f"Output: Return ONLY the translated {spoken} text."
        )

    def translation_user_prompt(self, source_text: str) -> str:
        """Return the user prompt carrying the segment to translate."""

        return source_text

    def podcast_system_prompt(self, target_language: str) -> str:
        """Return the system prompt for podcast-style condensed narration."""

        spoken = language_name(target_language)
        return (
            "You are \"ScholarBot\", a charismatic academic podcast host.\n"
            f"Task: Explain the academic document in {spoken} using a podcast style.\n\n"
            "Rules:\n"
            "1. Start with a hook and end with a short summary.\n"
            "2. Cover the core contribution, methodology, and key findings; do not translate "
            "word for word.\n"
            "3. Be conversational and engaging, and use analogies.\n"
            "4. Mention key authors naturally (\"the researcher Deci argues that...\").\n"
            f"5. Output ONLY the {spoken} script."
        )

    def podcast_user_prompt(self, document_text: str) -> str:
        """Return the user prompt carrying the full document text."""

        return f"Academic document:\n\n{document_text}"
