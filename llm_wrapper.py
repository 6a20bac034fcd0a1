"""
LLM wrapper for the symptom analysis endpoint.

Provides:
- build_messages: system + user chat messages for a symptom description
- call_openai_llm: one chat-completion call, returns the raw text
- analyze_symptoms: validates input and configuration, returns the analysis text
- AnalysisError and subclasses, mapped to HTTP errors by app.py
"""

import logging
from typing import Dict, List, Optional

from openai import OpenAI

from config import Settings, get_settings

logger = logging.getLogger("symptom_checker.llm")

SYSTEM_PROMPT = (
    "You are a medical professional analyzing patient symptoms. Provide a detailed analysis "
    "of possible conditions, their descriptions, and suggested treatments. Be professional and clear."
)
USER_PROMPT_TEMPLATE = "Please analyze these symptoms: {symptoms}"


class AnalysisError(Exception):
    """Symptom analysis could not be produced."""


class MissingApiKeyError(AnalysisError):
    def __init__(self):
        super().__init__("OpenAI API key is not configured")


class EmptySymptomsError(AnalysisError):
    def __init__(self):
        super().__init__("Symptoms are required")


class EmptyAnalysisError(AnalysisError):
    def __init__(self):
        super().__init__("No analysis available from the AI model")


def build_messages(symptoms: str) -> List[Dict[str, str]]:
    # plain replace, symptom text may itself contain braces
    user_msg = USER_PROMPT_TEMPLATE.replace("{symptoms}", symptoms)
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_msg},
    ]


def make_client(settings: Settings) -> OpenAI:
    if not settings.has_api_key:
        raise MissingApiKeyError()
    return OpenAI(api_key=settings.openai_api_key, timeout=settings.openai_timeout)


def call_openai_llm(client: OpenAI, symptoms: str, model: str) -> str:
    """
    Returns the raw model text (possibly empty).
    Client errors propagate to the caller.
    """
    resp = client.chat.completions.create(
        model=model,
        messages=build_messages(symptoms),
    )
    if not resp.choices:
        return ""
    return resp.choices[0].message.content or ""


def analyze_symptoms(symptoms: str, client: Optional[OpenAI] = None,
                     settings: Optional[Settings] = None) -> str:
    if symptoms is None or not symptoms.strip():
        raise EmptySymptomsError()

    settings = settings or get_settings()
    logger.info("OpenAI API key configured: %s", settings.has_api_key)
    if client is None:
        client = make_client(settings)

    logger.info("Sending %d characters of symptoms to %s", len(symptoms), settings.openai_model)
    try:
        text = call_openai_llm(client, symptoms, settings.openai_model)
    except Exception as e:
        logger.exception("Error analyzing symptoms")
        raise AnalysisError(f"Failed to analyze symptoms: {e}") from e

    text = text.strip()
    if not text:
        raise EmptyAnalysisError()
    logger.debug("Received analysis (%d characters)", len(text))
    return text
