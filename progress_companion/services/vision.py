"""Vision provider: prompt construction and the HTTP call.

The provider only returns the model's text. Parsing and every number derived
from it live in vision_parsing and confidence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from progress_companion.core.config import Settings
from progress_companion.services.records import Sample, UserProfileSnapshot

logger = logging.getLogger(__name__)

BODY_COMPOSITION_PROMPT = """You are a scientific body composition analysis AI. Analyze this progress photo and provide body fat estimation.

CRITICAL REQUIREMENTS:
1. You MUST respond with ONLY valid JSON, no other text
2. Never show fake precision - use ranges (e.g., "18-21%", not "18.23%")
3. Always include confidence scores
4. Be conservative with estimates
5. Use neutral, scientific language

Analyze the image and respond with this exact JSON structure:
{
  "bodyFatMin": number (lower bound estimate, integer),
  "bodyFatMax": number (upper bound estimate, integer),
  "confidence": number (0-100),
  "photoQuality": number (0-100),
  "lightingQuality": number (0-100),
  "poseAlignment": number (0-100),
  "definition": number (0-100, overall visible muscle definition),
  "muscleFullness": number (0-100, overall muscle fullness),
  "visibleDefinition": ["list of visible muscle groups"],
  "estimatedFitnessLevel": "beginner|intermediate|advanced|elite",
  "observations": "neutral scientific observation about physique",
  "caveats": ["list of factors affecting accuracy"]
}

IMPORTANT GUIDELINES:
- Typical body fat ranges: Essential (2-5%), Athletes (6-13%), Fitness (14-17%), Average (18-24%), Above Average (25-31%)
- If image quality is poor, lower confidence and widen range
- Consider lighting, pose, clothing
- Never estimate below 5% or above 40%
- If you cannot reliably estimate, return confidence below 50 and note why"""


@dataclass(frozen=True)
class PhotoSet:
    front_photo_url: str
    side_photo_url: Optional[str] = None
    back_photo_url: Optional[str] = None
    lighting: str = "moderate"
    clothing: str = "light"
    fasted_state: Optional[bool] = None
    time_of_day: Optional[str] = None

    @property
    def image_urls(self) -> list[str]:
        return [u for u in (self.front_photo_url, self.side_photo_url) if u]


def build_scan_prompt(
    profile: Optional[UserProfileSnapshot],
    latest_weight: Optional[Sample],
    photos: PhotoSet,
) -> str:
    """Base prompt plus the user and photo context used for calibration."""
    p = profile or UserProfileSnapshot()
    user_lines = [
        f"Sex: {p.biological_sex}" if p.biological_sex else "Sex: Not provided",
        f"Height: {p.height_cm:g}cm" if p.height_cm else "Height: Not provided",
        f"Current Weight: {latest_weight.value:g}kg" if latest_weight else "Weight: Not provided",
    ]
    if p.activity_level:
        user_lines.append(f"Activity Level: {p.activity_level}")
    pose = "Front view + Side view" if photos.side_photo_url else "Front view"
    return "\n".join(
        [
            BODY_COMPOSITION_PROMPT,
            "",
            "USER CONTEXT (for calibration):",
            *user_lines,
            "",
            "PHOTO CONTEXT:",
            f"Lighting: {photos.lighting}",
            f"Clothing: {photos.clothing}",
            f"Pose: {pose}",
            "",
            "Analyze the photo and provide ONLY valid JSON response.",
        ]
    )


class VisionProvider(Protocol):
    async def analyze(self, prompt: str, image_urls: list[str]) -> str:
        """Return the raw text content of the model reply."""


class HttpVisionProvider:
    """OpenAI-compatible chat completions client. HTTP errors propagate."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpVisionProvider":
        return cls(
            base_url=settings.vision_base_url,
            api_key=settings.vision_api_key,
            model=settings.vision_model,
            timeout=settings.vision_timeout,
        )

    async def analyze(self, prompt: str, image_urls: list[str]) -> str:
        content: list[dict] = [{"type": "text", "text": prompt}]
        content.extend({"type": "image_url", "image_url": {"url": url}} for url in image_urls)
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(
                f"{self.base_url}/chat/completions",
                headers=headers,
                json={"model": self.model, "messages": [{"role": "user", "content": content}]},
            )
            resp.raise_for_status()
            data = resp.json()
        text = message_text(data)
        logger.debug("Vision reply: %d chars", len(text))
        return text


def message_text(data: Any) -> str:
    """Text of the first choice's message; "" when the reply has no usable text.

    Some providers send content as a list of parts, whose text parts are joined.
    """
    choices = data.get("choices") if isinstance(data, dict) else None
    first = choices[0] if isinstance(choices, list) and choices else None
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part["text"]
            for part in content
            if isinstance(part, dict) and part.get("type", "text") == "text" and isinstance(part.get("text"), str)
        )
    return ""
