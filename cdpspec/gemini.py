"""gemini.py — AI identification adapter.

Two directions, each a single generateContent call to the Gemini REST API:

1. **Image → label** — send the photo (JPEG/PNG inline data) with a fixed
   instruction asking for the brand and model of the CD player only.  The
   answer is cleaned of quotes and markdown; ``NOT_FOUND`` or an empty
   answer is a miss.
2. **Label → specs** — ask for the DAC chip and the laser pickup of a
   named model with a JSON response schema of exactly two string fields,
   ``dac`` and ``laser``.  Anything that does not parse as both fields is
   a miss, never a partial result.

A third call transcribes a short voice clip into a model name for the
speech search.  Every request carries an explicit timeout.
"""

import base64
import binascii
import io
import logging
import re
import time
from typing import Any, Dict, Optional, Tuple, Type, Union

import requests
from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError

from .config import GEMINI_ENDPOINT, Settings
from .errors import CDPSpecError, IdentificationMiss, SpecificationMiss
from .models import SpecPair

logger = logging.getLogger("cdpspec-api")

NOT_FOUND = "NOT_FOUND"

IDENTIFY_PROMPT = (
    "You are an expert in vintage audio equipment. Identify the CD PLAYER brand "
    "and model number from this image. Return ONLY the model name as a short "
    "string (e.g., 'Sony CDP-227ESD'). Do not include any sentences or extra "
    f"text. If you are not sure, return '{NOT_FOUND}'."
)

SPEC_PROMPT = (
    'Find the technical specifications for the CD Player model: "{label}". '
    "I need the DAC (Digital-to-Analog Converter) chip name and the Laser Pickup "
    "(Optical assembly) model. Return the result in JSON format with keys "
    '"dac" and "laser". Example: {{"dac": "2 x PCM56P-J & YM3414", "laser": "KSS-151A"}}'
)

TRANSCRIBE_PROMPT = (
    "The audio is a person saying the brand and model of a CD player. Return ONLY "
    "the brand and model as a short string (e.g., 'Denon DCD-1500'). If no model "
    f"name can be heard, return '{NOT_FOUND}'."
)

SPEC_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "dac": {"type": "STRING"},
        "laser": {"type": "STRING"},
    },
    "required": ["dac", "laser"],
}

DATA_URL_RE = re.compile(r"^data:[^,]*?(;base64)?,(?P<data>.*)$", re.S)
FENCE_RE = re.compile(r"^```[\w-]*\s*|\s*```$")
QUOTE_CHARS = "\"'`“”‘’"


# ---------- INPUT HELPERS ----------
def decode_image_input(image: Union[bytes, str]) -> bytes:
    """Accept raw bytes, a ``data:image/...;base64,`` URL, or bare base64."""
    if isinstance(image, bytes):
        return image
    m = DATA_URL_RE.match(image.strip())
    b64 = m.group("data") if m else image.strip()
    try:
        return base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise IdentificationMiss("image payload is not valid base64") from exc


def prepare_image(data: bytes) -> Tuple[bytes, str]:
    """Return (bytes, mime type) for upload; formats other than JPEG/PNG are re-encoded as JPEG."""
    if not data:
        raise IdentificationMiss("empty image")
    try:
        img = Image.open(io.BytesIO(data))
        fmt = img.format
        if fmt == "JPEG":
            return data, "image/jpeg"
        if fmt == "PNG":
            return data, "image/png"
        buf = io.BytesIO()
        img.convert("RGB").save(buf, format="JPEG", quality=95)
    except Image.DecompressionBombError as exc:
        raise IdentificationMiss("image too large") from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise IdentificationMiss("unreadable image") from exc
    return buf.getvalue(), "image/jpeg"


def clean_label(raw: Optional[str]) -> Optional[str]:
    """Strip markdown and surrounding quotes from a short model answer."""
    if not raw:
        return None
    text = FENCE_RE.sub("", raw.strip()).strip()
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    if not lines:
        return None
    text = lines[0].strip("*_ ").strip()
    while len(text) >= 2 and text[0] in QUOTE_CHARS and text[-1] in QUOTE_CHARS:
        text = text[1:-1].strip()
    if not text or NOT_FOUND in text.upper().replace(" ", "_"):
        return None
    return text


def response_text(js: Any) -> str:
    """Concatenate the text parts of the first candidate; any other shape reads as empty."""
    if not isinstance(js, dict):
        return ""
    candidates = js.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    texts = (p.get("text") for p in parts if isinstance(p, dict))
    return "".join(t for t in texts if isinstance(t, str)).strip()


# ---------- CLIENT ----------
class GeminiClient:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        endpoint: str = GEMINI_ENDPOINT,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            endpoint=settings.gemini_endpoint,
            timeout=settings.ai_timeout_seconds,
        )

    def _generate(self, payload: Dict[str, Any], miss: Type[CDPSpecError]) -> str:
        if not self.api_key:
            raise miss("GEMINI_API_KEY not set")
        url = f"{self.endpoint}/{self.model}:generateContent"
        t0 = time.time()
        try:
            r = requests.post(url, params={"key": self.api_key}, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise miss(f"Gemini request failed: {exc}") from exc
        elapsed = int((time.time() - t0) * 1000)
        if r.status_code != 200:
            logger.warning(
                f"Gemini API error {r.status_code}: {r.text[:200]}",
                extra={"duration_ms": elapsed},
            )
            raise miss(f"Gemini API error {r.status_code}")
        try:
            js = r.json()
        except ValueError as exc:
            raise miss("Gemini returned a non-JSON body") from exc
        if not isinstance(js, dict):
            raise miss("Gemini returned an unexpected body")
        logger.debug("Gemini call finished", extra={"duration_ms": elapsed})
        return response_text(js)

    def identify_model(self, image: Union[bytes, str]) -> str:
        """Image → model label.  Raises IdentificationMiss when nothing usable comes back."""
        data, mime = prepare_image(decode_image_input(image))
        payload = {
            "contents": [{
                "parts": [
                    {"inline_data": {"mime_type": mime, "data": base64.b64encode(data).decode("utf-8")}},
                    {"text": IDENTIFY_PROMPT},
                ]
            }]
        }
        label = clean_label(self._generate(payload, IdentificationMiss))
        if not label:
            raise IdentificationMiss("no model detected in image")
        return label

    def fetch_specs(self, label: str) -> SpecPair:
        """Label → dac/laser pair.  Raises SpecificationMiss on anything but both fields."""
        if not label or not label.strip():
            raise SpecificationMiss("empty model name")
        payload = {
            "contents": [{"parts": [{"text": SPEC_PROMPT.format(label=label.strip())}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": SPEC_SCHEMA,
            },
        }
        text = FENCE_RE.sub("", self._generate(payload, SpecificationMiss)).strip()
        if not text or NOT_FOUND in text:
            raise SpecificationMiss(f"no specifications found for {label}")
        try:
            specs = SpecPair.model_validate_json(text)
        except ValidationError as exc:
            logger.warning(f"Unparseable spec payload for {label}: {text[:200]}")
            raise SpecificationMiss(f"unparseable specifications for {label}") from exc
        if not specs.dac.strip() and not specs.laser.strip():
            raise SpecificationMiss(f"no specifications found for {label}")
        return specs

    def transcribe_query(self, audio: bytes, mime_type: str = "audio/webm") -> str:
        """Spoken model name → text query."""
        if not audio:
            raise IdentificationMiss("empty audio clip")
        payload = {
            "contents": [{
                "parts": [
                    {"inline_data": {"mime_type": mime_type, "data": base64.b64encode(audio).decode("utf-8")}},
                    {"text": TRANSCRIBE_PROMPT},
                ]
            }]
        }
        text = clean_label(self._generate(payload, IdentificationMiss))
        if not text:
            raise IdentificationMiss("no model name heard")
        return text
