"""
Traffic AI Service

Task-level calls to the generative AI backend: plate OCR, live overlay
hints, compliance scoring, scene and video understanding, legal Q&A and
maps-grounded lookups.

Structured answers are never trusted to parse: empty or malformed JSON
becomes a zeroed ComplianceResult. Transport failures on the scan path
raise GenAIError; the advisory and chat calls degrade to fixed text.
"""

import json
import re
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from trafficguard.errors import GenAIError
from trafficguard.models import ComplianceResult, GroundedAnswer, VehicleRecord

from .genai_client import GenAIClient, image_part, text_part
from .rules import (
    COMPLIANCE_RESPONSE_SCHEMA,
    LEGAL_CONTEXT,
    LIVE_HINT_INSTRUCTION,
    OCR_INSTRUCTION,
    SCENE_INSTRUCTION,
    VIDEO_INSTRUCTION,
    compliance_prompt,
)


DEFAULT_MODELS = {
    'ocr': 'gemini-flash-lite-latest',
    'liveHint': 'gemini-flash-lite-latest',
    'compliance': 'gemini-2.5-flash',
    'scene': 'gemini-3-pro-preview',
    'video': 'gemini-3-pro-preview',
    'legal': 'gemini-3-pro-preview',
    'maps': 'gemini-2.5-flash',
}

SCANNING_HINT = "Scanning..."
LEGAL_FALLBACK = "Legal Assistant is currently unavailable."
LEGAL_EMPTY = "I could not process that query."
MAPS_FALLBACK = "Could not access location services."


def parse_compliance(text: Optional[str], fallback_summary: str = "Error",
                     fallback_action: str = "Manual") -> ComplianceResult:
    """
    Parse the analyzer's JSON into a ComplianceResult

    Accepts camelCase (as requested in the schema) or snake_case keys.
    Anything unusable yields the safe default.
    """
    try:
        data = json.loads(text or "{}")
    except (TypeError, ValueError):
        print("[AI] Malformed compliance JSON, using safe default")
        return ComplianceResult.safe_default(fallback_summary, fallback_action)

    if not isinstance(data, dict):
        return ComplianceResult.safe_default(fallback_summary, fallback_action)

    def pick(source: Dict[str, Any], camel: str, snake: str, default=None):
        if camel in source:
            return source[camel]
        return source.get(snake, default)

    raw_violations = data.get('violations') or []
    if not isinstance(raw_violations, list):
        raw_violations = []

    violations = [
        {
            'rule': v.get('rule') or "Unspecified violation",
            'fine_amount': pick(v, 'fineAmount', 'fine_amount', 0),
            'severity': v.get('severity'),
            'description': v.get('description') or "",
        }
        for v in raw_violations
        if isinstance(v, dict)
    ]

    try:
        return ComplianceResult(
            risk_score=pick(data, 'riskScore', 'risk_score', 0),
            summary=str(data.get('summary') or ""),
            violations=violations,
            action_recommended=str(pick(data, 'actionRecommended', 'action_recommended', "") or ""),
        )
    except ValidationError as e:
        print(f"[AI] Compliance result rejected: {e.error_count()} validation error(s)")
        return ComplianceResult.safe_default(fallback_summary, fallback_action)


def clean_plate(text: Optional[str]) -> Optional[str]:
    """Normalise OCR output; None when nothing usable was read"""
    cleaned = (text or "").strip().upper()
    if not cleaned or cleaned == 'UNKNOWN':
        return None
    cleaned = re.sub(r'[^A-Z0-9]', '', cleaned)
    return cleaned or None


class TrafficAIService:
    """
    Traffic enforcement tasks on top of GenAIClient

    Each task uses its own model (fast lite model for OCR and overlay
    hints, larger models for structured and video analysis).
    """

    def __init__(self, client: GenAIClient, config: dict = None):
        """
        Initialize the service

        Args:
            client: Configured GenAIClient
            config: Analysis configuration (models, thinking budget)
        """
        self.client = client
        self.config = config or {}
        self.models = {**DEFAULT_MODELS, **(self.config.get('models') or {})}
        self.legal_thinking_budget = int(self.config.get('legalThinkingBudget', 32768))

    # ============================================
    # Scan path (errors propagate)
    # ============================================

    async def extract_license_plate(self, image: str) -> Optional[str]:
        """Fast ALPR: plate text, or None if unreadable"""
        response = await self.client.generate(
            model=self.models['ocr'],
            parts=[image_part(image), text_part(OCR_INSTRUCTION)],
        )
        plate = clean_plate(response.text)
        print(f"[AI] OCR result: {plate or 'UNKNOWN'}")
        return plate

    async def analyze_vehicle_compliance(self, vehicle: VehicleRecord,
                                         today: Optional[date] = None) -> ComplianceResult:
        """Document checks (RC, insurance, PUC, stolen) against the fine schedule"""
        today = today or date.today()
        prompt = compliance_prompt(json.dumps(vehicle.to_prompt_dict()), today.isoformat())

        response = await self.client.generate(
            model=self.models['compliance'],
            parts=[text_part(prompt)],
            response_schema=COMPLIANCE_RESPONSE_SCHEMA,
        )
        return parse_compliance(response.text)

    async def analyze_video_footage(self, frames: List[str]) -> ComplianceResult:
        """Combined plate, behaviour and violation analysis of a clip"""
        parts = [image_part(frame) for frame in frames]
        parts.append(text_part(VIDEO_INSTRUCTION))

        response = await self.client.generate(
            model=self.models['video'],
            parts=parts,
            response_schema=COMPLIANCE_RESPONSE_SCHEMA,
        )
        return parse_compliance(response.text, "Video analysis failed", "Manual Review")

    # ============================================
    # Advisory & chat (errors degrade to text)
    # ============================================

    async def live_traffic_hint(self, frame: str) -> str:
        """Five-word scene hint for the camera overlay"""
        try:
            response = await self.client.generate(
                model=self.models['liveHint'],
                parts=[image_part(frame), text_part(LIVE_HINT_INSTRUCTION)],
            )
        except GenAIError:
            return SCANNING_HINT
        return response.text.strip() or SCANNING_HINT

    async def analyze_traffic_scene(self, image: str) -> str:
        """Free-text visual violation analysis of a single frame"""
        try:
            response = await self.client.generate(
                model=self.models['scene'],
                parts=[image_part(image), text_part(SCENE_INSTRUCTION)],
            )
        except GenAIError:
            return "Failed to analyze scene."
        return response.text or "No analysis available."

    async def ask_legal_assistant(self, query: str) -> str:
        """Deep-reasoning answer about the Motor Vehicles Act"""
        try:
            response = await self.client.generate(
                model=self.models['legal'],
                parts=[text_part(f"{LEGAL_CONTEXT}\nUser Query: {query}")],
                thinking_budget=self.legal_thinking_budget,
            )
        except GenAIError:
            return LEGAL_FALLBACK
        return response.text or LEGAL_EMPTY

    async def find_nearby_services(self, query: str, lat: float, lng: float) -> GroundedAnswer:
        """Maps-grounded answer for location questions"""
        try:
            response = await self.client.generate(
                model=self.models['maps'],
                parts=[text_part(query)],
                tools=[{"googleMaps": {}}],
                tool_config={"retrievalConfig": {"latLng": {"latitude": lat, "longitude": lng}}},
            )
        except GenAIError:
            return GroundedAnswer(text=MAPS_FALLBACK, grounding_chunks=None)
        return GroundedAnswer(
            text=response.text or MAPS_FALLBACK,
            grounding_chunks=response.grounding_chunks,
        )
