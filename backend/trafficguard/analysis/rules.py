"""
Motor Vehicles (Amendment) Act 2019 fine schedule and prompt text

The schedule is handed to the AI service as context so that violations
come back mapped to MVA sections and fines.
"""

from typing import List, Sequence, TypeVar


MVA_FINE_SCHEDULE = [
    ("General/First Offense", "Sec 177", "₹500"),
    ("Disobedience of Orders", "Sec 179", "₹2,000"),
    ("Driving without License", "Sec 181", "₹5,000"),
    ("Overspeeding", "Sec 183", "₹1,000 (LMV) / ₹2,000 (Medium/Heavy)"),
    ("Dangerous Driving / Mobile Use / Signal Jump", "Sec 184", "₹1,000 - ₹5,000"),
    ("Drunk Driving", "Sec 185", "₹10,000"),
    ("No PUC / Pollution", "Sec 190(2)", "₹2,000"),
    ("Unregistered Vehicle / Expired RC", "Sec 192", "₹5,000"),
    ("No Insurance", "Sec 196", "₹2,000"),
    ("No Helmet", "Sec 194D", "₹1,000"),
    ("No Seatbelt", "Sec 194B", "₹1,000"),
    ("Triple Riding on Bike", "Sec 128/194C", "₹1,000"),
    ("Obstruction of Traffic", "Sec 201", "₹500"),
]


def build_rules_context() -> str:
    """Render the fine schedule as the reference block used in every prompt"""
    lines = ["REFERENCE INDIA MOTOR VEHICLES ACT (MVA) 2019 FINES:"]
    for index, (offense, section, fine) in enumerate(MVA_FINE_SCHEDULE, start=1):
        lines.append(f"{index}. {offense} ({section}): {fine}")
    lines.append(
        f"{len(MVA_FINE_SCHEDULE) + 1}. Stolen Vehicle: Report to Police immediately (Severity: Critical)."
    )
    return "\n".join(lines)


MVA_RULES_CONTEXT = build_rules_context()


OCR_INSTRUCTION = (
    "Extract the vehicle license plate number. Return ONLY the alphanumeric "
    "uppercase string (e.g. MH12DE1433). If unclear, return 'UNKNOWN'."
)

LIVE_HINT_INSTRUCTION = (
    "Analyze this traffic frame in 5 words or less. "
    "E.g., 'SUV detected, No Helmet'. Be concise."
)

SCENE_INSTRUCTION = (
    "Analyze this traffic scene. Identify violations based on these rules:\n"
    f"{MVA_RULES_CONTEXT}\n"
    "List violations, specific MVA sections, and fines."
)

VIDEO_INSTRUCTION = f"""Analyze this video sequence of a vehicle.
{MVA_RULES_CONTEXT}

Tasks:
1. Identify the license plate if visible.
2. Detect Visual Violations (No Helmet, Triple Riding, No Seatbelt, Mobile Use).
3. Map violations to specific MVA Sections and Fines.
4. Return JSON with riskScore (0-100), summary, violations array, totalFine.
"""

LEGAL_CONTEXT = (
    "Context: You are an expert on the Indian Motor Vehicles Act 2019.\n"
    f"{MVA_RULES_CONTEXT}"
)


def compliance_prompt(vehicle_json: str, today: str) -> str:
    """Document-check prompt for a resolved vehicle record"""
    return f"""Analyze the following vehicle status for traffic violations based on official Indian RTO rules.

{MVA_RULES_CONTEXT}

Vehicle Data: {vehicle_json}
Current Date: {today}

Instructions:
1. Check RC, Insurance, and PUC expiry dates against Current Date.
2. If expired, apply the specific MVA section fine.
3. If Stolen, mark as Critical severity.
4. Return a structured JSON.
"""


# Structured output schema shared by compliance and video analysis
COMPLIANCE_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "riskScore": {"type": "NUMBER"},
        "summary": {"type": "STRING"},
        "violations": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "rule": {"type": "STRING"},
                    "fineAmount": {"type": "NUMBER"},
                    "severity": {"type": "STRING"},
                    "description": {"type": "STRING"},
                },
            },
        },
        "totalFine": {"type": "NUMBER"},
        "actionRecommended": {"type": "STRING"},
    },
}


T = TypeVar("T")


def select_video_frames(frames: Sequence[T], limit: int = 10) -> List[T]:
    """
    Evenly spaced subset of a clip, at most ``limit`` frames

    stride = max(1, floor(total / limit)); every stride-th frame is kept
    in original order, then the list is truncated to ``limit``.
    """
    if limit <= 0:
        return []
    stride = max(1, len(frames) // limit)
    return [frame for i, frame in enumerate(frames) if i % stride == 0][:limit]
