"""
Analysis Package

Components:
- GenAIClient: HTTP client for the generative AI backend
- TrafficAIService: OCR, compliance, video, scene, legal and maps tasks
- AnalysisPipeline: Sequential image/video analysis of one capture
- ScanWorkflow: Cancellable pipeline runs bound to the capture session
"""

from .rules import (
    MVA_RULES_CONTEXT,
    COMPLIANCE_RESPONSE_SCHEMA,
    select_video_frames,
)
from .genai_client import (
    GenAIClient,
    GenAIResponse,
    GenAIStatus,
    image_part,
    text_part,
    strip_data_url,
)
from .ai_service import (
    TrafficAIService,
    parse_compliance,
    clean_plate,
)
from .pipeline import (
    AnalysisPipeline,
    PipelineResult,
    CriticalAlert,
)
from .workflow import ScanWorkflow


__all__ = [
    "MVA_RULES_CONTEXT",
    "COMPLIANCE_RESPONSE_SCHEMA",
    "select_video_frames",
    "GenAIClient",
    "GenAIResponse",
    "GenAIStatus",
    "image_part",
    "text_part",
    "strip_data_url",
    "TrafficAIService",
    "parse_compliance",
    "clean_plate",
    "AnalysisPipeline",
    "PipelineResult",
    "CriticalAlert",
    "ScanWorkflow",
]
