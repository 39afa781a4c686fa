"""Model call capability.

- ``base``: the ``ModelCall`` protocol, request/response and step report types.
- ``model_configs``: per-model sampling parameters and provider detection.
- ``providers``: Pydantic AI model construction per provider.
- ``pydantic_ai_call``: the default ``ModelCall`` backed by a Pydantic AI ``Agent``.
"""

from .base import (
    CallStopReason,
    ModelCall,
    ModelCallRequest,
    ModelCallResponse,
    StepHook,
    ToolCallReport,
)
from .model_configs import (
    DEFAULT_MODEL_CONFIG,
    MODEL_CONFIGS,
    SamplingParams,
    detect_provider,
    get_model_config,
    split_model_id,
)

__all__ = [
    "CallStopReason",
    "ModelCall",
    "ModelCallRequest",
    "ModelCallResponse",
    "StepHook",
    "ToolCallReport",
    "DEFAULT_MODEL_CONFIG",
    "MODEL_CONFIGS",
    "SamplingParams",
    "detect_provider",
    "get_model_config",
    "split_model_id",
]
