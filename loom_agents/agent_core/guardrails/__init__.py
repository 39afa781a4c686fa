"""Guardrails bounding an agent run.

The guardrail layer contains the pure decisions the runtime engine applies to
a run. None of them awaits anything or keeps per-run state.

Components
----------

- ``is_looping`` / ``ToolCallRecord``: detect a model repeating the same
  window of tool calls.
- ``PricingTable`` / ``estimate_cost_usd``: convert token usage into USD.
- ``check_budget``: compare the estimated cost with the run's ceiling.
- ``StepDecision``: the continue/abort verdict returned by the per-step hook.

Step count and wall-clock limits are enforced by the engine and the model
call themselves.
"""

from .budget import check_budget, estimate_cost_usd, format_usd
from .loop_detection import DEFAULT_WINDOW_SIZE, ToolCallRecord, hash_args, is_looping
from .models import BudgetVerdict, StepDecision
from .pricing import DEFAULT_PRICING, DEFAULT_PRICING_TABLE, MODEL_PRICING, ModelPricing, PricingTable

__all__ = [
    "BudgetVerdict",
    "DEFAULT_PRICING",
    "DEFAULT_PRICING_TABLE",
    "DEFAULT_WINDOW_SIZE",
    "MODEL_PRICING",
    "ModelPricing",
    "PricingTable",
    "StepDecision",
    "ToolCallRecord",
    "check_budget",
    "estimate_cost_usd",
    "format_usd",
    "hash_args",
    "is_looping",
]
