"""Cost estimation and budget enforcement.

Cost is evaluated once, after the model call has completed, from the usage
the call reported. It therefore bounds the total spend of a run rather than
individual steps.
"""

from __future__ import annotations

import logging
from typing import Optional

from .models import BudgetVerdict
from .pricing import DEFAULT_PRICING_TABLE, PricingTable

logger = logging.getLogger(__name__)


def estimate_cost_usd(
    model_id: str,
    prompt_tokens: int,
    completion_tokens: int,
    pricing: Optional[PricingTable] = None,
) -> float:
    """
    Estimate the USD cost of a model call.

    Args:
        model_id: Model identifier, with or without a provider prefix.
        prompt_tokens: Input tokens consumed.
        completion_tokens: Output tokens produced.
        pricing: Table to price with; defaults to ``DEFAULT_PRICING_TABLE``.

    Returns:
        The estimated cost in USD.
    """
    table = pricing or DEFAULT_PRICING_TABLE
    if not table.has(model_id):
        logger.debug(f"No pricing for model '{model_id}', using default rates")
    return table.get(model_id).cost(max(prompt_tokens, 0), max(completion_tokens, 0))


def check_budget(cost_usd: float, max_cost_usd: float) -> BudgetVerdict:
    """Compare an estimated cost with the run's ceiling; equal is within budget."""
    return BudgetVerdict(cost_usd=cost_usd, max_cost_usd=max_cost_usd, exceeded=cost_usd > max_cost_usd)


def format_usd(amount: float) -> str:
    """Render a dollar amount for messages, keeping sub-cent values visible."""
    if amount != 0 and abs(amount) < 0.01:
        return f"${amount:.4f}"
    return f"${amount:.2f}"
