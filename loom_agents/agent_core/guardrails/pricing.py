"""Static per-model token pricing.

Prices are USD per one million tokens, split into input (prompt) and output
(completion). Unknown models are priced with ``DEFAULT_PRICING`` so that a
cost estimate is always available.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

_PER_MILLION = 1_000_000


@dataclass(frozen=True)
class ModelPricing:
    """
    Token prices for one model.

    Attributes:
        input_per_million: USD per one million prompt tokens.
        output_per_million: USD per one million completion tokens.
    """

    input_per_million: float
    output_per_million: float

    def cost(self, prompt_tokens: int, completion_tokens: int) -> float:
        return (prompt_tokens / _PER_MILLION) * self.input_per_million + (
            completion_tokens / _PER_MILLION
        ) * self.output_per_million


MODEL_PRICING: Dict[str, ModelPricing] = {
    "claude-haiku-4-5": ModelPricing(1.0, 5.0),
    "claude-sonnet-4-5": ModelPricing(3.0, 15.0),
    "claude-opus-4-6": ModelPricing(5.0, 25.0),
    "gpt-5-mini": ModelPricing(0.25, 2.0),
    "gpt-5.2": ModelPricing(1.75, 14.0),
    "gemini-2.5-flash": ModelPricing(0.30, 2.50),
    "gemini-3-flash": ModelPricing(0.50, 3.00),
    "text-embedding-3-small": ModelPricing(0.02, 0.0),
}

DEFAULT_PRICING = ModelPricing(3.0, 15.0)


class PricingTable:
    """
    Lookup from model identifier to ``ModelPricing``.

    Lookup tries the exact identifier first, then the identifier with any
    ``provider/`` prefix removed, and finally falls back to the table default.
    """

    def __init__(self, prices: Optional[Mapping[str, ModelPricing]] = None, *, default: ModelPricing = DEFAULT_PRICING):
        self._prices: Dict[str, ModelPricing] = dict(MODEL_PRICING if prices is None else prices)
        self._default = default

    @property
    def default(self) -> ModelPricing:
        return self._default

    def get(self, model_id: str) -> ModelPricing:
        price = self._prices.get(model_id)
        if price is None and "/" in model_id:
            price = self._prices.get(model_id.split("/", 1)[1])
        return price if price is not None else self._default

    def has(self, model_id: str) -> bool:
        if model_id in self._prices:
            return True
        return "/" in model_id and model_id.split("/", 1)[1] in self._prices

    def register(self, model_id: str, pricing: ModelPricing) -> None:
        """Add or replace the price of ``model_id``."""
        self._prices[model_id] = pricing


DEFAULT_PRICING_TABLE = PricingTable()
