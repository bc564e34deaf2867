# src/snapsource/utils/tokenizer.py
from typing import Dict, Mapping, Optional

import tiktoken

from snapsource.config import MODEL_MAX_TOKENS, MODEL_PRICING
from snapsource.models import TokenEstimate

FALLBACK_ENCODING = "cl100k_base"


class Tokenizer:
    _encodings: Dict[str, "tiktoken.Encoding"] = {}

    @classmethod
    def get_encoding(cls, model: str) -> "tiktoken.Encoding":
        """
        Encoding used by `model`. Models tiktoken does not know (Claude,
        for one) are counted with cl100k_base.
        """
        if model not in cls._encodings:
            try:
                encoding = tiktoken.encoding_for_model(model)
            except KeyError:
                encoding = tiktoken.get_encoding(FALLBACK_ENCODING)
            cls._encodings[model] = encoding
        return cls._encodings[model]

    @staticmethod
    def count(text: str, model: str = "gpt-4") -> int:
        """Estimates token count for a given text."""
        try:
            encoding = Tokenizer.get_encoding(model)
            return len(encoding.encode(text, disallowed_special=()))
        except Exception:
            # Encoding files unavailable (offline cache miss etc.)
            return len(text) // 4


def estimate(text: str, model: str, max_tokens: Optional[int] = None,
             pricing: Mapping[str, float] = MODEL_PRICING,
             limits: Mapping[str, int] = MODEL_MAX_TOKENS) -> TokenEstimate:
    """
    Token count and input cost of `text` for `model`.
    The limit is `max_tokens` when given, else the model's context size
    (0, meaning no limit, for unknown models).
    """
    tokens = Tokenizer.count(text, model)
    cost = tokens * pricing.get(model, 0.0) / 1_000_000
    limit = max_tokens if max_tokens is not None else limits.get(model, 0)
    return TokenEstimate(model=model, tokens=tokens, cost=cost, limit=limit)


def token_warning(result: TokenEstimate) -> Optional[str]:
    if not result.exceeds_limit:
        return None
    return f"WARNING: Token count ({result.tokens}) exceeds the set limit ({result.limit})."
