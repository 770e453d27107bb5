from app.ai.config import AIConfig, load_ai_config
from app.ai.types import Evaluator

from app.ai.providers.openai_provider import OpenAIEvaluator


def build_evaluator(cfg: AIConfig | None = None) -> Evaluator:
    cfg = cfg or load_ai_config()

    if cfg.provider == "openai":
        return OpenAIEvaluator(
            model=cfg.model,
            api_key=cfg.api_key,
            base_url=cfg.base_url,
            timeout_s=cfg.timeout_s,
            max_retries=cfg.max_retries,
        )

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
