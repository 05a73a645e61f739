"""Schedule generation pipeline."""

from teaplan.planning.daily import GenerationConfig, GenerationResult, generate_daily_schedule

__all__ = ["GenerationConfig", "GenerationResult", "generate_daily_schedule"]
