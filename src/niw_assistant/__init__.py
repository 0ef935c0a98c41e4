"""NIW assistant package."""

from .config import HistoryConfig, KnowledgeConfig, PromptConfig, Settings

__all__ = ["HistoryConfig", "KnowledgeConfig", "PromptConfig", "Settings"]
