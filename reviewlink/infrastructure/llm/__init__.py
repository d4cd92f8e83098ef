from .client import LanguageModelClient, LanguageModelError, PromptSpec
from .review_generator import ReviewTextGenerator

__all__ = ["LanguageModelClient", "LanguageModelError", "PromptSpec", "ReviewTextGenerator"]
