from promptshelf.models.prompt import Prompt, PromptTag

__all__ = ["Prompt", "PromptTag"]
