"""Prompt-in, text-out seam used by the keyword generator and campaign pipeline."""

from typing import Any, Optional, Protocol

import dspy
from langfuse import Langfuse

from common import global_config
from utils.llm.dspy_inference import DSPYInference
from utils.llm.dspy_langfuse import LangFuseDSPYCallback


class TextGenerator(Protocol):
    async def generate(self, prompt: str, max_tokens: int) -> str: ...


class PromptCompletion(dspy.Signature):
    """Follow the instructions in the prompt exactly and answer with the requested content only."""

    prompt: str = dspy.InputField(desc="Complete instructions for the task")
    response: str = dspy.OutputField(desc="The requested content, with no preamble")


class DSPYTextGenerator:
    """TextGenerator backed by a DSPY predictor over the configured LLM.

    With ``observe`` on and Langfuse keys configured, every call opens its own
    Langfuse trace and the LM generation is recorded under it.
    """

    def __init__(self, model_name: str | None = None, observe: bool = True) -> None:
        self.model_name = model_name or global_config.default_llm.default_model
        self.observe = observe
        self._modules: dict[int, DSPYInference] = {}
        self._langfuse: Optional[Langfuse] = None

    def _module_for(self, max_tokens: int) -> DSPYInference:
        # One LM per token budget; stages reuse them across requests
        if max_tokens not in self._modules:
            self._modules[max_tokens] = DSPYInference(
                pred_signature=PromptCompletion,
                observe=False,
                model_name=self.model_name,
                max_tokens=max_tokens,
            )
        return self._modules[max_tokens]

    def _trace_callback(self, max_tokens: int) -> LangFuseDSPYCallback:
        if self._langfuse is None:
            self._langfuse = Langfuse()
        trace = self._langfuse.trace(
            name="text-generation",
            metadata={"model": self.model_name, "max_tokens": max_tokens},
        )
        return LangFuseDSPYCallback(
            PromptCompletion, trace_id=trace.id, langfuse=self._langfuse
        )

    async def generate(self, prompt: str, max_tokens: int) -> str:
        extra_callbacks: Optional[list[Any]] = None
        if self.observe and global_config.langfuse_enabled:
            extra_callbacks = [self._trace_callback(max_tokens)]
        result = await self._module_for(max_tokens).run(
            extra_callbacks=extra_callbacks, prompt=prompt
        )
        return (getattr(result, "response", None) or "").strip()
