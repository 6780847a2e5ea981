from typing import Any, Optional
import dspy
from common import global_config

from loguru import logger as log
from utils.llm.dspy_langfuse import LangFuseDSPYCallback


class DSPYInference:
    def __init__(
        self,
        pred_signature: type[dspy.Signature],
        observe: bool = True,
        model_name: str = global_config.default_llm.default_model,
        temperature: float = global_config.default_llm.default_temperature,
        max_tokens: int = global_config.default_llm.default_max_tokens,
        trace_id: str | None = None,
        parent_observation_id: str | None = None,
    ) -> None:
        api_key = global_config.llm_api_key(model_name)

        # Single timeout value handed to LiteLLM (used by DSPY)
        timeout = global_config.llm_config.timeout.api_timeout_seconds

        self.lm = dspy.LM(
            model=model_name,
            api_key=api_key,
            cache=global_config.llm_config.cache_enabled,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            num_retries=global_config.llm_config.retry.max_attempts,
        )
        # Tracing needs Langfuse keys; without them observe is a no-op
        self.observe = observe and global_config.langfuse_enabled
        if self.observe:
            self.callback = LangFuseDSPYCallback(
                pred_signature,
                trace_id=trace_id,
                parent_observation_id=parent_observation_id,
            )
        else:
            self.callback = None

        self.pred_signature = pred_signature
        self._inference_module_async = None

    def _get_inference_module(self):
        """Lazy initialization of inference module."""
        if self._inference_module_async is None:
            self._inference_module_async = dspy.asyncify(
                dspy.Predict(self.pred_signature)
            )
        return self._inference_module_async

    async def run(
        self,
        extra_callbacks: Optional[list[Any]] = None,
        **kwargs: Any,
    ) -> Any:
        try:
            inference_module_async = self._get_inference_module()

            # Use dspy.context() for async-safe configuration
            context_kwargs: dict[str, Any] = {"lm": self.lm}
            callbacks: list[Any] = []
            if self.observe and self.callback:
                callbacks.append(self.callback)
            if extra_callbacks:
                callbacks.extend(extra_callbacks)
            if callbacks:
                context_kwargs["callbacks"] = callbacks

            with dspy.context(**context_kwargs):
                result = await inference_module_async(**kwargs, lm=self.lm)

        except Exception as e:
            log.error(f"Error in run: {str(e)}")
            raise
        return result
