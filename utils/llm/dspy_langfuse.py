from dspy.utils.callback import BaseCallback
from langfuse.decorators import langfuse_context  # type: ignore
from langfuse.client import Langfuse, StatefulGenerationClient  # type: ignore
from litellm.cost_calculator import completion_cost  # type: ignore
from typing import Optional, Any, Literal
from pydantic import BaseModel, ConfigDict, ValidationError, Field
from dspy.signatures import Signature as dspy_Signature
import contextvars
from loguru import logger as log


# Pydantic models for parsing the LM 'outputs' dictionary
class _MessagePayload(BaseModel):
    content: Optional[str] = None


class _ChoicePayload(BaseModel):
    message: Optional[_MessagePayload] = None


class _UsagePayload(BaseModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class _ModelOutputPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    model: Optional[str] = None
    choices: Optional[list[_ChoicePayload]] = Field(default_factory=list)
    usage: Optional[_UsagePayload] = None


"""
NOTE: Per-call state lives in contextvars so concurrent generations do not mix.
"""


class LangFuseDSPYCallback(BaseCallback):  # noqa
    """
    Records each LM call of a DSPY module as a Langfuse generation.

    Generations attach to ``trace_id`` when given, otherwise to the trace of
    the surrounding ``@observe`` context. Without either, nothing is recorded.
    """

    def __init__(
        self,
        signature: type[dspy_Signature],
        trace_id: Optional[str] = None,
        parent_observation_id: Optional[str] = None,
        langfuse: Optional[Langfuse] = None,
    ) -> None:
        super().__init__()
        self.current_system_prompt = contextvars.ContextVar[str](
            "current_system_prompt"
        )
        self.current_prompt = contextvars.ContextVar[str]("current_prompt")
        self.current_completion = contextvars.ContextVar[str]("current_completion")
        self.current_span = contextvars.ContextVar[Optional[StatefulGenerationClient]](
            "current_span"
        )
        self.model_name_at_span_creation = contextvars.ContextVar[Optional[str]](
            "model_name_at_span_creation"
        )
        self.input_field_values = contextvars.ContextVar[dict[str, Any]](
            "input_field_values"
        )
        self.trace_id = trace_id
        self.parent_observation_id = parent_observation_id
        self.langfuse = langfuse or Langfuse()
        self.input_field_names = signature.input_fields.keys()

    def _trace_target(self) -> tuple[Optional[str], Optional[str]]:
        if self.trace_id:
            return self.trace_id, self.parent_observation_id
        return (
            langfuse_context.get_current_trace_id(),
            langfuse_context.get_current_observation_id(),
        )

    def on_module_start(  # noqa
        self,  # noqa
        call_id: str,  # noqa
        instance: Any,  # noqa
        inputs: dict[str, Any],
    ) -> None:
        extracted_args = inputs.get("kwargs", {})
        self.input_field_values.set(
            {
                name: extracted_args[name]
                for name in self.input_field_names
                if name in extracted_args
            }
        )

    def on_module_end(  # noqa
        self,  # noqa
        call_id: str,  # noqa
        outputs: Optional[Any],
        exception: Optional[Exception] = None,  # noqa
    ) -> None:
        # Explicit traces are updated through their generations only
        if self.trace_id:
            return
        outputs_extracted: dict[str, Any] = {}
        if outputs is not None:
            try:
                outputs_extracted = {k: v for k, v in outputs.items()}
            except AttributeError:
                outputs_extracted = {"value": outputs}
        langfuse_context.update_current_observation(
            input=self.input_field_values.get(None) or {},
            output=outputs_extracted,
            metadata={
                "existing_trace_id": langfuse_context.get_current_trace_id(),
                "parent_observation_id": langfuse_context.get_current_observation_id(),
            },
        )

    def on_lm_start(  # noqa
        self,  # noqa
        call_id: str,  # noqa
        instance: Any,
        inputs: dict[str, Any],
    ) -> None:
        # There is a double-trigger, so only count the first trigger.
        if self.current_span.get(None):
            return
        lm_dict = instance.__dict__
        model_name = lm_dict.get("model")
        temperature = lm_dict.get("kwargs", {}).get("temperature")
        max_tokens = lm_dict.get("kwargs", {}).get("max_tokens")
        messages = inputs.get("messages") or []
        if (
            len(messages) < 2
            or messages[0].get("role") != "system"
            or messages[1].get("role") != "user"
        ):
            log.warning("Skipping Langfuse generation: unexpected LM message layout")
            return
        system_prompt = messages[0].get("content")
        user_input = messages[1].get("content")
        self.current_system_prompt.set(system_prompt)
        self.current_prompt.set(user_input)
        self.model_name_at_span_creation.set(model_name)

        trace_id, parent_observation_id = self._trace_target()
        if trace_id:
            span_obj = self.langfuse.generation(  # type: ignore
                input=user_input,
                name=model_name,
                trace_id=trace_id,
                parent_observation_id=parent_observation_id,
                metadata={
                    "model": model_name,
                    "temperature": temperature,
                    "max_tokens": max_tokens,
                    "system": system_prompt,
                },
            )
            self.current_span.set(span_obj)

    def on_lm_end(  # noqa
        self,  # noqa
        call_id: str,  # noqa
        outputs: dict[str, Any] | list[Any] | None,
        exception: Optional[Exception] = None,
    ) -> None:
        completion_content: Optional[str] = None
        model_name: Optional[str] = self.model_name_at_span_creation.get(None)
        level: Literal["DEFAULT", "WARNING", "ERROR"] = "DEFAULT"
        status_message: Optional[str] = None
        usage: Optional[_UsagePayload] = None

        span = self.current_span.get(None)

        if exception:
            level = "ERROR"
            status_message = str(exception)
        elif outputs is None:
            level = "ERROR"
            status_message = "LM call returned None outputs without an exception."
        elif isinstance(outputs, list):
            if outputs and isinstance(outputs[0], str) and outputs[0]:
                completion_content = outputs[0]
            else:
                level = "WARNING"
                status_message = f"Unexpected LM list output: {str(outputs)[:200]}"
        else:
            try:
                parsed_output = _ModelOutputPayload.model_validate(outputs)
                model_name = parsed_output.model or model_name
                first_choice = (
                    parsed_output.choices[0] if parsed_output.choices else None
                )
                if first_choice and first_choice.message:
                    completion_content = first_choice.message.content
                if not completion_content:
                    level = "WARNING"
                    status_message = (
                        "LM output did not contain choices[0].message.content."
                    )
                usage = parsed_output.usage
            except ValidationError as e:
                level = "ERROR"
                status_message = f"Error validating LM output structure: {e}"

        if span:
            update_args = self._usage_and_cost(
                model_name, completion_content, usage
            )
            if update_args:
                span.update(**update_args)  # type: ignore[call-arg]
            span.end(  # type: ignore[call-arg]
                output=completion_content,
                model=model_name,
                level=level,
                status_message=status_message,
            )
            self.current_span.set(None)

        if level == "DEFAULT" and completion_content is not None:
            self.current_completion.set(completion_content)

    def _usage_and_cost(
        self,
        model_name: Optional[str],
        completion_content: Optional[str],
        usage: Optional[_UsagePayload],
    ) -> Optional[dict[str, Any]]:
        system_prompt = self.current_system_prompt.get(None)
        prompt = self.current_prompt.get(None)
        if None in (model_name, completion_content, system_prompt, prompt):
            return None

        if usage and usage.prompt_tokens is not None and usage.completion_tokens is not None:
            prompt_tokens = usage.prompt_tokens
            completion_tokens = usage.completion_tokens
        else:
            # Character counts stand in when the provider reports no usage
            prompt_tokens = len(system_prompt + prompt)
            completion_tokens = len(completion_content)
        total_tokens = prompt_tokens + completion_tokens

        try:
            total_cost = completion_cost(
                model=model_name,
                prompt=system_prompt + prompt,
                completion=completion_content,
            )
        except Exception as e:
            log.warning(f"litellm.completion_cost failed for model {model_name}: {e}")
            return None

        def share(tokens: int) -> float:
            return total_cost * tokens / total_tokens if total_tokens else 0.0

        return {
            "usage_details": {
                "input": prompt_tokens,
                "output": completion_tokens,
                "total": total_tokens,
            },
            "cost_details": {
                "input": share(prompt_tokens),
                "output": share(completion_tokens),
                "total": total_cost,
            },
        }
