"""Request -> agent -> response pipeline.

One ``TranslationPipeline.run`` call handles one chat-completions request:

    normalize -> extract context -> classify -> build prompt
        -> invoke agent -> parse reply

Encoding is left to the caller because it depends on the transport
(JSON body vs. SSE). Agent failures come back as a normal reply whose
content is the error string, so the client always receives a well-formed
completion.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from claude_cli.runner import AgentInvocationError
from translator.context_extractor import extract_context
from translator.message_normalizer import normalize_messages
from translator.mode_classifier import classify
from translator.model_aliases import resolve_model
from translator.models import BuiltPrompt, Classification, DispatchMode, ParsedReply, RequestContext
from translator.prompt_assembler import EmptyConversationError, PromptAssembler, exchanges_from
from translator.response_parser import parse_reply
from translator.skill_loader import load_skill_instructions
from translator.tool_schema import format_tool_menu, tool_definitions

logger = logging.getLogger(__name__)

__all__ = ["EmptyConversationError", "PipelineResult", "PreparedCall", "TranslationPipeline"]


@dataclass
class PreparedCall:
    """Everything decided before the agent is invoked."""

    model: str
    context: RequestContext
    classification: Classification
    prompt: BuiltPrompt
    skill_instructions: Optional[str] = None


@dataclass
class PipelineResult:
    prepared: PreparedCall
    reply: ParsedReply
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def prompt_text(self) -> str:
        prompt = self.prepared.prompt
        return "\n\n".join(p for p in (prompt.system_prompt, prompt.prompt) if p)


class TranslationPipeline:
    """Turns request fields into a parsed agent reply.

    Args:
        runner: Object with a ``run(prompt, *, model, system_prompt,
            replace_system_prompt, allow_tools, cwd)`` method returning an
            object with a ``text`` attribute (``ClaudeCLIRunner``).
        default_model: Model used when the request names none or an unknown one.
        assembler: Prompt assembler (window/cap settings).
        skill_loader: Reads a skill location into instruction text.
    """

    def __init__(
        self,
        runner,
        *,
        default_model: str,
        assembler: Optional[PromptAssembler] = None,
        skill_loader: Callable[[str], Optional[str]] = load_skill_instructions,
    ):
        self.runner = runner
        self.default_model = default_model
        self.assembler = assembler or PromptAssembler()
        self.skill_loader = skill_loader

    def prepare(
        self,
        messages: Sequence[Dict[str, Any]],
        *,
        tools: Optional[List[Dict[str, Any]]] = None,
        model: Optional[str] = None,
    ) -> PreparedCall:
        """Everything up to (not including) the agent call. Pure apart from reading skill files.

        Raises:
            EmptyConversationError: No user message survives normalization.
        """
        context = extract_context(messages)
        logger.info("Found %d skills in system message", len(context.skills))

        normalized = normalize_messages(messages)
        exchanges = exchanges_from(normalized)
        last_user = next((ex.text for ex in reversed(exchanges) if ex.role == "user"), "")
        logger.info("Last user text: %s...", last_user[:100])

        classification = classify(last_user, context.skills)
        logger.info("Dispatch mode: %s (rule: %s)", classification.mode.value, classification.rule)

        skill_instructions = None
        if classification.mode == DispatchMode.SKILL and classification.skill is not None:
            skill = classification.skill
            logger.info("Skill detected: %s at %s", skill.name, skill.location)
            skill_instructions = self.skill_loader(skill.location)
            if skill_instructions:
                logger.info("Injected skill content (%d chars)", len(skill_instructions))

        definitions = tool_definitions(tools or [])
        logger.info("Tools present: %d", len(definitions))

        built = self.assembler.build(
            exchanges,
            mode=classification.mode,
            use_executor_prefix=bool(definitions),
            skill=classification.skill,
            skill_instructions=skill_instructions,
            persona=context.persona,
            tool_menu=format_tool_menu(definitions),
        )
        logger.info("Request: %s...", built.prompt[:150])

        return PreparedCall(
            model=resolve_model(model, self.default_model),
            context=context,
            classification=classification,
            prompt=built,
            skill_instructions=skill_instructions,
        )

    def invoke(self, prepared: PreparedCall) -> PipelineResult:
        """Run the agent once and parse what it returns."""
        built = prepared.prompt
        try:
            result = self.runner.run(
                built.prompt,
                model=prepared.model,
                system_prompt=built.system_prompt,
                replace_system_prompt=built.replace_system_prompt,
                allow_tools=built.allow_tools,
                cwd=prepared.context.workspace,
            )
        except AgentInvocationError as e:
            logger.error("Agent invocation failed: %s", e)
            message = f"Error: {e}"
            return PipelineResult(prepared=prepared, reply=ParsedReply(content=message), error=str(e))

        reply = parse_reply(result.text)
        logger.info("Response: %s...", result.text[:100])
        metadata = {
            "num_turns": getattr(result, "num_turns", None),
            "cost_usd": getattr(result, "cost_usd", None),
        }
        return PipelineResult(prepared=prepared, reply=reply, metadata=metadata)

    def run(
        self,
        messages: Sequence[Dict[str, Any]],
        *,
        tools: Optional[List[Dict[str, Any]]] = None,
        model: Optional[str] = None,
    ) -> PipelineResult:
        return self.invoke(self.prepare(messages, tools=tools, model=model))
