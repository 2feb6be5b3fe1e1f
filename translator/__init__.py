"""Translator internals -- the request/response pipeline of the proxy.

These modules turn an OpenAI-style chat-completions request into one prompt
for the ``claude`` CLI, and turn the CLI's free-text reply back into an
OpenAI-compatible completion.

Module Overview
---------------
**message_normalizer.py**
    Flattens message content to plain text, strips chat-platform prefixes
    and message-id tags, drops "history compacted" notices.

**context_extractor.py**
    Pulls the skill catalog, persona (IDENTITY.md / SOUL.md) and working
    directory out of the system message.

**mode_classifier.py**
    Ordered rule table deciding between skill, coding and conversational
    dispatch for the latest user message.

**prompt_assembler.py**
    Builds the outbound prompt and system-prompt addendum from typed
    sections (persona, skill, context, task, tool menu).

**tool_schema.py**
    Renders OpenAI tool definitions as a textual tool menu teaching the
    ``<tool_call>`` syntax.

**response_parser.py**
    Extracts ``<tool_call>`` blocks and residual text from the agent reply.

**response_encoder.py**
    Serializes the parsed reply as a chat completion or SSE chunks.

**skill_loader.py**
    Reads a skill's SKILL.md and resolves its ``<SKILL_ROOT>`` placeholder.

**model_aliases.py**
    Maps the request ``model`` to a name the CLI accepts.

**models.py** / **ids.py**
    Per-request records and completion / tool-call id generation.

**pipeline.py**
    Wires the stages together around one agent invocation.

Architecture
------------
1. **Stateless utilities**: every stage is a pure function (or a class with
   configuration only) over its inputs; nothing outlives a request.

2. **No circular imports**: stage modules depend on ``translator.models``,
   ``proxy_constants`` and lower-level helpers; ``pipeline.py`` is the single
   place that knows about all of them.

3. **Collaborators stay outside**: the HTTP layer (``gateway``) calls into
   this package, never the reverse. The CLI runner (``claude_cli``) is handed
   to the pipeline by its caller; only its error type is imported here.
"""
