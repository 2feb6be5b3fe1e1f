"""Single-shot subprocess client for ``claude -p``."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from proxy_constants import DEFAULT_CLI_BINARY, DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

ERROR_PREVIEW_CHARS = 200


class AgentInvocationError(RuntimeError):
    """Raised when the CLI times out, cannot start, or reports failure."""


@dataclass
class AgentResult:
    text: str
    num_turns: Optional[int] = None
    cost_usd: Optional[float] = None
    raw: Dict[str, Any] = field(default_factory=dict)


class ClaudeCLIRunner:
    """Runs one prompt through the CLI and returns its final text.

    Args:
        binary: CLI executable name or path.
        timeout: Seconds before the process is killed and the call fails.
        skip_permissions: Pass ``--dangerously-skip-permissions`` so the
            agent can use its tools unattended.
    """

    def __init__(
        self,
        *,
        binary: str = DEFAULT_CLI_BINARY,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        skip_permissions: bool = True,
    ) -> None:
        self.binary = binary
        self.timeout = timeout
        self.skip_permissions = skip_permissions

    def build_command(
        self,
        prompt: str,
        *,
        model: str,
        system_prompt: Optional[str] = None,
        replace_system_prompt: bool = False,
        allow_tools: bool = True,
    ) -> List[str]:
        cmd = [
            self.binary,
            "-p", prompt,
            "--output-format", "json",
            "--model", model,
            "--tools", "default" if allow_tools else "",
        ]
        if self.skip_permissions:
            cmd.append("--dangerously-skip-permissions")
        if system_prompt:
            flag = "--system-prompt" if replace_system_prompt else "--append-system-prompt"
            cmd.extend([flag, system_prompt])
        return cmd

    def run(
        self,
        prompt: str,
        *,
        model: str,
        system_prompt: Optional[str] = None,
        replace_system_prompt: bool = False,
        allow_tools: bool = True,
        cwd: Optional[str] = None,
    ) -> AgentResult:
        cmd = self.build_command(
            prompt,
            model=model,
            system_prompt=system_prompt,
            replace_system_prompt=replace_system_prompt,
            allow_tools=allow_tools,
        )
        if cwd and not os.path.isdir(cwd):
            logger.warning("Workspace %s does not exist, running in current directory", cwd)
            cwd = None

        logger.info("Running: %s -p '%s...' (model=%s, tools=%s)", self.binary, prompt[:50], model, allow_tools)
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=cwd,
            )
        except subprocess.TimeoutExpired as exc:
            raise AgentInvocationError(f"Claude timed out after {self.timeout:g} seconds") from exc
        except OSError as exc:
            raise AgentInvocationError(f"Claude failed to start: {exc}") from exc

        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout or "").strip()[:ERROR_PREVIEW_CHARS]
            raise AgentInvocationError(f"Claude failed (exit {proc.returncode}): {detail}")

        return self.parse_output(proc.stdout)

    @staticmethod
    def parse_output(output: str) -> AgentResult:
        """Decode the ``--output-format json`` envelope, falling back to raw text."""
        text = (output or "").strip()
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return AgentResult(text=text)
        if not isinstance(data, dict):
            return AgentResult(text=text)

        if data.get("is_error"):
            message = data.get("result") or data.get("error") or "unknown error"
            raise AgentInvocationError(f"Claude reported an error: {str(message)[:ERROR_PREVIEW_CHARS]}")

        result = data.get("result")
        if isinstance(result, str) and result:
            turns = data.get("num_turns")
            cost = data.get("total_cost_usd")
            logger.info("Turns: %s, Cost: $%.4f", turns, cost or 0)
            return AgentResult(text=result, num_turns=turns, cost_usd=cost, raw=data)

        return AgentResult(text=str(data.get("error") or text), raw=data)
