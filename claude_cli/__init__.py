"""Blocking client for the ``claude`` command-line agent."""

from claude_cli.runner import AgentInvocationError, AgentResult, ClaudeCLIRunner

__all__ = ["AgentInvocationError", "AgentResult", "ClaudeCLIRunner"]
