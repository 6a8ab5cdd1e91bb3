"""Null provider that records prompts without reaching an agent."""

from __future__ import annotations

from typing import List

from relay.providers.agent_provider import AgentProvider


class NullProvider(AgentProvider):
    name = "null"

    def __init__(self) -> None:
        self.prompts: List[str] = []

    @property
    def is_interactive(self) -> bool:
        return False

    def run(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return ""
