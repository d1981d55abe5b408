from typing import Protocol


class LLMClient(Protocol):
    async def complete(self, system: str, user: str) -> str:
        ...
