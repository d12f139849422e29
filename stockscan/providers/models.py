from dataclasses import dataclass


@dataclass(frozen=True)
class ChatMessage:
    """One turn of an assistant conversation."""

    role: str
    text: str
