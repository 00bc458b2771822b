from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Literal

MessageRole = Literal["user", "system", "assistant"]
MESSAGE_ROLES = ("user", "system", "assistant")


@dataclass
class SavedMessage:
    role: MessageRole
    content: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "SavedMessage":
        return cls(role=data["role"], content=data["content"])


def aggregate_messages(messages: Iterable[SavedMessage]) -> List[SavedMessage]:
    """Merge consecutive messages from the same speaker into display blocks.

    Text of merged messages is joined with a single space, in arrival order.
    The input is never mutated, and aggregating an already aggregated list
    returns an equal list.
    """
    grouped: List[SavedMessage] = []
    for message in messages:
        if grouped and grouped[-1].role == message.role:
            last = grouped[-1]
            grouped[-1] = SavedMessage(role=last.role, content=f"{last.content} {message.content}")
        else:
            grouped.append(SavedMessage(role=message.role, content=message.content))
    return grouped


def format_transcript(messages: Iterable[SavedMessage]) -> str:
    return "".join(f"- {message.role}: {message.content}\n" for message in messages)
