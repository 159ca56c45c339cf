from dataclasses import dataclass, field
from typing import List, Optional, Tuple

GREEN = 0x2ECC71
RED = 0xE74C3C
ORANGE = 0xE67E22


@dataclass
class Panel:
    """
    Structured reply, rendered by the chat backend (an embed on Discord).

    Attributes:
        title: Panel title
        description: Text under the title
        colour: RGB colour as an int
        fields: Ordered (name, value, inline) tuples
        footer: Optional footer text
    """
    title: str
    description: str = ""
    colour: int = GREEN
    fields: List[Tuple[str, str, bool]] = field(default_factory=list)
    footer: Optional[str] = None

    def add_field(self, name: str, value: str, inline: bool = True) -> "Panel":
        self.fields.append((name, value, inline))
        return self


@dataclass
class Reply:
    """Payload sent back to the caller: plain text, a panel, or both"""
    content: Optional[str] = None
    panel: Optional[Panel] = None
