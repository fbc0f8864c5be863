"""
Narrator Registry

Static style table for the three commentary personas. Each narrator gets
its own subtitle layer, so colour, screen position and size must never
collide between them.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

from ..models import NarratorIdentity


@dataclass(frozen=True)
class NarratorStyleConfig:
    """Display attributes for one narrator's subtitle layer."""
    identity: NarratorIdentity
    name: str
    color: str                                   # ASS colour, &HAABBGGRR
    alignment: int                               # ASS numpad alignment (1-9)
    font_size: int
    position: Literal["top", "middle", "bottom"]
    traits: tuple[str, ...]
    bold: bool
    intro: str
    outro: str


NARRATOR_STYLES = MappingProxyType({
    NarratorIdentity.NEKO_ARC: NarratorStyleConfig(
        identity=NarratorIdentity.NEKO_ARC,
        name="Neko-Arc",
        color="&H00FFFF00",  # Cyan
        alignment=2,         # Bottom center
        font_size=26,
        position="bottom",
        traits=("Enthusiastic", "Kawaii", "Uses nyaa~ and desu~", "Playful", "Action-oriented"),
        bold=True,
        intro="*bounces excitedly* Nyaa~! Ready to create AMAZING videos, desu~!",
        outro="*swishes tail triumphantly* Video created successfully, nyaa~!",
    ),
    NarratorIdentity.MARIO_GALLO_BESTINO: NarratorStyleConfig(
        identity=NarratorIdentity.MARIO_GALLO_BESTINO,
        name="Mario Gallo Bestino",
        color="&H0000FFFF",  # Yellow/Gold
        alignment=8,         # Top center
        font_size=26,
        position="top",
        traits=("Theatrical", "Dramatic", "Artistic narration", "Grand gestures", "Performance-focused"),
        bold=True,
        intro="*sweeps cape dramatically* Ah! The GRAND video creation performance begins!",
        outro="*bows deeply* CURTAIN CALL! A MAGNIFICENT performance!",
    ),
    NarratorIdentity.NOEL: NarratorStyleConfig(
        identity=NarratorIdentity.NOEL,
        name="Noel",
        color="&H00FFFFFF",  # White/Silver
        alignment=5,         # Middle center
        font_size=24,
        position="middle",
        traits=("Sarcastic", "Blunt", "Tactical", "Professional", "Mocks Mario"),
        bold=False,
        intro="*adjusts glasses* Tch. Let's get this done efficiently. No theatrical delays.",
        outro="*nods* Mission complete. Acceptable execution.",
    ),
})

PARTICIPATION_RULE = "All three narrators must participate in every video."

_BANTER = (
    (NarratorIdentity.NEKO_ARC, "Nyaa~! Starting video encoding, desu~!"),
    (NarratorIdentity.MARIO_GALLO_BESTINO, "*dramatic flourish* BEHOLD! The triple-subtitle ballet!"),
    (NarratorIdentity.NOEL, "Tch. It's just ffmpeg with multiple filters, Mario."),
    (NarratorIdentity.MARIO_GALLO_BESTINO, "But I narrate it with ARTISTRY!"),
    (NarratorIdentity.NOEL, "Your artistry is... *smirks* ...almost admirable."),
    (NarratorIdentity.NEKO_ARC, "*giggles* You two are funny, nyaa~!"),
)


def all_narrators() -> list[NarratorIdentity]:
    """Canonical narrator order: A, B, C."""
    return list(NarratorIdentity)


def config_for(identity: NarratorIdentity) -> NarratorStyleConfig:
    return NARRATOR_STYLES[NarratorIdentity(identity)]


def intro_line(identity: NarratorIdentity) -> str:
    return config_for(identity).intro


def outro_line(identity: NarratorIdentity) -> str:
    return config_for(identity).outro


def force_style(identity: NarratorIdentity) -> str:
    """
    Build the libass force_style string for a narrator's subtitle layer.

    Example:
        >>> force_style(NarratorIdentity.NOEL)
        'Alignment=5,FontSize=24,PrimaryColour=&H00FFFFFF,BorderStyle=1,Outline=2,Shadow=1'
    """
    config = config_for(identity)
    parts = [
        f"Alignment={config.alignment}",
        f"FontSize={config.font_size}",
        f"PrimaryColour={config.color}",
        "BorderStyle=1",
        "Outline=2",
        "Shadow=1",
    ]
    if config.bold:
        parts.append("Bold=1")
    return ",".join(parts)


def banter() -> list[str]:
    """Canned back-and-forth, one line per entry, prefixed with the speaker."""
    return [f"{config_for(who).name}: {line}" for who, line in _BANTER]
