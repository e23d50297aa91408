"""Recording session state."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Session:
    """The single recording session owned by the session controller.

    ``display_font_size`` stays ``None`` until the user first changes the text
    size; renderers fall back to the default body size in that case.
    """
    is_active: bool = False
    current_transcript: str = ""
    display_font_size: Optional[float] = None
