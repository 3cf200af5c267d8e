"""
Compiled artifact model
"""

import hashlib
import json
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from .graph import InteractionMode


class CompiledArtifact(BaseModel):
    """Markup fragment plus behavior script produced by the compiler"""

    model_config = ConfigDict(frozen=True)

    markup: str = Field(..., description="HTML fragment with one container per scene")
    script: str = Field(..., description="Browser behavior script, without <script> tags")
    runtime_config: str = Field(
        ..., description="Serialized runtime config embedded in the script"
    )
    interaction_mode: InteractionMode = Field(default=InteractionMode.BUTTONS)

    @property
    def config(self) -> Dict[str, Any]:
        return json.loads(self.runtime_config)

    @property
    def content_hash(self) -> str:
        digest = hashlib.sha256()
        digest.update(self.markup.encode("utf-8"))
        digest.update(b"\0")
        digest.update(self.script.encode("utf-8"))
        return digest.hexdigest()

    def to_html(self) -> str:
        """Markup followed by the inline behavior script"""
        return f"{self.markup}\n<script>\n{self.script}\n</script>\n"
