"""Generation workflow states."""

from enum import Enum


class GenerationState(str, Enum):
    """State of a single generation run."""
    IDLE = "idle"
    SCRIPTING = "scripting"
    RENDERING_VISUAL = "rendering_visual"
    RENDERING_AUDIO = "rendering_audio"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (GenerationState.COMPLETE, GenerationState.FAILED)

    def can_advance_to(self, target: "GenerationState") -> bool:
        """Whether the run may move from this state to ``target``."""
        if target is GenerationState.FAILED:
            return self is not GenerationState.IDLE and not self.is_terminal
        return target in _FORWARD.get(self, ())


_FORWARD = {
    GenerationState.IDLE: (GenerationState.SCRIPTING,),
    GenerationState.SCRIPTING: (GenerationState.RENDERING_VISUAL,),
    GenerationState.RENDERING_VISUAL: (GenerationState.RENDERING_AUDIO, GenerationState.COMPLETE),
    GenerationState.RENDERING_AUDIO: (GenerationState.COMPLETE,),
}
