"""Ad Studio - compose short ads from AI-generated scripts, visuals and voiceovers."""

__version__ = "0.1.0"
