"""HTML playlist that plays a story's video files in order."""

from dataclasses import asdict, dataclass
from typing import List, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

PLAYLIST_FILENAME = "play_story.html"

_env = Environment(
    loader=PackageLoader("adstudio.editor", "templates"),
    autoescape=select_autoescape(["html", "j2"]),
)


@dataclass
class PlaylistClip:
    """One entry of the playlist, referencing files inside the bundle."""

    scene: int
    video: str
    audio: Optional[str] = None


def render_playlist(title: str, clips: List[PlaylistClip]) -> str:
    """Render the playlist page for ``clips`` in play order."""
    template = _env.get_template(f"{PLAYLIST_FILENAME}.j2")
    return template.render(title=title, clips=[asdict(clip) for clip in clips])
