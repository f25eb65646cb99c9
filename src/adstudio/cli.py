"""CLI entry point for the ad studio."""

import logging
import os
import typer
from pathlib import Path
from typing import Optional

from . import __version__
from .config import config
from .constants import ASPECT_RATIOS, AVAILABLE_FONTS, ERAS, TONES, VOICES
from .editor.overlays import find_text
from .errors import AdStudioError, GenerationError
from .models import AdRequest, GenerationState, Position, Scene, VisualType

app = typer.Typer(
    name="ad-studio",
    help="AI-powered ad studio",
    no_args_is_help=True
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ad-studio version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Ad Studio - generate ad scenes, chain them into stories and export them."""
    pass


def prompt_for_credentials() -> None:
    """Ask for a service account key file and make it the active credential."""
    typer.echo("🔑 A Google Cloud credential is required to render visuals.")
    key_file = typer.prompt("   Path to service account JSON (leave empty to cancel)", default="", show_default=False)
    if key_file:
        os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = str(Path(key_file).expanduser())


def show_progress(state: GenerationState, message: str) -> None:
    if state is GenerationState.FAILED or not message:
        return
    typer.echo(f"   ⏳ {message}")


def open_session():
    """Open the studio session for the configured workspace."""
    from .services import CredentialGate
    from .studio import StudioSession

    return StudioSession.open(
        credentials=CredentialGate(selector=prompt_for_credentials),
        on_progress=show_progress,
    )


def fail(error: Exception) -> None:
    """Report an error and exit with status 1."""
    message = error.args[0] if isinstance(error, KeyError) and error.args else str(error)
    typer.echo(f"❌ {message}")
    if isinstance(error, GenerationError) and error.authorization:
        typer.echo("   Your credential might be invalid. Select a valid credential and try again.")
    raise typer.Exit(1)


def describe_scene(scene: Scene) -> None:
    """Print a scene summary."""
    typer.echo(f"🎬 {scene.product} - scene {scene.scene_number} ({scene.visual_type.value}, {scene.aspect_ratio})")
    typer.echo(f"   ID: {scene.id}")
    typer.echo(f"   Era: {scene.era}  Tone: {scene.tone}")
    if scene.script:
        typer.echo("   Script:")
        for line in scene.script:
            typer.echo(f"     • {line}")
    if scene.visual_path:
        typer.echo(f"   Visual: {scene.visual_path}")
    if scene.audio_path:
        typer.echo(f"   Voiceover: {scene.audio_path}")
    if scene.text_overlays:
        typer.echo("   Text overlays:")
        for overlay in scene.text_overlays:
            typer.echo(
                f"     {overlay.id}: '{overlay.text}' ({overlay.font}, {overlay.size:g}%, "
                f"{overlay.color}) at ({overlay.position.x:g}, {overlay.position.y:g})"
            )
    if scene.logo:
        typer.echo(
            f"   Logo: {scene.logo.image} ({scene.logo.size:g}%) at "
            f"({scene.logo.position.x:g}, {scene.logo.position.y:g})"
        )


@app.command()
def brief(
    output: Path = typer.Option(
        Path("brief.yaml"),
        "--output",
        "-o",
        help="Output brief file path"
    )
) -> None:
    """Write the default brief to a YAML file for editing."""
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        AdRequest.default().to_yaml(output)
    except OSError as e:
        typer.echo(f"❌ Error saving brief: {e}")
        raise typer.Exit(1)

    typer.echo(f"✅ Brief saved: {output}")
    typer.echo(f"   Eras: {', '.join(ERAS)}")
    typer.echo(f"   Tones: {', '.join(TONES)}")
    typer.echo(f"   Voices: {', '.join(VOICES)}")
    typer.echo(f"   Aspect ratios: {', '.join(ASPECT_RATIOS)}")


def build_request(
    brief_file: Optional[Path],
    product: Optional[str],
    idea: Optional[str],
    visual_type: Optional[VisualType],
    era: Optional[str],
    tone: Optional[str],
    aspect_ratio: Optional[str],
    voice: Optional[str],
    notes: Optional[str],
    base: Optional[AdRequest] = None,
) -> AdRequest:
    """Merge a brief file and command-line options into one request."""
    request = AdRequest.from_yaml(brief_file) if brief_file else (base or AdRequest.default())
    overrides = {
        "product": product,
        "visual_idea": idea,
        "visual_type": visual_type,
        "era": era,
        "tone": tone,
        "aspect_ratio": aspect_ratio,
        "voice": voice,
        "notes": notes,
    }
    data = request.model_dump()
    data.update({key: value for key, value in overrides.items() if value is not None})
    return AdRequest(**data)


def check_configuration(request: AdRequest) -> None:
    try:
        config.validate_required()
        if request.visual_type is VisualType.VIDEO:
            config.validate_google_required()
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)


@app.command()
def generate(
    brief_file: Optional[Path] = typer.Option(
        None,
        "--brief",
        "-b",
        help="Brief YAML file (see 'ad-studio brief')",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    product: Optional[str] = typer.Option(None, "--product", "-p", help="Product name"),
    idea: Optional[str] = typer.Option(None, "--idea", "-i", help="Visual idea"),
    visual_type: Optional[VisualType] = typer.Option(None, "--type", "-t", help="Image or video"),
    era: Optional[str] = typer.Option(None, "--era", help="Era the ad should evoke"),
    tone: Optional[str] = typer.Option(None, "--tone", help="Tone of the ad"),
    aspect_ratio: Optional[str] = typer.Option(None, "--aspect-ratio", "-a", help="Aspect ratio, e.g. 16:9"),
    voice: Optional[str] = typer.Option(None, "--voice", help="Voiceover voice (videos only)"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Extra notes for the script writer"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Generate a new scene, starting a new story."""
    setup_logging(verbose)

    try:
        request = build_request(brief_file, product, idea, visual_type, era, tone, aspect_ratio, voice, notes)
    except (OSError, ValueError) as e:
        fail(e)
    check_configuration(request)

    typer.echo(f"🎬 Generating {request.visual_type.value} ad for {request.product}")
    session = open_session()
    try:
        scene = session.submit(request)
    except AdStudioError as e:
        fail(e)

    typer.echo("\n✅ Scene generated")
    describe_scene(scene)


@app.command("add-scene")
def add_scene(
    scene_id: Optional[str] = typer.Argument(None, help="Any scene of the story (default: selected scene)"),
    idea: str = typer.Option(..., "--idea", "-i", help="Visual idea for the new scene"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Extra notes for the script writer"),
    voice: Optional[str] = typer.Option(None, "--voice", help="Voiceover voice"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Add the next scene to a story, extending its last video."""
    setup_logging(verbose)
    session = open_session()

    try:
        context = session.begin_add_scene(scene_id)
        request = build_request(None, None, idea, None, None, None, None, voice, notes, base=session.draft)
        check_configuration(request)
        typer.echo(f"🎬 Adding scene {context.scene_number} to {context.root.product}")
        scene = session.submit(request)
    except (AdStudioError, KeyError, ValueError) as e:
        fail(e)

    typer.echo("\n✅ Scene added")
    describe_scene(scene)


@app.command()
def idea(
    randomize: bool = typer.Option(False, "--randomize", "-r", help="Also pick random era, tone, voice and aspect ratio"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save the resulting brief to this YAML file"),
) -> None:
    """Ask for a random product and visual idea."""
    if not config.anthropic_api_key:
        typer.echo("❌ ANTHROPIC_API_KEY environment variable not set")
        raise typer.Exit(1)

    session = open_session()
    typer.echo("💡 Thinking of an idea...")
    try:
        request = session.randomize() if randomize else session.random_idea()
    except AdStudioError as e:
        fail(e)

    typer.echo(f"   Product: {request.product}")
    typer.echo(f"   Visual idea: {request.visual_idea}")
    if randomize:
        typer.echo(f"   Era: {request.era}  Tone: {request.tone}  Voice: {request.voice}  Aspect ratio: {request.aspect_ratio}")

    if output:
        request.to_yaml(output)
        typer.echo(f"\n✅ Brief saved: {output}")


@app.command()
def brainstorm(
    product: str = typer.Argument(..., help="Product to brainstorm concepts for"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Extra direction for the concepts"),
    apply: Optional[int] = typer.Option(None, "--apply", help="Apply concept N (1-based) to the brief", min=1),
    output: Path = typer.Option(Path("brief.yaml"), "--output", "-o", help="Brief file written by --apply"),
) -> None:
    """Brainstorm three ad concepts for a product (Concept Lab)."""
    if not config.anthropic_api_key:
        typer.echo("❌ ANTHROPIC_API_KEY environment variable not set")
        raise typer.Exit(1)

    session = open_session()
    typer.echo(f"🧪 Brainstorming concepts for {product}")
    try:
        concepts = session.brainstorm(product, notes)
    except AdStudioError as e:
        fail(e)

    for number, concept in enumerate(concepts, start=1):
        typer.echo(f"\n{number}. {concept.headline}")
        typer.echo(f"   \"{concept.tagline}\"")
        typer.echo(f"   Tone: {concept.tone}")
        typer.echo(f"   Visual: {concept.visual_idea}")

    if apply is not None:
        if apply > len(concepts):
            typer.echo(f"❌ There is no concept {apply}")
            raise typer.Exit(1)
        session.draft = session.draft.model_copy(update={"product": product})
        request = session.apply_concept(concepts[apply - 1])
        request.to_yaml(output)
        typer.echo(f"\n✅ Concept {apply} applied: {output}")


@app.command()
def history() -> None:
    """List stories, newest first."""
    session = open_session()
    summaries = session.history_listing()
    if not summaries:
        typer.echo("📭 No ads yet. Run 'ad-studio generate' to create one.")
        return

    typer.echo(f"📚 {len(summaries)} stories")
    for summary in summaries:
        root = summary.root
        marker = "👉" if summary.selected else "  "
        count = summary.scene_count
        typer.echo(
            f"{marker} {root.id}  {root.product} ({root.visual_type.value}, {root.era}, {root.tone}) "
            f"- {count} scene{'s' if count != 1 else ''} - {root.created_at:%Y-%m-%d %H:%M}"
        )


@app.command()
def story(
    scene_id: Optional[str] = typer.Argument(None, help="Any scene of the story (default: selected scene)"),
) -> None:
    """Show every scene of a story in order."""
    session = open_session()
    try:
        scenes = session.view_story(scene_id).scenes
    except (AdStudioError, KeyError) as e:
        fail(e)

    typer.echo(f"📖 Story of {scenes[0].product}: {len(scenes)} scene(s)\n")
    for scene in scenes:
        describe_scene(scene)
        typer.echo("")


@app.command()
def select(scene_id: str = typer.Argument(..., help="Scene to select")) -> None:
    """Select the scene that editing and export commands act on."""
    session = open_session()
    try:
        scene = session.select(scene_id)
    except KeyError as e:
        fail(e)
    describe_scene(scene)


@app.command()
def delete(
    scene_id: str = typer.Argument(..., help="Scene to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a scene; deleting the first scene deletes its whole story."""
    session = open_session()
    try:
        scene = session.scene(scene_id)
    except (AdStudioError, KeyError) as e:
        fail(e)

    if scene.is_root and not yes:
        count = len(session.view_story(scene_id))
        if count > 1 and not typer.confirm(f"Delete {scene.product} and its {count - 1} other scene(s)?"):
            raise typer.Exit()

    removed = session.delete(scene_id)
    typer.echo(f"🗑️  Deleted {len(removed)} scene(s)")


@app.command()
def text(
    overlay_id: Optional[str] = typer.Argument(None, help="Text overlay to edit"),
    scene_id: Optional[str] = typer.Option(None, "--scene", "-s", help="Scene (default: selected scene)"),
    add: Optional[str] = typer.Option(None, "--add", help="Add a new text overlay with this text"),
    content: Optional[str] = typer.Option(None, "--text", help="New text"),
    font: Optional[str] = typer.Option(None, "--font", help=f"Font ({', '.join(AVAILABLE_FONTS)})"),
    size: Optional[float] = typer.Option(None, "--size", help="Font size in percent of the height"),
    color: Optional[str] = typer.Option(None, "--color", help="Hex color, e.g. #FFFFFF"),
    width: Optional[float] = typer.Option(None, "--width", help="Wrap width in percent of the width"),
    x: Optional[float] = typer.Option(None, "--x", help="Horizontal center in percent"),
    y: Optional[float] = typer.Option(None, "--y", help="Top edge in percent"),
    center: bool = typer.Option(False, "--center", help="Center horizontally"),
    remove: bool = typer.Option(False, "--remove", help="Delete the overlay"),
) -> None:
    """Add, edit, align or delete a text overlay."""
    session = open_session()
    changes = {
        key: value
        for key, value in {"text": content, "font": font, "size": size, "color": color, "width": width}.items()
        if value is not None
    }

    try:
        if add is not None:
            changes.pop("text", None)
            scene = session.add_text(add, scene_id, **changes)
            typer.echo(f"✅ Added text overlay {scene.text_overlays[-1].id}")
            return
        if overlay_id is None:
            typer.echo("❌ Give an overlay id or --add TEXT")
            raise typer.Exit(1)
        if remove:
            session.remove_text(overlay_id, scene_id)
            typer.echo(f"🗑️  Removed text overlay {overlay_id}")
            return

        if x is not None or y is not None:
            position = find_text(session.scene(scene_id), overlay_id).position
            changes["position"] = Position(
                x=x if x is not None else position.x,
                y=y if y is not None else position.y,
            )
        if changes:
            session.edit_text(overlay_id, scene_id, **changes)
        if center:
            session.align_center(overlay_id, scene_id)
    except (AdStudioError, KeyError, ValueError) as e:
        fail(e)

    typer.echo(f"✅ Updated text overlay {overlay_id}")


@app.command()
def logo(
    image: Optional[Path] = typer.Argument(None, help="Logo image to place", exists=True, dir_okay=False),
    scene_id: Optional[str] = typer.Option(None, "--scene", "-s", help="Scene (default: selected scene)"),
    size: Optional[float] = typer.Option(None, "--size", help="Logo width in percent of the width"),
    x: Optional[float] = typer.Option(None, "--x", help="Horizontal center in percent"),
    y: Optional[float] = typer.Option(None, "--y", help="Vertical center in percent"),
    remove: bool = typer.Option(False, "--remove", help="Remove the logo"),
) -> None:
    """Place, resize, move or remove the scene's logo."""
    session = open_session()
    try:
        if remove:
            session.remove_logo(scene_id)
            typer.echo("🗑️  Logo removed")
            return
        if image is not None:
            session.set_logo(image, size, scene_id)
        elif size is not None:
            session.resize_logo(size, scene_id)
        if x is not None or y is not None:
            current = session.scene(scene_id).logo
            if current is None:
                raise KeyError("The scene has no logo")
            session.move_logo(
                x if x is not None else current.position.x,
                y if y is not None else current.position.y,
                scene_id,
            )
    except (AdStudioError, KeyError, OSError, ValueError) as e:
        fail(e)

    typer.echo("✅ Logo updated")


@app.command()
def export(
    scene_id: Optional[str] = typer.Argument(None, help="Scene to export (default: selected scene)"),
    story_export: bool = typer.Option(False, "--story", help="Export the scene's whole story as one zip"),
    output: Path = typer.Option(Path("exports"), "--output", "-o", help="Output directory"),
) -> None:
    """Export a scene (image or video bundle) or a whole story."""
    session = open_session()

    try:
        if story_export:
            typer.echo("📦 Exporting story...")
            path = session.export_story(
                output,
                scene_id,
                on_progress=lambda percent: typer.echo(f"   {percent:.0f}%"),
            )
        else:
            path = session.export_scene(output, scene_id)
    except (AdStudioError, KeyError) as e:
        fail(e)

    typer.echo(f"✅ Exported: {path}")


if __name__ == "__main__":
    app()
