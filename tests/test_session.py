"""
Tests for the studio session controller.
"""
import json
import random
import pytest

from adstudio.agents import Concept, Idea
from adstudio.constants import ERAS, TONES, VIDEO_ASPECT_RATIOS, VOICES
from adstudio.editor import Point
from adstudio.errors import CollaboratorError, GenerationError, PreconditionError
from adstudio.models import AdRequest, Box, OverlayKind, VisualType
from adstudio.studio import StudioSession


def video_request():
    return AdRequest(product="Starlight Soda", visual_idea="Arcade", voice="Puck")


def image_request():
    return AdRequest(product="Starlight Soda", visual_idea="A can", visual_type=VisualType.IMAGE)


class TestPersistence:
    """Tests for mirroring the store to disk."""

    def test_generated_scene_is_saved(self, session, history_store):
        """Every mutation rewrites the history file."""
        scene = session.submit(image_request())
        assert [s.id for s in history_store.load_all()] == [scene.id]
        assert history_store.load_selection() == scene.id

    def test_reopen_restores_history(self, session, history_store, media_library, text_generator,
                                     visual_generator, speech_generator, credentials):
        """A new session sees the saved scenes and selection."""
        first = session.submit(image_request())
        second = session.submit(image_request())
        session.select(first.id)

        reopened = StudioSession.open(
            history=history_store, media=media_library, text=text_generator,
            visuals=visual_generator, speech=speech_generator, credentials=credentials,
        )
        assert {s.id for s in reopened.scenes} == {first.id, second.id}
        assert reopened.selected.id == first.id

    def test_corrupt_history_starts_empty(self, workspace, session):
        """An unreadable history file opens as an empty studio."""
        path = workspace / "history.json"
        path.write_text("garbage")
        session.load()
        assert session.scenes == []

    def test_delete_saves_and_removes_media(self, session, history_store):
        """Deleting a story updates the file and removes generated media."""
        root = session.submit(video_request())
        session.begin_add_scene(root.id)
        child = session.submit(video_request().model_copy(update={"visual_idea": "Rooftop"}))

        removed = session.delete(root.id)

        assert {s.id for s in removed} == {root.id, child.id}
        assert json.loads(history_store.path.read_text()) == []
        assert not any(session.media.root.iterdir())


class TestAddScene:
    """Tests for continuing stories."""

    def test_begin_resets_draft(self, session):
        """The draft takes the root's brief with empty idea and notes."""
        root = session.submit(video_request().model_copy(update={"notes": "Retro"}))
        context = session.begin_add_scene(root.id)

        assert context.root.id == root.id
        assert context.scene_number == 2
        assert session.draft.product == root.product
        assert session.draft.visual_idea == ""
        assert session.draft.notes == ""

    def test_submit_clears_context(self, session):
        """A successful continuation ends the add-scene mode."""
        root = session.submit(video_request())
        session.begin_add_scene()
        child = session.submit(video_request())

        assert child.parent_id == root.id
        assert session.story_context is None
        assert [s.id for s in session.view_story(child.id)] == [root.id, child.id]

    def test_cancel_restores_selected_brief(self, session):
        """Cancelling restores the selected scene's brief."""
        root = session.submit(video_request().model_copy(update={"notes": "Retro"}))
        session.begin_add_scene(root.id)
        session.cancel_add_scene()

        assert session.story_context is None
        assert session.draft == root.brief()

    def test_cancel_without_selection(self, session):
        """With nothing selected the default brief returns."""
        session.cancel_add_scene()
        assert session.draft == AdRequest.default()

    def test_image_root_cannot_continue(self, session):
        """Image scenes have no video to extend."""
        root = session.submit(image_request())
        session.begin_add_scene(root.id)
        with pytest.raises(PreconditionError, match="regenerate the first scene"):
            session.submit(video_request())
        assert len(session.scenes) == 1
        assert session.story_context is not None


class TestIdeas:
    """Tests for brainstorm, random ideas and randomize."""

    def test_brainstorm_requires_product(self, session, text_generator):
        """Brainstorming needs a product name."""
        session.draft = session.draft.model_copy(update={"product": ""})
        with pytest.raises(PreconditionError):
            session.brainstorm()
        text_generator.brainstorm.assert_not_called()

    def test_apply_concept(self, session, text_generator):
        """Applying a concept copies its tone and visual idea."""
        concept = Concept(headline="H", tagline="T", tone="Edgy", visual_idea="Skateboards")
        text_generator.brainstorm.return_value = [concept]

        concepts = session.brainstorm("Moon Gum", "For teens")
        draft = session.apply_concept(concepts[0])

        text_generator.brainstorm.assert_called_once_with("Moon Gum", "For teens")
        assert (draft.tone, draft.visual_idea) == ("Edgy", "Skateboards")

    def test_random_idea(self, session, text_generator):
        """A random idea fills product and visual idea."""
        text_generator.random_idea.return_value = Idea(product="Cloud Socks", visual_idea="Floating socks")
        draft = session.random_idea()
        assert (draft.product, draft.visual_idea) == ("Cloud Socks", "Floating socks")

    def test_randomize(self, session, text_generator):
        """Randomize picks catalog values and asks for an idea."""
        text_generator.random_idea.return_value = Idea(product="Cloud Socks", visual_idea="Floating socks")
        session._rng = random.Random(7)
        draft = session.randomize()

        assert draft.era in ERAS
        assert draft.tone in TONES
        assert draft.voice in VOICES
        assert draft.aspect_ratio in VIDEO_ASPECT_RATIOS
        assert draft.product == "Cloud Socks"

    def test_idea_failure(self, session, text_generator):
        """Failures surface as generation errors with the original message."""
        text_generator.random_idea.side_effect = CollaboratorError("anthropic", "overloaded")
        with pytest.raises(CollaboratorError, match="overloaded"):
            session.random_idea()
        text_generator.random_idea.side_effect = ValueError("Invalid JSON in response")
        with pytest.raises(GenerationError, match="Invalid JSON"):
            session.random_idea()


class TestEditing:
    """Tests for overlay edits through the session."""

    def test_edit_text_persists(self, session, history_store):
        """Text edits replace the stored scene."""
        scene = session.submit(image_request())
        overlay_id = scene.text_overlays[0].id

        session.edit_text(overlay_id, color="#FF0000")
        saved = history_store.load_all()[0]
        assert saved.text_overlays[0].color == "#FF0000"
        assert session.interaction.active_text_id == overlay_id

    def test_logo_lifecycle(self, session, logo_file):
        """A logo can be set, resized, moved and removed."""
        session.submit(image_request())
        session.set_logo(logo_file, size=25)
        session.resize_logo(30)
        scene = session.move_logo(10, 20)

        assert scene.logo.size == 30
        assert (scene.logo.position.x, scene.logo.position.y) == (10, 20)
        assert session.interaction.logo_active
        assert session.remove_logo().logo is None

    def test_drag_updates_selected_scene(self, session):
        """Dragging moves the overlay in the stored scene."""
        scene = session.submit(image_request())
        overlay = scene.text_overlays[0]
        container = Box(0, 0, 1000, 500)
        local = overlay.box(container.width, container.height, 50)

        session.begin_drag(OverlayKind.TEXT, overlay.id, Point(local.left, local.top), local)
        moved = session.drag_to(Point(local.left + 100, local.top + 50), container)
        session.end_drag()

        assert moved.text_overlays[0].position.x == pytest.approx(60)
        assert moved.text_overlays[0].position.y == pytest.approx(85)
        assert session.selected == moved

    def test_no_selection(self, session):
        """Edits without a selected scene are refused."""
        with pytest.raises(PreconditionError):
            session.remove_logo()


class TestExport:
    """Tests for exporting through the session."""

    def test_export_story(self, session, tmp_path):
        """The selected scene's story is exported."""
        root = session.submit(video_request())
        session.begin_add_scene(root.id)
        session.submit(video_request())

        progress = []
        path = session.export_story(tmp_path / "exports", on_progress=progress.append)
        assert path.name == "Starlight_Soda_story.zip"
        assert progress[-1] == 100.0

    def test_export_image(self, session, tmp_path):
        """Image scenes export as JPEG."""
        session.submit(image_request())
        assert session.export_scene(tmp_path / "exports").suffix == ".jpg"
