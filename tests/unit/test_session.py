"""Unit tests for the generation session state machine."""

from unittest.mock import MagicMock

import pytest

from logoforge.core.catalog import Decoration, Element, Font, LogoStyle, fragment_for
from logoforge.core.config_store import ConfigStore
from logoforge.core.image_gen import GenerationResult
from logoforge.core.models import GenerationConfig, ImageArtifact
from logoforge.core.prompts_loader import get_prompts
from logoforge.core.session import GenerationSession, SessionState
from logoforge.utils.exceptions import (
    AuthenticationError,
    NoImageProduced,
    RequestTimeoutError,
    TransientServiceError,
    ValidationError,
)

CONFIG = GenerationConfig(
    server_name="Glory",
    element=Element.SHADOWS,
    font=Font.AGGRESSIVE,
    style=LogoStyle.CELESTIAL,
    decoration=Decoration.EMBLEM,
)


def _result(image: ImageArtifact, text: str | None = None) -> GenerationResult:
    return GenerationResult(
        image=image,
        assistant_text=text,
        generation_time=0.1,
        model_used="test-model",
        prompt_used="prompt",
    )


@pytest.fixture
def images(make_image):
    return {
        "first": ImageArtifact(data=make_image(color="red")),
        "second": ImageArtifact(data=make_image(color="green")),
        "reference": ImageArtifact(data=make_image(color="blue"), mime_type="image/jpeg"),
    }


@pytest.fixture
def collaborator(images):
    fake = MagicMock()
    fake.generate.return_value = _result(images["first"], "Forged.")
    fake.edit.return_value = _result(images["second"], "Refined.")
    return fake


@pytest.fixture
def session(collaborator):
    return GenerationSession(collaborator, ConfigStore(CONFIG), clock=lambda: 1000.0)


@pytest.fixture
def ready(session):
    session.submit_generate()
    return session


@pytest.mark.unit
class TestSubmitGenerate:
    def test_success_moves_to_ready(self, session, collaborator, images):
        message = session.submit_generate()
        assert session.state is SessionState.READY
        assert session.busy is False
        assert session.current_image is images["first"]
        assert message.role == "assistant"
        assert message.text == "Forged."
        assert message.timestamp == 1000.0
        assert list(session.history) == [message]
        collaborator.generate.assert_called_once()

    def test_prompt_contains_name_and_fragments(self, session, collaborator):
        session.submit_generate()
        prompt = collaborator.generate.call_args.args[0]
        assert "GLORY" in prompt
        for choice in (CONFIG.element, CONFIG.font, CONFIG.style, CONFIG.decoration):
            assert fragment_for(choice) in prompt

    def test_default_acknowledgement_when_no_text(self, session, collaborator, images):
        collaborator.generate.return_value = _result(images["first"], None)
        message = session.submit_generate()
        assert message.text == get_prompts().messages.generated.strip()

    def test_explicit_config_wins_over_store(self, session, collaborator):
        session.submit_generate(GenerationConfig(server_name="Other"))
        assert "OTHER" in collaborator.generate.call_args.args[0]
        assert session.active_config.server_name == "Other"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_raises_and_stays_idle(self, collaborator, name):
        session = GenerationSession(collaborator, ConfigStore(GenerationConfig(server_name=name)))
        with pytest.raises(ValidationError) as exc_info:
            session.submit_generate()
        assert exc_info.value.field == "server_name"
        assert session.state is SessionState.IDLE
        collaborator.generate.assert_not_called()

    def test_blank_name_in_ready_keeps_session(self, ready, images):
        with pytest.raises(ValidationError):
            ready.submit_generate(GenerationConfig(server_name=""))
        assert ready.state is SessionState.READY
        assert ready.current_image is images["first"]
        assert len(ready.history) == 1

    @pytest.mark.parametrize(
        "error", [NoImageProduced("no image"), TransientServiceError("busy", status_code=429)]
    )
    def test_failure_returns_to_idle_and_raises(self, session, collaborator, error):
        collaborator.generate.side_effect = error
        with pytest.raises(type(error)):
            session.submit_generate()
        assert session.state is SessionState.IDLE
        assert session.busy is False
        assert session.current_image is None
        assert len(session.history) == 0
        assert session.last_error is error
        assert session.needs_credentials is False

    def test_auth_failure_flags_credentials(self, session, collaborator):
        collaborator.generate.side_effect = AuthenticationError("bad key", status_code=401)
        with pytest.raises(AuthenticationError):
            session.submit_generate()
        assert session.needs_credentials is True

    def test_unexpected_failure_still_leaves_idle(self, session, collaborator):
        collaborator.generate.side_effect = RuntimeError("boom")
        with pytest.raises(RuntimeError):
            session.submit_generate()
        assert session.state is SessionState.IDLE
        assert session.busy is False

    def test_reentrant_generate_is_noop(self, session, collaborator, images):
        nested = []

        def generate(_prompt):
            assert session.state is SessionState.GENERATING
            assert session.busy is True
            nested.append(session.submit_generate())
            nested.append(session.submit_edit("too early"))
            return _result(images["first"])

        collaborator.generate.side_effect = generate
        session.submit_generate()
        assert nested == [None, None]
        assert collaborator.generate.call_count == 1
        collaborator.edit.assert_not_called()

    def test_regenerate_resets_session(self, ready, collaborator, images):
        ready.submit_edit("add wings")
        ready.stage_reference(images["reference"])
        ready.submit_generate()
        assert len(ready.history) == 1
        assert ready.staged_reference is None
        assert ready.current_image is images["first"]
        assert collaborator.generate.call_count == 2

    def test_failed_regenerate_drops_previous_image(self, ready, collaborator):
        collaborator.generate.side_effect = TransientServiceError("busy")
        with pytest.raises(TransientServiceError):
            ready.submit_generate()
        assert ready.state is SessionState.IDLE
        assert ready.current_image is None
        assert len(ready.history) == 0


@pytest.mark.unit
class TestSubmitEdit:
    def test_ignored_before_generation(self, session, collaborator):
        assert session.submit_edit("make it gold") is None
        assert session.state is SessionState.IDLE
        assert len(session.history) == 0
        collaborator.edit.assert_not_called()

    @pytest.mark.parametrize("instruction", ["", "   "])
    def test_empty_edit_without_reference_is_ignored(self, ready, collaborator, instruction):
        before = list(ready.history)
        assert ready.submit_edit(instruction) is None
        assert ready.state is SessionState.READY
        assert list(ready.history) == before
        collaborator.edit.assert_not_called()

    def test_success_appends_user_then_assistant(self, ready, collaborator, images):
        reply = ready.submit_edit("add blue fire")
        messages = list(ready.history)[1:]
        assert [m.role for m in messages] == ["user", "assistant"]
        assert messages[0].text == "add blue fire"
        assert messages[1] is reply
        assert reply.text == "Refined."
        assert ready.current_image is images["second"]
        assert ready.state is SessionState.READY

    def test_without_reference_attaches_current_only(self, ready, collaborator, images):
        ready.submit_edit("add blue fire")
        prompt, attachments = collaborator.edit.call_args.args
        assert tuple(attachments) == (images["first"],)
        assert '"add blue fire"' in prompt

    def test_with_reference_orders_current_first(self, ready, collaborator, images):
        ready.submit_edit("match it", images["reference"])
        _prompt, attachments = collaborator.edit.call_args.args
        assert tuple(attachments) == (images["first"], images["reference"])

    def test_staged_reference_consumed_on_dispatch(self, ready, collaborator, images):
        ready.stage_reference(images["reference"])
        seen = []
        collaborator.edit.side_effect = lambda *_: (
            seen.append(ready.staged_reference) or _result(images["second"])
        )
        ready.submit_edit("")
        assert seen == [None]
        assert ready.staged_reference is None
        _prompt, attachments = collaborator.edit.call_args.args
        assert attachments[1] is images["reference"]

    def test_reference_marker_on_user_message(self, ready, images):
        ready.submit_edit("use this", images["reference"])
        marker = get_prompts().messages.reference_attached
        assert ready.history[1].text == ("use this" + marker).strip()

    def test_reference_only_message_is_marker(self, ready, images):
        ready.submit_edit("", images["reference"])
        assert ready.history[1].text == get_prompts().messages.reference_attached.strip()

    def test_reentrant_calls_while_editing_are_noops(self, ready, collaborator, images):
        nested = []

        def edit(_prompt, _attachments):
            assert ready.state is SessionState.EDITING
            assert ready.busy is True
            nested.append(ready.submit_generate())
            nested.append(ready.submit_edit("again"))
            return _result(images["second"])

        collaborator.edit.side_effect = edit
        ready.submit_edit("sharper")
        assert nested == [None, None]
        assert collaborator.generate.call_count == 1
        assert collaborator.edit.call_count == 1
        assert [m.text for m in ready.history][1:] == [
            "sharper",
            get_prompts().messages.edited.strip(),
        ]

    def test_user_message_recorded_before_call(self, ready, collaborator, images):
        seen = []

        def edit(_prompt, _attachments):
            seen.append((ready.state, [m.role for m in ready.history]))
            return _result(images["second"])

        collaborator.edit.side_effect = edit
        ready.submit_edit("sharper")
        assert seen == [(SessionState.EDITING, ["assistant", "user"])]

    def test_default_confirmation_when_no_text(self, ready, collaborator, images):
        collaborator.edit.return_value = _result(images["second"], None)
        reply = ready.submit_edit("sharper")
        assert reply.text == get_prompts().messages.edited.strip()

    @pytest.mark.parametrize(
        "error",
        [
            NoImageProduced("The forge failed to materialize the image. Try again."),
            RequestTimeoutError("timed out"),
            AuthenticationError("bad key", status_code=403),
        ],
    )
    def test_failure_reported_inline(self, ready, collaborator, images, error):
        collaborator.edit.side_effect = error
        reply = ready.submit_edit("add wings")
        messages = list(ready.history)[1:]
        assert [m.role for m in messages] == ["user", "assistant"]
        assert messages[0].text == "add wings"
        assert reply is messages[1]
        assert reply.text == get_prompts().messages.edit_failed.format(error=error)
        assert str(error) in reply.text
        assert ready.current_image is images["first"]
        assert ready.state is SessionState.READY
        assert ready.last_error is error

    def test_auth_failure_during_edit_flags_credentials(self, ready, collaborator):
        collaborator.edit.side_effect = AuthenticationError("bad key", status_code=401)
        ready.submit_edit("x")
        assert ready.needs_credentials is True

    def test_unexpected_failure_returns_to_ready(self, ready, collaborator, images):
        collaborator.edit.side_effect = RuntimeError("boom")
        with pytest.raises(RuntimeError):
            ready.submit_edit("x")
        assert ready.state is SessionState.READY
        assert ready.current_image is images["first"]

    def test_edits_chain_from_latest_image(self, ready, collaborator, images, make_image):
        third = ImageArtifact(data=make_image(color="purple"))
        collaborator.edit.side_effect = [_result(images["second"]), _result(third)]
        ready.submit_edit("one")
        ready.submit_edit("two")
        first_call, second_call = collaborator.edit.call_args_list
        assert first_call.args[1][0] is images["first"]
        assert second_call.args[1][0] is images["second"]
        assert ready.current_image is third

    def test_unchanged_image_still_grows_history(self, ready, collaborator, images):
        collaborator.edit.return_value = _result(images["first"], "No change needed.")
        ready.submit_edit("keep it")
        ready.submit_edit("keep it")
        assert len(ready.history) == 5
        assert ready.current_image is images["first"]

    def test_edits_use_config_pinned_at_generation(self, ready, collaborator):
        ready.store.set_server_name("Renamed")
        ready.submit_edit("x")
        prompt = collaborator.edit.call_args.args[0]
        assert '"Glory"' in prompt
        assert "Renamed" not in prompt

    def test_edit_language(self, collaborator, images):
        session = GenerationSession(collaborator, ConfigStore(CONFIG), language="Portuguese")
        session.submit_generate()
        session.submit_edit("x")
        assert "in Portuguese" in collaborator.edit.call_args.args[0]

    def test_clear_reference(self, ready, images):
        ready.stage_reference(images["reference"])
        ready.clear_reference()
        assert ready.submit_edit("") is None
