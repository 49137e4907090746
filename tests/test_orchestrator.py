import pytest

from circl_walkthrough.tutorial.content import TutorialCatalog
from circl_walkthrough.tutorial.events import EventType, TutorialEvent
from circl_walkthrough.tutorial.orchestrator import TutorialOrchestrator
from circl_walkthrough.tutorial.store import (
    KEY_CURRENT_FLOW,
    KEY_CURRENT_STEP,
    KEY_JUST_COMPLETED_ONBOARDING,
    KEY_ONBOARDING_COMPLETED,
    KEY_USER_TYPE,
    InMemoryPreferenceStore,
    JsonPreferenceStore,
    completion_key,
)
from circl_walkthrough.tutorial.views import (
    OnboardingAnswers,
    Persona,
    TutorialState,
    TutorialStatus,
)


def _destinations(flow) -> list:
    return [step.navigation_destination for step in flow.steps if step.navigation_destination]


def test_fresh_orchestrator_is_idle(make_orchestrator) -> None:
    orchestrator = make_orchestrator()

    assert orchestrator.state == TutorialState.not_started()
    assert orchestrator.current_flow is None
    assert orchestrator.current_step is None
    assert orchestrator.current_step_index == 0
    assert orchestrator.is_showing_tutorial is False
    assert orchestrator.user_type is Persona.COMMUNITY_BUILDER


def test_default_persona_is_configurable(make_orchestrator) -> None:
    orchestrator = make_orchestrator(default_persona=Persona.STUDENT)

    assert orchestrator.user_type is Persona.STUDENT
    assert orchestrator.start()
    assert orchestrator.current_flow.persona is Persona.STUDENT


def test_start_shows_first_step_and_navigates(make_orchestrator, store, navigation) -> None:
    orchestrator = make_orchestrator()
    orchestrator.set_user_type(Persona.MENTOR)

    assert orchestrator.start() is True

    assert orchestrator.is_showing_tutorial
    assert orchestrator.state == TutorialState.in_progress(0)
    assert orchestrator.current_flow.persona is Persona.MENTOR
    assert orchestrator.current_step is orchestrator.current_flow.steps[0]
    assert navigation.destinations == ["PageForum"]
    assert store.get(KEY_CURRENT_STEP) == 0
    assert store.get(KEY_CURRENT_FLOW) == "MENTOR"


def test_walking_every_step_completes(make_orchestrator, store, navigation) -> None:
    store.put(KEY_JUST_COMPLETED_ONBOARDING, True)
    orchestrator = make_orchestrator()
    orchestrator.start(Persona.ENTREPRENEUR)
    flow = orchestrator.current_flow

    for expected in range(1, flow.step_count):
        orchestrator.next_step()
        assert orchestrator.state == TutorialState.in_progress(expected)
        assert store.get(KEY_CURRENT_STEP) == expected

    assert not store.get_bool(completion_key(Persona.ENTREPRENEUR))

    orchestrator.next_step()

    assert orchestrator.state == TutorialState.completed()
    assert orchestrator.is_showing_tutorial is False
    assert orchestrator.current_flow is None
    assert orchestrator.current_step_index == 0
    assert store.get_bool(completion_key(Persona.ENTREPRENEUR))
    assert not store.contains(KEY_JUST_COMPLETED_ONBOARDING)
    assert navigation.destinations == _destinations(flow)


def test_next_step_without_flow_is_ignored(make_orchestrator, store) -> None:
    orchestrator = make_orchestrator()
    orchestrator.next_step()

    assert orchestrator.state == TutorialState.not_started()
    assert store.keys() == []


def test_previous_step(make_orchestrator, navigation) -> None:
    orchestrator = make_orchestrator()
    orchestrator.start(Persona.STUDENT)
    orchestrator.next_step()
    orchestrator.next_step()

    orchestrator.previous_step()

    assert orchestrator.state == TutorialState.in_progress(1)
    assert navigation.destinations[-1] == orchestrator.current_step.navigation_destination


def test_previous_step_on_first_step_is_a_noop(make_orchestrator, store, navigation) -> None:
    events = []
    orchestrator = make_orchestrator()
    orchestrator.start(Persona.STUDENT)
    orchestrator.subscribe(events.append)
    before = store.snapshot()

    orchestrator.previous_step()

    assert orchestrator.state == TutorialState.in_progress(0)
    assert navigation.destinations == ["PageForum"]
    assert store.snapshot() == before
    assert events == []


@pytest.mark.parametrize("advance", [0, 3, 7])
def test_skip_from_any_step(make_orchestrator, store, advance: int) -> None:
    store.put(KEY_JUST_COMPLETED_ONBOARDING, True)
    orchestrator = make_orchestrator()
    orchestrator.start(Persona.INVESTOR)
    for _ in range(advance):
        orchestrator.next_step()

    orchestrator.skip()

    assert orchestrator.state == TutorialState.skipped()
    assert orchestrator.is_showing_tutorial is False
    assert orchestrator.current_flow is None
    assert orchestrator.current_step_index == 0
    assert not store.contains(completion_key(Persona.INVESTOR))
    assert not store.contains(KEY_JUST_COMPLETED_ONBOARDING)


def test_skipped_tutorial_can_start_again(make_orchestrator) -> None:
    orchestrator = make_orchestrator()
    orchestrator.set_user_type(Persona.INVESTOR)
    orchestrator.start()
    orchestrator.skip()

    assert orchestrator.start() is True


def test_progress_is_restored_by_a_new_instance(make_orchestrator) -> None:
    first = make_orchestrator()
    first.set_user_type(Persona.MENTOR)
    first.start()
    for _ in range(3):
        first.next_step()

    second = make_orchestrator()

    assert second.user_type is Persona.MENTOR
    assert second.current_step_index == 3
    assert second.state == TutorialState.not_started()
    assert second.is_showing_tutorial is False


def test_stale_progress_of_completed_flow_is_discarded(store, make_orchestrator) -> None:
    store.put(KEY_CURRENT_STEP, 3)
    store.put(KEY_CURRENT_FLOW, "MENTOR")
    store.put(completion_key(Persona.MENTOR), True)

    assert make_orchestrator().current_step_index == 0


def test_negative_saved_step_is_ignored(store, make_orchestrator) -> None:
    store.put(KEY_CURRENT_STEP, -2)
    store.put(KEY_CURRENT_FLOW, "MENTOR")

    assert make_orchestrator().current_step_index == 0


def test_start_after_resume_begins_at_first_step(store, make_orchestrator) -> None:
    store.put(KEY_USER_TYPE, "MENTOR")
    store.put(KEY_CURRENT_STEP, 3)
    store.put(KEY_CURRENT_FLOW, "MENTOR")
    orchestrator = make_orchestrator()

    orchestrator.start()

    assert orchestrator.state == TutorialState.in_progress(0)
    assert store.get(KEY_CURRENT_STEP) == 0


def test_corrupt_stored_values_fall_back_to_defaults(store, make_orchestrator) -> None:
    store.put(KEY_USER_TYPE, "ASTRONAUT")
    store.put(KEY_CURRENT_FLOW, 42)
    store.put(KEY_CURRENT_STEP, 5)

    orchestrator = make_orchestrator()

    assert orchestrator.user_type is Persona.COMMUNITY_BUILDER
    assert orchestrator.current_step_index == 0
    assert orchestrator.start() is True


def test_completion_is_idempotent(make_orchestrator, store) -> None:
    orchestrator = make_orchestrator()
    orchestrator.start(Persona.STUDENT)
    orchestrator.complete()
    orchestrator.complete()

    assert orchestrator.state == TutorialState.completed()
    assert store.get(completion_key(Persona.STUDENT)) is True


def test_completed_tutorial_is_not_started_again(make_orchestrator, navigation) -> None:
    orchestrator = make_orchestrator()
    orchestrator.set_user_type(Persona.STUDENT)
    orchestrator.start()
    orchestrator.complete()
    navigation.destinations.clear()

    assert orchestrator.start() is False
    assert orchestrator.is_showing_tutorial is False
    assert navigation.destinations == []


def test_explicit_persona_starts_even_when_completed(make_orchestrator) -> None:
    orchestrator = make_orchestrator()
    orchestrator.start(Persona.STUDENT)
    orchestrator.complete()

    assert orchestrator.start(Persona.STUDENT) is True


def test_restart_clears_completion(make_orchestrator, store) -> None:
    orchestrator = make_orchestrator()
    orchestrator.set_user_type(Persona.INVESTOR)
    orchestrator.start()
    orchestrator.complete()

    assert orchestrator.restart() is True

    assert orchestrator.current_flow.persona is Persona.INVESTOR
    assert orchestrator.state == TutorialState.in_progress(0)
    assert not store.contains(completion_key(Persona.INVESTOR))


def test_restart_other_persona_keeps_detected_persona(make_orchestrator) -> None:
    orchestrator = make_orchestrator()
    orchestrator.set_user_type(Persona.STUDENT)

    orchestrator.restart(Persona.MENTOR)

    assert orchestrator.user_type is Persona.STUDENT
    assert orchestrator.active_persona is Persona.MENTOR
    assert orchestrator.current_flow.persona is Persona.MENTOR


def test_other_persona_shares_community_builder_completion(make_orchestrator, store) -> None:
    orchestrator = make_orchestrator()
    orchestrator.set_user_type(Persona.OTHER)

    orchestrator.start()
    assert orchestrator.current_flow.persona is Persona.COMMUNITY_BUILDER
    orchestrator.complete()

    assert store.get_bool(completion_key(Persona.COMMUNITY_BUILDER))
    assert orchestrator.has_tutorial_been_completed(Persona.OTHER)
    assert orchestrator.start() is False


def test_check_and_trigger_requires_onboarding_flag(make_orchestrator, store) -> None:
    orchestrator = make_orchestrator()
    store.put(KEY_ONBOARDING_COMPLETED, True)

    assert orchestrator.check_and_trigger() is False
    assert orchestrator.is_showing_tutorial is False


def test_check_and_trigger_starts_once(make_orchestrator, store) -> None:
    orchestrator = make_orchestrator()
    orchestrator.detect_and_set_user_type(OnboardingAnswers(usage_interests="Make Investments"))
    store.put(KEY_JUST_COMPLETED_ONBOARDING, True)

    assert orchestrator.check_and_trigger() is True
    assert orchestrator.current_flow.persona is Persona.INVESTOR

    while orchestrator.is_showing_tutorial:
        orchestrator.next_step()

    assert orchestrator.check_and_trigger() is False


def test_check_and_trigger_skips_completed_tutorial(make_orchestrator, store) -> None:
    store.put(KEY_USER_TYPE, "MENTOR")
    store.put(completion_key(Persona.MENTOR), True)
    store.put(KEY_JUST_COMPLETED_ONBOARDING, True)

    assert make_orchestrator().check_and_trigger() is False


def test_reentrant_start_is_rejected(store) -> None:
    nested_results = []
    orchestrator = TutorialOrchestrator(store=store)

    def navigate(destination: str) -> None:
        nested_results.append(orchestrator.start(Persona.STUDENT))

    orchestrator.set_navigation_callback(navigate)

    assert orchestrator.start(Persona.MENTOR) is True
    assert nested_results == [False]
    assert orchestrator.current_flow.persona is Persona.MENTOR

    # The guard is released once the first start returns
    assert orchestrator.start(Persona.STUDENT) is True
    assert orchestrator.current_flow.persona is Persona.STUDENT


def test_missing_flow_leaves_tutorial_inactive(store) -> None:
    catalog = TutorialCatalog()
    catalog._builders.pop(Persona.MENTOR)  # noqa: SLF001
    orchestrator = TutorialOrchestrator(store=store, catalog=catalog)

    assert orchestrator.start(Persona.MENTOR) is False
    assert orchestrator.is_showing_tutorial is False
    assert orchestrator.state == TutorialState.not_started()
    # A failed start does not keep the guard engaged
    assert orchestrator.start(Persona.STUDENT) is True


def test_navigation_is_skipped_without_callback(store) -> None:
    orchestrator = TutorialOrchestrator(store=store)
    assert orchestrator.start(Persona.STUDENT) is True
    orchestrator.next_step()

    assert orchestrator.state == TutorialState.in_progress(1)


def test_steps_without_destination_do_not_navigate(make_orchestrator, navigation) -> None:
    orchestrator = make_orchestrator()
    orchestrator.start(Persona.ENTREPRENEUR)
    for _ in range(3):
        orchestrator.next_step()

    assert orchestrator.current_step.navigation_destination is None
    assert len(navigation.destinations) == 3


def test_last_navigation_callback_wins(make_orchestrator, navigation) -> None:
    replacement = []
    orchestrator = make_orchestrator()
    orchestrator.set_navigation_callback(replacement.append)

    orchestrator.start(Persona.STUDENT)

    assert navigation.destinations == []
    assert replacement == ["PageForum"]


def test_failing_navigation_callback_does_not_break_transition(store) -> None:
    def navigate(destination: str) -> None:
        raise RuntimeError("router unavailable")

    orchestrator = TutorialOrchestrator(store=store, navigation_callback=navigate)

    assert orchestrator.start(Persona.STUDENT) is True
    orchestrator.next_step()
    assert orchestrator.state == TutorialState.in_progress(1)


def test_reset_forgets_owned_state_only(make_orchestrator, store) -> None:
    store.put(KEY_ONBOARDING_COMPLETED, True)
    store.put("theme", "dark")
    orchestrator = make_orchestrator()
    orchestrator.set_user_type(Persona.MENTOR)
    orchestrator.start()
    orchestrator.next_step()
    orchestrator.complete()
    store.put(KEY_JUST_COMPLETED_ONBOARDING, True)

    orchestrator.reset_all_tutorial_state()

    assert store.snapshot() == {KEY_ONBOARDING_COMPLETED: True, "theme": "dark"}
    assert orchestrator.state == TutorialState.not_started()
    assert orchestrator.user_type is Persona.COMMUNITY_BUILDER
    assert orchestrator.current_flow is None
    assert orchestrator.current_step_index == 0


def test_reset_during_walkthrough(make_orchestrator) -> None:
    orchestrator = make_orchestrator()
    orchestrator.start(Persona.STUDENT)
    orchestrator.next_step()

    orchestrator.reset_all_tutorial_state()

    assert orchestrator.is_showing_tutorial is False
    assert make_orchestrator().current_step_index == 0


def test_detect_and_set_user_type_persists(make_orchestrator, store) -> None:
    orchestrator = make_orchestrator()

    persona = orchestrator.detect_and_set_user_type(
        OnboardingAnswers(usage_interests="Student, Start Your Business")
    )

    assert persona is Persona.STUDENT_ENTREPRENEUR
    assert orchestrator.user_type is persona
    assert store.get(KEY_USER_TYPE) == "STUDENT_ENTREPRENEUR"
    assert make_orchestrator().user_type is persona


def test_listeners_receive_transitions(make_orchestrator) -> None:
    events = []
    orchestrator = make_orchestrator()
    orchestrator.subscribe(events.append)

    orchestrator.set_user_type(Persona.MENTOR)
    orchestrator.start()
    orchestrator.next_step()
    orchestrator.skip()
    orchestrator.reset_all_tutorial_state()

    assert [event.event_type for event in events] == [
        EventType.PERSONA_DETECTED,
        EventType.STARTED,
        EventType.STEP_CHANGED,
        EventType.SKIPPED,
        EventType.RESET,
    ]
    assert all(isinstance(event, TutorialEvent) for event in events)

    started, changed, skipped = events[1], events[2], events[3]
    assert started.state == TutorialState.in_progress(0)
    assert started.persona is Persona.MENTOR
    assert started.step.title == "Welcome, Mentor!"
    assert changed.step_index == 1
    assert skipped.is_terminal
    assert skipped.step is None


def test_completed_event(make_orchestrator) -> None:
    events = []
    orchestrator = make_orchestrator()
    orchestrator.start(Persona.STUDENT)
    orchestrator.subscribe(events.append)

    orchestrator.complete()

    assert len(events) == 1
    assert events[0].event_type is EventType.COMPLETED
    assert events[0].state.status is TutorialStatus.COMPLETED


def test_unsubscribe(make_orchestrator) -> None:
    events = []
    orchestrator = make_orchestrator()
    unsubscribe = orchestrator.subscribe(events.append)

    orchestrator.start(Persona.STUDENT)
    unsubscribe()
    unsubscribe()
    orchestrator.next_step()

    assert [event.event_type for event in events] == [EventType.STARTED]


def test_failing_listener_does_not_stop_others(make_orchestrator) -> None:
    received = []

    def broken(event: TutorialEvent) -> None:
        raise ValueError("listener bug")

    orchestrator = make_orchestrator()
    orchestrator.subscribe(broken)
    orchestrator.subscribe(received.append)

    assert orchestrator.start(Persona.STUDENT) is True
    assert [event.event_type for event in received] == [EventType.STARTED]


def test_failing_listener_does_not_abort_transitions(make_orchestrator, store) -> None:
    received = []

    def broken(event: TutorialEvent) -> None:
        raise RuntimeError("listener bug")

    orchestrator = make_orchestrator()
    orchestrator.subscribe(broken)
    orchestrator.subscribe(received.append)

    orchestrator.start(Persona.STUDENT)
    orchestrator.next_step()
    orchestrator.previous_step()
    orchestrator.complete()
    orchestrator.reset_all_tutorial_state()

    assert [event.event_type for event in received] == [
        EventType.STARTED,
        EventType.STEP_CHANGED,
        EventType.STEP_CHANGED,
        EventType.COMPLETED,
        EventType.RESET,
    ]
    assert orchestrator.state == TutorialState.not_started()
    assert not store.contains(completion_key(Persona.STUDENT))


def test_orchestrators_do_not_share_session_state() -> None:
    shared = InMemoryPreferenceStore()
    first = TutorialOrchestrator(store=shared)
    second = TutorialOrchestrator(store=shared)

    first.start(Persona.STUDENT)

    assert second.is_showing_tutorial is False
    assert second.current_flow is None


class UnwritableStore(InMemoryPreferenceStore):
    """Store whose disk is gone: reads work, writes fail."""

    def put(self, key, value) -> None:
        raise OSError("No space left on device")

    def remove(self, *keys) -> None:
        raise OSError("No space left on device")


def test_failed_store_writes_do_not_break_transitions(navigation) -> None:
    store = UnwritableStore({KEY_JUST_COMPLETED_ONBOARDING: True})
    orchestrator = TutorialOrchestrator(store=store, navigation_callback=navigation)

    orchestrator.set_user_type(Persona.MENTOR)
    assert orchestrator.user_type is Persona.MENTOR

    assert orchestrator.start() is True
    assert orchestrator.state == TutorialState.in_progress(0)
    assert navigation.destinations == ["PageForum"]

    orchestrator.next_step()
    assert orchestrator.state == TutorialState.in_progress(1)

    orchestrator.complete()
    assert orchestrator.state == TutorialState.completed()
    assert orchestrator.is_showing_tutorial is False

    assert orchestrator.restart(Persona.STUDENT) is True
    orchestrator.skip()
    assert orchestrator.state == TutorialState.skipped()

    orchestrator.reset_all_tutorial_state()
    assert orchestrator.state == TutorialState.not_started()
    assert store.snapshot() == {KEY_JUST_COMPLETED_ONBOARDING: True}


def test_json_store_in_unusable_directory(tmp_path) -> None:
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")
    store = JsonPreferenceStore(blocker / "prefs.json")
    orchestrator = TutorialOrchestrator(store=store)

    assert orchestrator.start(Persona.MENTOR) is True
    assert orchestrator.is_showing_tutorial is True

    orchestrator.skip()
    assert orchestrator.state == TutorialState.skipped()
    assert orchestrator.is_showing_tutorial is False
