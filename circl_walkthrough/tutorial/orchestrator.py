"""Tutorial orchestrator - the walkthrough state machine."""

from typing import Callable, List, Optional

from circl_walkthrough.core.exceptions import (
    ConfigurationError,
    PersistenceError,
    ReentrancyRejection,
)
from circl_walkthrough.core.logging import get_logger, log_transition
from circl_walkthrough.tutorial.classifier import classify
from circl_walkthrough.tutorial.content import TutorialCatalog
from circl_walkthrough.tutorial.events import (
    EventType,
    NavigationCallback,
    TutorialEvent,
    TutorialListener,
)
from circl_walkthrough.tutorial.store import (
    KEY_CURRENT_FLOW,
    KEY_CURRENT_STEP,
    KEY_JUST_COMPLETED_ONBOARDING,
    KEY_ONBOARDING_COMPLETED,
    KEY_USER_TYPE,
    PreferenceStore,
    completion_key,
    owned_keys,
)
from circl_walkthrough.tutorial.views import (
    OnboardingAnswers,
    Persona,
    TutorialFlow,
    TutorialState,
    TutorialStep,
)

logger = get_logger(__name__)


class TutorialOrchestrator:
    """
    Drives a user through a persona-specific tutorial flow.

    Selects the flow for a persona, tracks the current step, persists
    progress and completion in the preference store, and asks the host to
    navigate when a step names a destination.

    The orchestrator is meant to be driven from a single actor (the UI
    thread). Create one instance at startup and hand it to whoever needs it.
    No internal failure is raised to the caller: missing flows, corrupt stored
    values and overlapping starts are logged and leave the tutorial inactive.

    Usage:
        orchestrator = TutorialOrchestrator(store=JsonPreferenceStore(path))
        orchestrator.set_navigation_callback(router.navigate)
        orchestrator.check_and_trigger()
    """

    def __init__(
        self,
        store: PreferenceStore,
        catalog: Optional[TutorialCatalog] = None,
        navigation_callback: Optional[NavigationCallback] = None,
        default_persona: Persona = Persona.COMMUNITY_BUILDER,
    ):
        """
        Initialize the orchestrator and restore persisted state.

        Args:
            store: Preference store shared with the host application
            catalog: Source of tutorial flows (default catalog if not provided)
            navigation_callback: Called with a destination when a step requests navigation
            default_persona: Persona used until one has been detected
        """
        self._store = store
        self._catalog = catalog or TutorialCatalog()
        self._navigation_callback = navigation_callback
        self._default_persona = default_persona
        self._listeners: List[TutorialListener] = []

        # Session state
        self._current_flow: Optional[TutorialFlow] = None
        self._current_step_index = 0
        self._state = TutorialState.not_started()
        self._is_showing_tutorial = False
        self._user_type = default_persona
        # Persona of the running flow, may differ from the detected persona
        self._active_persona = default_persona
        self._is_starting = False

        self._load_user_type()
        self._load_tutorial_progress()

    # Current values

    @property
    def current_flow(self) -> Optional[TutorialFlow]:
        return self._current_flow

    @property
    def current_step_index(self) -> int:
        return self._current_step_index

    @property
    def state(self) -> TutorialState:
        return self._state

    @property
    def is_showing_tutorial(self) -> bool:
        return self._is_showing_tutorial

    @property
    def user_type(self) -> Persona:
        """Detected (or manually selected) persona."""
        return self._user_type

    @property
    def active_persona(self) -> Persona:
        """Persona the current or last started flow was built for."""
        return self._active_persona

    @property
    def current_step(self) -> Optional[TutorialStep]:
        flow = self._current_flow
        if flow is None:
            return None
        if 0 <= self._current_step_index < flow.step_count:
            return flow.steps[self._current_step_index]
        return None

    def subscribe(self, listener: TutorialListener) -> Callable[[], None]:
        """
        Register a listener notified after every transition.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Persona management

    def set_user_type(self, persona: Persona) -> None:
        """Set the detected persona manually."""
        self._user_type = persona
        self._put(KEY_USER_TYPE, persona.value)
        logger.info("User type set", persona=persona.value, display_name=persona.display_name)
        self._emit(EventType.PERSONA_DETECTED, persona=persona)

    def detect_and_set_user_type(self, answers: OnboardingAnswers) -> Persona:
        """Classify onboarding answers and store the resulting persona."""
        persona = classify(answers)
        self.set_user_type(persona)
        return persona

    # Transitions

    def start(self, persona: Optional[Persona] = None) -> bool:
        """
        Start the tutorial.

        Args:
            persona: Flow to start. Defaults to the detected persona, in which
                case an already completed tutorial is not started again.

        Returns:
            True if a flow was started
        """
        try:
            self._begin_start()
        except ReentrancyRejection as e:
            logger.warning(str(e), requested=getattr(persona, "value", None))
            return False

        try:
            return self._start(persona)
        except ConfigurationError as e:
            logger.error(str(e), persona=getattr(e.persona, "value", e.persona))
            return False
        finally:
            self._is_starting = False

    def _begin_start(self) -> None:
        if self._is_starting:
            raise ReentrancyRejection()
        self._is_starting = True

    def _start(self, persona: Optional[Persona]) -> bool:
        target = persona if persona is not None else self._user_type

        # A manual restart passes the persona explicitly
        if persona is None and self.has_tutorial_been_completed(target):
            logger.info("Tutorial already completed", persona=target.value)
            return False

        flow = self._catalog.build_flow(target)

        self._current_flow = flow
        self._current_step_index = 0
        self._active_persona = target
        self._state = TutorialState.in_progress(0)
        self._is_showing_tutorial = True
        self._save_tutorial_progress()

        log_transition("started", persona=target, step_index=0, flow=flow.title, steps=flow.step_count)
        self._emit(EventType.STARTED)
        self._handle_step_navigation()
        return True

    def next_step(self) -> None:
        """Advance to the next step, completing the tutorial after the last one."""
        flow = self._current_flow
        if flow is None:
            return

        if self._current_step_index < flow.step_count - 1:
            self._move_to(self._current_step_index + 1, "advanced")
        else:
            self.complete()

    def previous_step(self) -> None:
        """Go back one step. No-op on the first step."""
        if self._current_flow is None or self._current_step_index == 0:
            return
        self._move_to(self._current_step_index - 1, "moved back")

    def _move_to(self, index: int, transition: str) -> None:
        self._current_step_index = index
        self._state = TutorialState.in_progress(index)
        self._save_tutorial_progress()

        log_transition(
            transition,
            persona=self._active_persona,
            step_index=index,
            of=self._current_flow.step_count,
        )
        self._emit(EventType.STEP_CHANGED)
        self._handle_step_navigation()

    def skip(self) -> None:
        """Skip the tutorial. Skipping does not record completion."""
        self._state = TutorialState.skipped()
        self._is_showing_tutorial = False
        self._current_flow = None
        self._current_step_index = 0

        self._remove(KEY_JUST_COMPLETED_ONBOARDING)

        log_transition("skipped", persona=self._active_persona)
        self._emit(EventType.SKIPPED)

    def complete(self) -> None:
        """Complete the tutorial, recording completion for the active flow's persona."""
        flow = self._current_flow
        if flow is not None:
            self._mark_tutorial_completed(flow.persona)

        self._state = TutorialState.completed()
        self._is_showing_tutorial = False
        self._current_flow = None
        self._current_step_index = 0

        self._remove(KEY_JUST_COMPLETED_ONBOARDING)

        log_transition("completed", persona=flow.persona if flow else None)
        self._emit(EventType.COMPLETED)

    def restart(self, persona: Optional[Persona] = None) -> bool:
        """
        Clear completion for a persona and start its tutorial.

        Args:
            persona: Flow to replay (defaults to the detected persona)

        Returns:
            True if a flow was started
        """
        target = persona if persona is not None else self._user_type
        logger.info("Restarting tutorial", persona=target.value)

        self._remove(completion_key(self._catalog.flow_persona(target)))
        return self.start(target)

    def check_and_trigger(self) -> bool:
        """
        Start the tutorial automatically right after onboarding.

        Returns:
            True if the tutorial was started
        """
        just_completed_onboarding = self._store.get_bool(KEY_JUST_COMPLETED_ONBOARDING)
        onboarding_completed = self._store.get_bool(KEY_ONBOARDING_COMPLETED)
        tutorial_completed = self.has_tutorial_been_completed(self._user_type)

        logger.debug(
            "Check tutorial trigger",
            just_completed_onboarding=just_completed_onboarding,
            onboarding_completed=onboarding_completed,
            tutorial_completed=tutorial_completed,
        )

        if just_completed_onboarding and not tutorial_completed:
            logger.info("Triggering tutorial automatically", persona=self._user_type.value)
            return self.start()
        return False

    def reset_all_tutorial_state(self) -> None:
        """Forget every persisted and in-memory tutorial value."""
        self._remove(*owned_keys())

        self._current_flow = None
        self._current_step_index = 0
        self._is_showing_tutorial = False
        self._state = TutorialState.not_started()
        self._user_type = self._default_persona
        self._active_persona = self._default_persona

        log_transition("reset")
        self._emit(EventType.RESET)

    # Persistence

    def has_tutorial_been_completed(self, persona: Persona) -> bool:
        """Whether the flow shown to `persona` was completed."""
        return self._store.get_bool(completion_key(self._catalog.flow_persona(persona)))

    def _mark_tutorial_completed(self, persona: Persona) -> None:
        self._put(completion_key(persona), True)
        logger.info("Marked tutorial as completed", persona=persona.value)

    def _save_tutorial_progress(self) -> None:
        self._put(KEY_CURRENT_STEP, self._current_step_index)
        self._put(KEY_CURRENT_FLOW, self._current_flow.persona.value)

    # Store writes are best-effort: a failed write is logged and the
    # transition still completes.

    def _put(self, key: str, value) -> None:
        try:
            self._store.put(key, value)
        except OSError:
            logger.exception("Failed to save preference", key=key)

    def _remove(self, *keys: str) -> None:
        try:
            self._store.remove(*keys)
        except OSError:
            logger.exception("Failed to remove preferences", keys=list(keys))

    def _load_user_type(self) -> None:
        value = self._store.get(KEY_USER_TYPE)
        if value is None:
            return
        try:
            self._user_type = Persona.parse(value, KEY_USER_TYPE)
        except PersistenceError as e:
            logger.error(str(e), fallback=self._default_persona.value)
            return
        logger.debug("Loaded user type", persona=self._user_type.value)

    def _load_tutorial_progress(self) -> None:
        flow_value = self._store.get(KEY_CURRENT_FLOW)
        if flow_value is None:
            return
        try:
            flow_persona = Persona.parse(flow_value, KEY_CURRENT_FLOW)
        except PersistenceError as e:
            logger.error(str(e))
            return

        step_index = self._store.get_int(KEY_CURRENT_STEP, 0)
        # Progress of a tutorial finished elsewhere is stale
        if self.has_tutorial_been_completed(flow_persona) or step_index < 0:
            return

        self._current_step_index = step_index
        logger.debug("Loaded tutorial progress", step=step_index, persona=flow_persona.value)

    # Navigation

    def set_navigation_callback(self, callback: Optional[NavigationCallback]) -> None:
        """Register the navigation callback. The last registration wins."""
        self._navigation_callback = callback
        logger.debug("Navigation callback set", registered=callback is not None)

    def _handle_step_navigation(self) -> None:
        step = self.current_step
        if step is None or step.navigation_destination is None:
            return

        callback = self._navigation_callback
        if callback is None:
            return

        logger.info("Navigating", destination=step.navigation_destination, step=step.title)
        try:
            callback(step.navigation_destination)
        except Exception:
            logger.exception("Navigation callback failed", destination=step.navigation_destination)

    def _emit(self, event_type: EventType, persona: Optional[Persona] = None) -> None:
        if not self._listeners:
            return

        event = TutorialEvent(
            event_type=event_type,
            state=self._state,
            step_index=self._current_step_index,
            persona=persona or self._active_persona,
            step=self.current_step,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Tutorial listener failed", event_type=event_type.value)
