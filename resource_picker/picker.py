"""
Resource picker engine: a filterable selection list of cloud resources.

Recently selected resources come first, the rest follow alphabetically.
Cached lists are shown immediately and revalidated in the background.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Set, Tuple, Union

from typing_extensions import assert_never

from resource_picker.models.events import (
    ItemAccepted,
    ItemButtonTriggered,
    ListHidden,
    LoadFailed,
    PickerEvent,
    RenderFailed,
    ValueChanged,
)
from resource_picker.models.items import (
    CreateResourceItem,
    HandoffResult,
    ItemButton,
    PickItem,
    SelectResourceItem,
    SeparatorItem,
    SwitchProfileItem,
    find_resource_item,
    item_signature,
    resource_urls,
)
from resource_picker.models.resource import (
    KindKey,
    Resource,
    ResourceKind,
    ResourceList,
    is_from_cache,
    sort_by_name,
)
from resource_picker.services.auth import AuthHooks
from resource_picker.services.base import (
    BasePickUI,
    BaseSelectionList,
    BaseSettings,
    EventSubscription,
)
from resource_picker.services.loader import LoadOptions
from resource_picker.services.mru import MRULedger


HandlerResult = Union[HandoffResult, Awaitable[HandoffResult]]
SelectionHandler = Callable[[Resource], HandlerResult]
CreationHandoff = Callable[[str], HandlerResult]
LoadResources = Callable[[LoadOptions], Awaitable[ResourceList]]


class SessionState(Enum):
    """Lifecycle of one picker session."""
    LOADING = "loading"
    READY = "ready"
    RECONCILING = "reconciling"
    ACCEPTED = "accepted"
    DISMISSED = "dismissed"
    RELAUNCHING = "relaunching"


@dataclass
class PickParams:
    """Inputs for one call to ``pick``."""

    ui: BasePickUI
    resource_kind: KindKey
    settings: BaseSettings
    mru: MRULedger
    load_resources: LoadResources
    on_selected: Optional[SelectionHandler] = None
    on_unmatched: Optional[CreationHandoff] = None
    filter_text: Optional[str] = None
    active_item_url: Optional[str] = None
    default_region: Optional[str] = None


@dataclass
class RelaunchHints:
    """Context carried into the next session when the picker reopens."""

    filter_text: Optional[str] = None
    active_item_url: Optional[str] = None


@dataclass
class SessionOutcome:
    """How a session ended: with a selection, a relaunch request, or neither."""

    selected: Optional[SelectResourceItem] = None
    relaunch: Optional[RelaunchHints] = None


@dataclass
class PickerSession:
    """Mutable state owned by one open selection list."""

    selection_list: BaseSelectionList
    subscription: EventSubscription
    clear_button: ItemButton
    filter_text: str = ""
    profile_candidate: Optional[str] = None
    create_label: Optional[str] = None
    last_resources: List[Resource] = field(default_factory=list)
    signature: Optional[Tuple[Tuple[str, ...], ...]] = None
    state: SessionState = SessionState.LOADING
    disposed: bool = False

    def dispose(self) -> None:
        """Stop listening for events, then hide the list. Safe to call twice."""
        if self.disposed:
            return
        self.disposed = True
        self.subscription.dispose()
        self.selection_list.hide()


class SelectionListAuthHooks(AuthHooks):
    """Shows SSO login progress in the selection list's placeholder."""

    WAITING_PLACEHOLDER = "Waiting for login via SSO (external browser) ..."

    def __init__(self, selection_list: BaseSelectionList):
        self.selection_list = selection_list
        self._saved_placeholder = selection_list.placeholder

    def on_attempt(self) -> None:
        self._saved_placeholder = self.selection_list.placeholder
        self.selection_list.ignore_focus_out = True
        self.selection_list.placeholder = self.WAITING_PLACEHOLDER

    def on_success(self) -> None:
        self._restore()

    def on_failure(self, error: Exception) -> None:
        self._restore()

    def _restore(self) -> None:
        self.selection_list.ignore_focus_out = False
        self.selection_list.placeholder = self._saved_placeholder


def _kind_label(kind: KindKey) -> str:
    return kind.label if isinstance(kind, ResourceKind) else str(kind)


async def _call_handler(handler: Callable[[Any], HandlerResult], argument: Any) -> HandoffResult:
    result = handler(argument)
    if inspect.isawaitable(result):
        result = await result
    return result


class ResourcePicker:
    """Runs picker sessions until one ends without asking to reopen.

    Reopening after a selection handler or creation handoff reports
    ``finished=False`` (or after a profile switch) starts a fresh session
    with the carried-over hints. Only one session listens for events at a
    time: the previous one is disposed before the next is created.
    """

    def __init__(self, params: PickParams):
        self.params = params
        self.ui = params.ui
        self.kind = params.resource_kind
        self.settings = params.settings
        self.mru = params.mru
        self.logger = logging.getLogger(__name__)
        self._background_tasks: Set["asyncio.Task[None]"] = set()

    @property
    def region(self) -> Optional[str]:
        """The stored region, or the default while none is stored yet."""
        return self.settings.region or self.params.default_region

    async def pick(self) -> Optional[SelectResourceItem]:
        """
        Show the picker until the user selects, creates, or dismisses.

        Returns:
            Optional[SelectResourceItem]: The last accepted resource item, or
            None if nothing was selected
        """
        hints = RelaunchHints(self.params.filter_text, self.params.active_item_url)
        selected: Optional[SelectResourceItem] = None

        while True:
            outcome = await self._run_session(hints)
            if outcome.selected is not None:
                selected = outcome.selected
            if outcome.relaunch is None:
                return selected
            self.logger.debug(f"Reopening {_kind_label(self.kind)} picker")
            hints = outcome.relaunch

    async def _run_session(self, hints: RelaunchHints) -> SessionOutcome:
        selection_list = self.ui.create_selection_list()
        session = PickerSession(
            selection_list=selection_list,
            subscription=selection_list.subscribe(),
            clear_button=ItemButton(
                icon=self.ui.clear_icon,
                tooltip=f"Remove this {_kind_label(self.kind)} from recent list",
            ),
            filter_text=hints.filter_text or "",
        )
        session.profile_candidate = self._parse_profile_name(session.filter_text)
        session.create_label = self._create_label(session.filter_text)

        selection_list.busy = True
        selection_list.value = session.filter_text
        selection_list.match_on_description = True
        selection_list.placeholder = (
            f"Loading {_kind_label(self.kind)}s... "
            f"(@{self.settings.profile} in {self.region})"
        )
        selection_list.show()

        self._spawn(self._load(session, hints.active_item_url))

        try:
            while True:
                event = await session.subscription.next_event()
                outcome = await self._handle_event(session, event)
                if outcome is not None:
                    return outcome
        finally:
            session.dispose()

    def _spawn(self, coroutine: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coroutine)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _load(self, session: PickerSession, active_item_url: Optional[str]) -> None:
        """Load, then hand the result to the list; report failures as events."""
        hooks = SelectionListAuthHooks(session.selection_list)

        try:
            resources = await self._load_resources(hooks, skip_cache=False)
        except Exception as e:
            self.logger.error(f"Failed to load {_kind_label(self.kind)}s: {str(e)}")
            session.subscription.post(LoadFailed(e))
            return

        if session.disposed:
            return

        try:
            await self._show_and_revalidate(session, hooks, resources, active_item_url)
        except Exception as e:
            self.logger.error(f"Failed to show {_kind_label(self.kind)}s: {str(e)}", exc_info=e)
            session.subscription.post(RenderFailed(e))

    async def _show_and_revalidate(self, session: PickerSession, hooks: AuthHooks,
                                   resources: ResourceList, active_item_url: Optional[str]) -> None:
        """Paint, then revalidate once if the first result was cached."""
        session.selection_list.busy = False
        self._paint(session, resources, active_item_url)

        if not is_from_cache(resources):
            session.state = SessionState.READY
            return

        session.state = SessionState.RECONCILING
        try:
            fresh_resources = await self._load_resources(hooks, skip_cache=True)
        except Exception as e:
            self.logger.warning(
                f"Failed to refresh {_kind_label(self.kind)}s, keeping cached list: {str(e)}",
                extra={'context': {'profile': self.settings.profile, 'region': self.region}}
            )
            if not session.disposed:
                session.state = SessionState.READY
            return

        if session.disposed:
            return
        self._render(session, fresh_resources)
        session.state = SessionState.READY

    async def _load_resources(self, hooks: AuthHooks, skip_cache: bool) -> ResourceList:
        return await self.params.load_resources(LoadOptions(
            region=self.region,
            profile=self.settings.profile,
            skip_cache=skip_cache,
            auth_hooks=hooks,
        ))

    def _paint(self, session: PickerSession, resources: Sequence[Resource],
               active_item_url: Optional[str]) -> None:
        """First paint: replace the empty list outright, then order it."""
        selection_list = session.selection_list
        count = len(resources)
        selection_list.placeholder = (
            f"Found {count} {_kind_label(self.kind)}{'' if count == 1 else 's'} "
            f"for @{self.settings.profile} in {self.region}"
        )
        selection_list.items = [self._make_resource_item(session, r) for r in sort_by_name(resources)]
        if active_item_url:
            active_item = find_resource_item(selection_list.items, active_item_url)
            if active_item is not None:
                selection_list.active_items = [active_item]
        self._render(session, resources)

    def _render(self, session: PickerSession, resources: Sequence[Resource]) -> None:
        """Re-derive the item list; leave the widget alone if nothing moved."""
        if session.disposed:
            return

        ordered, num_recent = self._order(resources)
        session.last_resources = ordered
        items = self._make_items(session, ordered, num_recent)

        signature = item_signature(items)
        if signature == session.signature:
            return

        selection_list = session.selection_list
        active_urls = set(resource_urls(selection_list.active_items))
        selection_list.keep_scroll_position = True
        selection_list.items = items
        if active_urls:
            selection_list.active_items = [
                item for item in items
                if isinstance(item, SelectResourceItem) and item.url in active_urls
            ]
        session.signature = signature

    def _order(self, resources: Sequence[Resource]) -> Tuple[List[Resource], int]:
        """
        Order resources recent-first, then alphabetically.

        Returns:
            Tuple[List[Resource], int]: Ordered resources and how many are recent
        """
        recent: List[Resource] = []
        rest: List[Resource] = []
        for resource in sort_by_name(resources):
            if self.mru.is_recent(self.kind, resource.url):
                recent.append(resource)
            else:
                rest.append(resource)

        recent.sort(key=lambda resource: self.mru.index_of(self.kind, resource.url))
        return recent + rest, len(recent)

    def _make_items(self, session: PickerSession, ordered: List[Resource],
                    num_recent: int) -> List[PickItem]:
        resource_items = [self._make_resource_item(session, r) for r in ordered]
        items: List[PickItem] = resource_items[:num_recent] + [self.ui.separator] + resource_items[num_recent:]

        if session.profile_candidate:
            items.insert(0, SwitchProfileItem(
                label=f"@{session.profile_candidate}",
                profile=session.profile_candidate,
                description=f"Switch to {session.profile_candidate} profile",
            ))

        if session.create_label is not None:
            items.append(CreateResourceItem(label=session.create_label))

        return items

    def _make_resource_item(self, session: PickerSession, resource: Resource) -> SelectResourceItem:
        is_recent = self.mru.is_recent(self.kind, resource.url)
        return SelectResourceItem(
            label=resource.name,
            description=resource.description,
            url=resource.url,
            resource=resource,
            buttons=[session.clear_button] if is_recent else [],
        )

    def _parse_profile_name(self, value: str) -> Optional[str]:
        """Return the profile named by an ``@<profile>`` filter, if it is a known one."""
        if len(value) > 1 and value.startswith("@"):
            name = value[1:]
            if self.settings.is_profile_name(name):
                return name
        return None

    def _create_label(self, filter_text: str) -> Optional[str]:
        if self.params.on_unmatched is None:
            return None
        name = f' "{filter_text}"' if filter_text else ""
        return (
            f"Create new {_kind_label(self.kind)}{name} "
            f"@{self.settings.profile} in {self.region}..."
        )

    async def _handle_event(self, session: PickerSession,
                            event: PickerEvent) -> Optional[SessionOutcome]:
        if isinstance(event, ValueChanged):
            self._on_value_changed(session, event.value)
            return None
        if isinstance(event, ItemAccepted):
            return await self._on_accept(session, event.item)
        if isinstance(event, ItemButtonTriggered):
            await self._on_item_button(session, event.item, event.button)
            return None
        if isinstance(event, ListHidden):
            session.state = SessionState.DISMISSED
            return SessionOutcome()
        if isinstance(event, LoadFailed):
            await self.ui.show_error(f"Failed to load {_kind_label(self.kind)}s: {str(event.error)}")
            session.state = SessionState.DISMISSED
            return SessionOutcome()
        if isinstance(event, RenderFailed):
            await self.ui.show_error(f"Failed to show {_kind_label(self.kind)}s: {str(event.error)}")
            session.state = SessionState.DISMISSED
            return SessionOutcome()
        assert_never(event)

    def _on_value_changed(self, session: PickerSession, value: str) -> None:
        session.filter_text = value
        profile_candidate = self._parse_profile_name(value)
        create_label = self._create_label(value)
        if profile_candidate == session.profile_candidate and create_label == session.create_label:
            return

        session.profile_candidate = profile_candidate
        session.create_label = create_label
        if session.state != SessionState.LOADING:
            self._render(session, session.last_resources)

    async def _on_accept(self, session: PickerSession,
                         item: Optional[PickItem]) -> Optional[SessionOutcome]:
        if item is None or isinstance(item, SeparatorItem):
            return None
        if isinstance(item, SelectResourceItem):
            return await self._select_resource(session, item)
        if isinstance(item, CreateResourceItem):
            return await self._create_resource(session)
        if isinstance(item, SwitchProfileItem):
            return await self._switch_profile(session, item)
        assert_never(item)

    async def _select_resource(self, session: PickerSession,
                               item: SelectResourceItem) -> SessionOutcome:
        await self.mru.notify_selected(self.kind, item.url)
        session.state = SessionState.ACCEPTED
        session.dispose()

        if self.params.on_selected is None:
            await self.ui.open_url(item.url)
            return SessionOutcome(selected=item)

        try:
            result = await _call_handler(self.params.on_selected, item.resource)
        except Exception as e:
            self.logger.error(f"Selection handler failed for {item.url}: {str(e)}", exc_info=e)
            await self.ui.show_error(f"Unexpected error: {str(e)}")
            return SessionOutcome(selected=item)

        if result.finished:
            return SessionOutcome(selected=item)

        session.state = SessionState.RELAUNCHING
        return SessionOutcome(
            selected=item,
            relaunch=RelaunchHints(filter_text=session.filter_text, active_item_url=item.url),
        )

    async def _create_resource(self, session: PickerSession) -> SessionOutcome:
        session.state = SessionState.ACCEPTED
        session.dispose()

        if self.params.on_unmatched is None:
            return SessionOutcome()

        try:
            result = await _call_handler(self.params.on_unmatched, session.filter_text)
        except Exception as e:
            self.logger.error(f"Creation handoff failed: {str(e)}", exc_info=e)
            await self.ui.show_error(f"Unexpected error adding resource: {str(e)}")
            return SessionOutcome()

        if result.finished:
            return SessionOutcome()

        session.state = SessionState.RELAUNCHING
        return SessionOutcome(relaunch=RelaunchHints(filter_text=session.filter_text))

    async def _switch_profile(self, session: PickerSession, item: SwitchProfileItem) -> SessionOutcome:
        session.state = SessionState.RELAUNCHING
        session.dispose()
        await self.settings.set_profile(item.profile)
        return SessionOutcome(relaunch=RelaunchHints())

    async def _on_item_button(self, session: PickerSession, item: PickItem,
                              button: ItemButton) -> None:
        if isinstance(item, SelectResourceItem) and button is session.clear_button:
            await self.mru.clear_recent(self.kind, item.url)
            self._render(session, session.last_resources)


async def pick(params: PickParams) -> Optional[SelectResourceItem]:
    """
    Show a resource picker and wait for the user.

    Args:
        params: Collaborators, handlers and initial hints

    Returns:
        Optional[SelectResourceItem]: The selected item, or None
    """
    return await ResourcePicker(params).pick()
