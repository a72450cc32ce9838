"""
Tests for the textual terminal UI.
"""

import asyncio
from unittest.mock import patch

import pytest
from textual.widgets import ListView

from resource_picker.models.events import ItemAccepted, ItemButtonTriggered, ListHidden, ValueChanged
from resource_picker.models.exceptions import ResourceLoadError
from resource_picker.models.items import (
    CreateResourceItem,
    HandoffResult,
    ItemButton,
    SelectResourceItem,
    SeparatorItem,
)
from resource_picker.models.resource import ResourceKind
from resource_picker.picker import PickParams, pick
from resource_picker.ui.dialogs import ChoiceScreen, InputScreen, MessageScreen
from resource_picker.ui.selection import PickListItem, SelectionScreen, item_text
from resource_picker.ui.tui import TextualPickUI
from tests.fakes import FakeLoader, fresh, make_resource


def select_item(name, recent=False):
    resource = make_resource(name)
    buttons = [ItemButton(icon='x', tooltip='Remove')] if recent else []
    return SelectResourceItem(label=name, description='', url=resource.url, resource=resource, buttons=buttons)


def drain(subscription):
    events = []
    while not subscription._queue.empty():
        events.append(subscription._queue.get_nowait())
    return events


def shown_labels(selection_list):
    return [row.pick_item.label for row in selection_list.screen.query(PickListItem)]


async def settle_ui(pilot):
    """Let pending messages and list rebuilds finish."""
    await pilot.pause()
    await pilot.app.workers.wait_for_complete()
    await pilot.pause()


async def finish(task):
    return await asyncio.wait_for(task, timeout=5)


@pytest.fixture
def items():
    return [
        select_item('alpha', recent=True),
        SeparatorItem(label='recent'),
        select_item('bravo'),
        select_item('charlie'),
        CreateResourceItem(label='Create new bucket...'),
    ]


class TestVisibleItems:

    def test_filter_keeps_always_shown_items(self, items):
        selection_list = TextualPickUI().create_selection_list()
        selection_list.items = items

        selection_list.value = 'BR'

        assert [item.label for item in selection_list.visible_items()] == ['bravo', 'Create new bucket...']

    def test_separator_only_between_matches(self, items):
        selection_list = TextualPickUI().create_selection_list()
        selection_list.items = items

        selection_list.value = 'alp'

        assert [item.label for item in selection_list.visible_items()] == [
            'alpha', 'recent', 'Create new bucket...'
        ]

    def test_description_matches_only_when_enabled(self):
        resource = make_resource('orders')
        item = SelectResourceItem(label='orders', description='eu-west-1', url=resource.url, resource=resource)
        selection_list = TextualPickUI().create_selection_list()
        selection_list.items = [item]
        selection_list.value = 'west'

        assert selection_list.visible_items() == []

        selection_list.match_on_description = True
        assert selection_list.visible_items() == [item]

    def test_row_text_marks_recent_items(self, items):
        assert item_text(items[0], 'x').plain == 'alpha  [x]'
        assert item_text(items[2], 'x').plain == 'bravo'
        assert item_text(items[1], 'x').plain == '── recent'


class TestSelectionScreen:

    @pytest.mark.asyncio
    async def test_typing_filters_and_posts_value_changed(self, items):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            selection_list = ui.create_selection_list()
            subscription = selection_list.subscribe()
            selection_list.items = items
            selection_list.show()
            await settle_ui(pilot)

            assert isinstance(ui.app.screen, SelectionScreen)
            assert shown_labels(selection_list) == [
                'alpha', 'recent', 'bravo', 'charlie', 'Create new bucket...'
            ]

            await pilot.press('b', 'r')
            await settle_ui(pilot)

            assert drain(subscription) == [ValueChanged('b'), ValueChanged('br')]
            assert selection_list.value == 'br'
            assert shown_labels(selection_list) == ['bravo', 'Create new bucket...']

    @pytest.mark.asyncio
    async def test_enter_accepts_active_item(self, items):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            selection_list = ui.create_selection_list()
            subscription = selection_list.subscribe()
            selection_list.items = items
            selection_list.show()
            selection_list.active_items = [items[3]]
            await settle_ui(pilot)

            await pilot.press('enter')
            await pilot.pause()

            assert drain(subscription) == [ItemAccepted(items[3])]
            assert selection_list.selected_items == [items[3]]

    @pytest.mark.asyncio
    async def test_enter_without_matches_accepts_nothing(self):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            selection_list = ui.create_selection_list()
            selection_list.items = [select_item('alpha'), select_item('bravo')]
            subscription = selection_list.subscribe()
            selection_list.show()
            await settle_ui(pilot)

            await pilot.press('z', 'z')
            await settle_ui(pilot)
            await pilot.press('enter')
            await pilot.pause()

            assert drain(subscription)[-1] == ItemAccepted(None)

    @pytest.mark.asyncio
    async def test_ctrl_d_triggers_clear_button_on_recent_item(self, items):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            selection_list = ui.create_selection_list()
            subscription = selection_list.subscribe()
            selection_list.items = items
            selection_list.show()
            await settle_ui(pilot)

            await pilot.press('ctrl+d')
            await pilot.pause()

            [event] = drain(subscription)
            assert isinstance(event, ItemButtonTriggered)
            assert event.item is items[0]
            assert event.button is items[0].buttons[0]

    @pytest.mark.asyncio
    async def test_ctrl_d_on_other_item_posts_nothing(self, items):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            selection_list = ui.create_selection_list()
            subscription = selection_list.subscribe()
            selection_list.items = items
            selection_list.show()
            selection_list.active_items = [items[2]]
            await settle_ui(pilot)

            await pilot.press('ctrl+d')
            await pilot.pause()

            assert drain(subscription) == []

    @pytest.mark.asyncio
    async def test_escape_hides_list(self, items):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            selection_list = ui.create_selection_list()
            subscription = selection_list.subscribe()
            selection_list.items = items
            selection_list.show()
            await settle_ui(pilot)

            await pilot.press('escape')
            await pilot.pause()

            assert drain(subscription) == [ListHidden()]
            assert not selection_list.visible
            assert ui.app.screen is not selection_list.screen

    @pytest.mark.asyncio
    async def test_busy_shows_loading_list(self, items):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            selection_list = ui.create_selection_list()
            selection_list.busy = True
            selection_list.show()
            await settle_ui(pilot)

            list_view = selection_list.screen.query_one(ListView)
            assert list_view.loading is True

            selection_list.busy = False
            assert list_view.loading is False


class TestDialogs:

    @pytest.mark.asyncio
    async def test_input_returns_typed_text(self):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            task = asyncio.ensure_future(ui.input('Create new bucket'))
            await pilot.pause()

            assert isinstance(ui.app.screen, InputScreen)
            await pilot.press('m', 'y', '-', 'a', 'p', 'p', 'enter')

            assert await finish(task) == 'my-app'

    @pytest.mark.asyncio
    async def test_input_starts_from_initial_value(self):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            task = asyncio.ensure_future(ui.input('Name', initial_value='/app/db'))
            await pilot.pause()

            await pilot.press('enter')

            assert await finish(task) == '/app/db'

    @pytest.mark.asyncio
    async def test_input_stays_open_until_valid(self):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            task = asyncio.ensure_future(
                ui.input('Name', validate=lambda value: None if value == 'good' else 'Not good')
            )
            await pilot.pause()

            await pilot.press('b', 'a', 'd', 'enter')
            await pilot.pause()

            assert not task.done()
            assert ui.app.screen.validation_message == 'Not good'

            await pilot.press('backspace', 'backspace', 'backspace', 'g', 'o', 'o', 'd', 'enter')

            assert await finish(task) == 'good'

    @pytest.mark.asyncio
    async def test_input_escape_cancels(self):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            task = asyncio.ensure_future(ui.input('Name'))
            await pilot.pause()

            await pilot.press('escape')

            assert await finish(task) is None

    @pytest.mark.asyncio
    async def test_pick_string_returns_highlighted_option(self):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            task = asyncio.ensure_future(ui.pick_string(['dev', 'prod'], placeholder='Choose an AWS profile'))
            await pilot.pause()

            assert isinstance(ui.app.screen, ChoiceScreen)
            await pilot.press('down', 'enter')

            assert await finish(task) == 'prod'

    @pytest.mark.asyncio
    async def test_pick_string_escape_cancels(self):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            task = asyncio.ensure_future(ui.pick_string(['dev', 'prod'], placeholder='Profile'))
            await pilot.pause()

            await pilot.press('escape')

            assert await finish(task) is None

    @pytest.mark.asyncio
    async def test_show_error_waits_for_acknowledgement(self):
        ui = TextualPickUI()
        async with ui.app.run_test() as pilot:
            task = asyncio.ensure_future(ui.show_error('Failed to load buckets'))
            await pilot.pause()

            assert isinstance(ui.app.screen, MessageScreen)
            assert ui.app.screen.body == 'Failed to load buckets'
            assert not task.done()

            await pilot.press('enter')

            await finish(task)

    @pytest.mark.asyncio
    async def test_open_url_uses_browser(self):
        ui = TextualPickUI()
        async with ui.app.run_test():
            with patch('resource_picker.ui.tui.webbrowser.open', return_value=True) as browser_open:
                assert await ui.open_url('https://console.example.com/alpha') is True

        browser_open.assert_called_once_with('https://console.example.com/alpha')


class TestRun:

    @pytest.mark.asyncio
    async def test_returns_result_and_prints_written_values_after_exit(self):
        printed = []
        ui = TextualPickUI(output=printed.append, headless=True)

        async def work():
            ui.write('s3cr3t')
            assert printed == []
            return 'done'

        assert await ui.run(work) == 'done'
        assert printed == ['s3cr3t']
        assert ui.written == []

    @pytest.mark.asyncio
    async def test_work_error_is_raised_after_exit(self):
        ui = TextualPickUI(output=lambda _: None, headless=True)

        async def work():
            raise ResourceLoadError("Throttling: Rate exceeded")

        with pytest.raises(ResourceLoadError, match="Throttling"):
            await ui.run(work)

    @pytest.mark.asyncio
    async def test_interrupt_raises_keyboard_interrupt(self):
        ui = TextualPickUI(output=lambda _: None, headless=True)

        async def work():
            ui.app.action_interrupt()
            await asyncio.Event().wait()

        with pytest.raises(KeyboardInterrupt):
            await ui.run(work)


class TestPickerOnTextual:
    """The picker engine driving the textual screens end to end."""

    @pytest.mark.asyncio
    async def test_filter_and_accept(self, settings, mru):
        ui = TextualPickUI()
        chosen = []

        def on_selected(resource):
            chosen.append(resource.name)
            return HandoffResult(finished=True)

        params = PickParams(
            ui=ui, resource_kind=ResourceKind.BUCKET, settings=settings, mru=mru,
            load_resources=FakeLoader(fresh([make_resource('alpha'), make_resource('bravo')])),
            on_selected=on_selected,
        )

        async with ui.app.run_test() as pilot:
            task = asyncio.ensure_future(pick(params))
            await settle_ui(pilot)

            await pilot.press('b', 'r')
            await settle_ui(pilot)
            await pilot.press('enter')

            selected = await finish(task)

        assert selected.label == 'bravo'
        assert chosen == ['bravo']

    @pytest.mark.asyncio
    async def test_load_failure_is_shown_then_closes(self, settings, mru):
        ui = TextualPickUI()
        params = PickParams(
            ui=ui, resource_kind=ResourceKind.BUCKET, settings=settings, mru=mru,
            load_resources=FakeLoader(ResourceLoadError("AccessDenied: not allowed")),
        )

        async with ui.app.run_test() as pilot:
            task = asyncio.ensure_future(pick(params))
            await settle_ui(pilot)

            assert isinstance(ui.app.screen, MessageScreen)
            assert ui.app.screen.body == "Failed to load buckets: AccessDenied: not allowed"

            await pilot.press('enter')

            assert await finish(task) is None
            await pilot.pause()
            assert not isinstance(ui.app.screen, SelectionScreen)
