"""
Flows for creating a new parameter or secret from the picker.
"""

import logging
import re
from typing import Optional

from resource_picker.models.exceptions import ResourceCreationError
from resource_picker.models.items import HandoffResult
from resource_picker.services.base import BasePickUI
from resource_picker.services.values import BaseValueRepository, ValueSecrecy


logger = logging.getLogger(__name__)


SECRET_STRING = "Secret string"
PLAIN_STRING = "Plain string"


def validate_ssm_parameter_name(value: str) -> Optional[str]:
    """
    Validate a name against the SSM Parameter Store naming rules.

    Returns:
        Optional[str]: Validation message, or None if the name is valid
    """
    name = value.strip()

    if name == '':
        return "Parameter name cannot be blank"

    if re.search(r'[^A-Za-z0-9_.\-/]', name):
        return "Parameter can only contain: A-Z a-z 0-9 _.-/"

    if '/' in name and not name.startswith('/'):
        return "Parameter name must start with / if it includes any /'s"

    if name.endswith('/'):
        return "Parameter cannot end with /"

    if name.count('/') > 15:
        return "Parameter name has too many hierarchy levels"

    if '//' in name:
        return "Parameter name cannot have empty levels (//)"

    prefix_match = re.match(r'^(/?(?:aws|ssm))', name, re.IGNORECASE)
    if prefix_match:
        return f"Parameter name cannot start with {prefix_match.group(1)}"

    return None


def validate_secret_name(value: str) -> Optional[str]:
    """
    Validate a name against the Secrets Manager naming rules.

    Returns:
        Optional[str]: Validation message, or None if the name is valid
    """
    name = value.strip()

    if name == '':
        return "Secret name cannot be blank"

    if re.search(r'[^A-Za-z0-9_.+=@\-/]', name):
        return "Secret can only contain: A-Z a-z 0-9 _.+=@-/"

    return None


async def _input_value(ui: BasePickUI, target: str, initial_value: Optional[str],
                       step: str) -> Optional[str]:
    return await ui.input(
        title=f"Create new {target} ({step})",
        placeholder=f"Enter value for {target}",
        initial_value=initial_value or '',
        validate=lambda value: f"{target} value cannot be blank" if value.strip() == '' else None,
    )


async def _pick_secrecy(ui: BasePickUI, name: str) -> Optional[ValueSecrecy]:
    choice = await ui.pick_string(
        [SECRET_STRING, PLAIN_STRING],
        placeholder=f"Choose type for {name}",
        title="Create new parameter (3/3)",
    )
    if choice == SECRET_STRING:
        return ValueSecrecy.SECRET
    if choice == PLAIN_STRING:
        return ValueSecrecy.NOT_SECRET
    return None


async def _create(ui: BasePickUI, repository: BaseValueRepository, target: str,
                  name: str, value: str, secrecy: ValueSecrecy) -> None:
    try:
        await repository.create_value(name, value, secrecy)
    except ResourceCreationError as e:
        logger.error(f"Failed to create {target} '{name}': {str(e)}")
        await ui.show_error(f"Failed to create {target}: {e.message}")


async def create_ssm_parameter(ui: BasePickUI, repository: BaseValueRepository,
                               initial_name: Optional[str] = None) -> HandoffResult:
    """
    Walk the user through creating an SSM parameter.

    Steps are name, value and type. Cancelling the name ends the flow
    unfinished; cancelling a later step goes back one step.

    Args:
        ui: Prompts used for each step
        repository: Where the parameter is created
        initial_name: Prefill for the name, usually the picker's filter text

    Returns:
        HandoffResult: finished=False only if the name step was cancelled
    """
    name = initial_name or ''
    value: Optional[str] = None
    ask_name = True

    while True:
        if ask_name:
            entered = await ui.input(
                title="Create new parameter (1/3)",
                placeholder="Enter name for parameter",
                initial_value=name,
                validate=validate_ssm_parameter_name,
            )
            if entered is None:
                return HandoffResult(finished=False)
            name = entered.strip()

        entered_value = await _input_value(ui, 'parameter', value, '2/3')
        if entered_value is None:
            ask_name = True
            continue
        value = entered_value

        secrecy = await _pick_secrecy(ui, name)
        if secrecy is None:
            ask_name = False
            continue
        break

    await _create(ui, repository, 'parameter', name, value, secrecy)
    return HandoffResult(finished=True)


async def create_secret(ui: BasePickUI, repository: BaseValueRepository,
                        initial_name: Optional[str] = None) -> HandoffResult:
    """
    Walk the user through creating a secret (name, then value).

    Returns:
        HandoffResult: finished=False only if the name step was cancelled
    """
    name = initial_name or ''
    value: Optional[str] = None

    while True:
        entered = await ui.input(
            title="Create new secret (1/2)",
            placeholder="Enter name for secret",
            initial_value=name,
            validate=validate_secret_name,
        )
        if entered is None:
            return HandoffResult(finished=False)
        name = entered.strip()

        entered_value = await _input_value(ui, 'secret', value, '2/2')
        if entered_value is not None:
            value = entered_value
            break

    await _create(ui, repository, 'secret', name, value, ValueSecrecy.SECRET)
    return HandoffResult(finished=True)
