"""
Reading and writing the values behind parameters and secrets.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from resource_picker.models.exceptions import ResourceCreationError, ResourceLoadError
from resource_picker.models.items import HandoffResult
from resource_picker.models.resource import Resource
from resource_picker.services.base import BasePickUI


class ValueSecrecy(Enum):
    """Whether a stored value should be encrypted."""
    SECRET = "secret"
    NOT_SECRET = "not_secret"


class BaseValueRepository(ABC):
    """Abstract base class for a store of named string values."""

    def __init__(self, session: boto3.Session, value_id: Optional[str] = None):
        """
        Args:
            session: AWS session bound to the active profile and region
            value_id: Name or ARN of an existing value, None when creating
        """
        self.session = session
        self.value_id = value_id
        self.logger = logging.getLogger(__name__)

    async def create_value(self, name: str, value: str, secrecy: ValueSecrecy) -> None:
        """Create a new value; fails if one with the same name exists."""
        await asyncio.to_thread(self._call, 'create', self._create, name, value, secrecy)
        self.logger.info(f"Created {secrecy.value} value '{name}'")

    async def retrieve_value(self) -> Optional[str]:
        """Read the current value, decrypted."""
        return await asyncio.to_thread(self._call, 'retrieve', self._retrieve)

    async def update_value(self, value: str) -> None:
        """Overwrite the current value."""
        await asyncio.to_thread(self._call, 'update', self._update, value)
        self.logger.info(f"Updated value '{self.value_id}'")

    def _call(self, action: str, method: Callable[..., Any], *args: Any) -> Any:
        error_type = ResourceCreationError if action == 'create' else ResourceLoadError
        try:
            return method(*args)
        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            raise error_type(f"{error_code} - {error_message}", error_code=error_code,
                             context={'action': action, 'value_id': self.value_id})
        except BotoCoreError as e:
            raise error_type(f"AWS connection error: {str(e)}",
                             context={'action': action, 'value_id': self.value_id})

    @abstractmethod
    def _create(self, name: str, value: str, secrecy: ValueSecrecy) -> None:
        pass

    @abstractmethod
    def _retrieve(self) -> Optional[str]:
        pass

    @abstractmethod
    def _update(self, value: str) -> None:
        pass


class SSMParameterRepository(BaseValueRepository):
    """Values stored as SSM parameters."""

    def _create(self, name: str, value: str, secrecy: ValueSecrecy) -> None:
        parameter_type = 'SecureString' if secrecy == ValueSecrecy.SECRET else 'String'
        self.session.client('ssm').put_parameter(
            Name=name, Value=value, Type=parameter_type, Overwrite=False
        )

    def _retrieve(self) -> Optional[str]:
        response = self.session.client('ssm').get_parameter(Name=self.value_id, WithDecryption=True)
        return response.get('Parameter', {}).get('Value')

    def _update(self, value: str) -> None:
        self.session.client('ssm').put_parameter(Name=self.value_id, Value=value, Overwrite=True)


class SecretsManagerRepository(BaseValueRepository):
    """Values stored as Secrets Manager secrets."""

    def _create(self, name: str, value: str, secrecy: ValueSecrecy) -> None:
        self.session.client('secretsmanager').create_secret(Name=name, SecretString=value)

    def _retrieve(self) -> Optional[str]:
        response = self.session.client('secretsmanager').get_secret_value(SecretId=self.value_id)
        return response.get('SecretString')

    def _update(self, value: str) -> None:
        self.session.client('secretsmanager').put_secret_value(SecretId=self.value_id, SecretString=value)


def validate_json(value: str) -> Optional[str]:
    """Values that look like JSON objects must parse as JSON."""
    if value.lstrip().startswith('{'):
        try:
            json.loads(value)
        except json.JSONDecodeError as e:
            return f"Invalid JSON: {e.msg}"
    return None


SHOW_VALUE = "Show value"
SHOW_NAME = "Show name"
SHOW_ARN = "Show ARN"
OPEN_IN_CONSOLE = "Open in AWS console..."
EDIT_VALUE = "Edit value..."


async def show_value_menu(ui: BasePickUI, resource: Resource, kind: str,
                          repository: BaseValueRepository,
                          output: Callable[[str], None] = print) -> HandoffResult:
    """
    Offer actions on a selected parameter or secret.

    Args:
        ui: Prompts for the menu and the edit flow
        resource: The selected resource
        kind: 'parameter' or 'secret', used in labels
        repository: Access to the resource's value
        output: Where shown values are written

    Returns:
        HandoffResult: finished=False when the user backs out, so the
        picker reopens on the same item
    """
    logger = logging.getLogger(__name__)

    try:
        value = await repository.retrieve_value()
        value_text = value if value is not None else ''
    except ResourceLoadError as e:
        logger.warning(f"Failed to load value of {kind} '{resource.name}': {e.message}")
        value = None
        value_text = f"Failed to load value: {e.message}"

    actions: List[Tuple[str, Optional[str]]] = [
        (SHOW_VALUE, value),
        (SHOW_NAME, resource.name),
        (SHOW_ARN, resource.arn),
        (OPEN_IN_CONSOLE, resource.url),
        (EDIT_VALUE, value),
    ]
    # Parameters don't always carry an ARN
    if not resource.arn:
        actions = [action for action in actions if action[0] != SHOW_ARN]
    descriptions: Dict[str, Optional[str]] = dict(actions)

    while True:
        choice = await ui.pick_string(
            [label for label, _ in actions],
            placeholder=f"{kind.capitalize()}: {resource.name} = {value_text}",
            title=resource.name,
        )
        if choice is None:
            return HandoffResult(finished=False)

        if choice == OPEN_IN_CONSOLE:
            await ui.open_url(resource.url)
            return HandoffResult(finished=True)

        if choice == EDIT_VALUE:
            if await _edit_value(ui, kind, resource, repository, value):
                return HandoffResult(finished=True)
            continue

        shown = descriptions.get(choice)
        if shown:
            output(shown)
            return HandoffResult(finished=True)
        await ui.show_error("Nothing to show")


async def _edit_value(ui: BasePickUI, kind: str, resource: Resource,
                      repository: BaseValueRepository, value: Optional[str]) -> bool:
    edited = await ui.input(
        title=f"Edit {kind}: {resource.name}",
        placeholder=f"{kind.capitalize()} value",
        initial_value=value or '',
        validate=validate_json,
    )
    if not edited:
        return False

    try:
        await repository.update_value(edited)
    except ResourceLoadError as e:
        await ui.show_error(f"Failed to store {kind}: {e.message}")
        return False
    return True
