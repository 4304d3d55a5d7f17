from abc import ABC
from abc import abstractmethod
from typing import Final

from imbue.one_testing.config import OneTestingSettings
from imbue.one_testing.errors import UserGroupNotFoundError
from imbue.one_testing.errors import UserNotFoundError
from imbue.one_testing.frozen_model import FrozenModel
from imbue.one_testing.logging import log_span
from imbue.one_testing.primitives import GroupName
from imbue.one_testing.primitives import ResourceId
from imbue.one_testing.primitives import UserName
from imbue.one_testing.resource import XmlDocument

USER_GROUP_NAME_PATH: Final[str] = "/USER/GNAME"


class UserPoolInterface(FrozenModel, ABC):
    """Read access to the users known to an OpenNebula endpoint."""

    @abstractmethod
    def lookup_user_id(self, user_name: UserName) -> ResourceId:
        """Return the id of the user with this name.

        Raises UserNotFoundError if there is no such user.
        """
        ...

    @abstractmethod
    def fetch_user_info(self, user_id: ResourceId) -> XmlDocument:
        """Return the USER info document of a user.

        Raises UserInfoError if the info call fails.
        """
        ...


def get_user_group(user_pool: UserPoolInterface, user_name: str) -> GroupName:
    """Return the name of a user's primary group.

    Raises a UserResolutionError subclass when the user cannot be looked up
    (a blank name included) or its info cannot be fetched, and
    UserGroupNotFoundError when the info document has no (or an empty) GNAME.
    """
    if not user_name or not user_name.strip():
        raise UserNotFoundError(user_name)
    with log_span("Resolving primary group of user {}", user_name):
        user_id = user_pool.lookup_user_id(UserName(user_name))
        user_info = user_pool.fetch_user_info(user_id)
        group_name = user_info.xpath_text(USER_GROUP_NAME_PATH)
        if group_name is None or not group_name.strip():
            raise UserGroupNotFoundError(user_name, USER_GROUP_NAME_PATH)
        return GroupName(group_name)


def get_caller_group(user_pool: UserPoolInterface, settings: OneTestingSettings) -> GroupName:
    """Return the primary group of the user the tests run as."""
    return get_user_group(user_pool, settings.caller_user_name)
