from collections.abc import Sequence

from lxml import etree
from pydantic import Field

from imbue.one_testing.errors import UserInfoError
from imbue.one_testing.errors import UserNotFoundError
from imbue.one_testing.frozen_model import FrozenModel
from imbue.one_testing.primitives import ResourceId
from imbue.one_testing.primitives import ResourceKind
from imbue.one_testing.primitives import UserName
from imbue.one_testing.resource import XmlDocument
from imbue.one_testing.resource import extract_resource_id
from imbue.one_testing.users import UserPoolInterface


class UserRecord(FrozenModel):
    """One USER entry of a fake user pool."""

    user_id: int = Field(ge=0)
    name: str
    group_id: int = Field(default=0, ge=0)
    # None leaves GNAME out of the generated document
    group_name: str | None = "oneadmin"


def build_user_pool_document(users: Sequence[UserRecord]) -> XmlDocument:
    """Render a USER_POOL document shaped like the one returned by one.userpool.info."""
    pool = etree.Element("USER_POOL")
    for user in users:
        user_el = etree.SubElement(pool, "USER")
        etree.SubElement(user_el, "ID").text = str(user.user_id)
        etree.SubElement(user_el, "GID").text = str(user.group_id)
        if user.group_name is not None:
            etree.SubElement(user_el, "GNAME").text = user.group_name
        etree.SubElement(user_el, "NAME").text = user.name
        etree.SubElement(user_el, "ENABLED").text = "1"
    return XmlDocument(text=etree.tostring(pool, encoding="unicode"))


class InMemoryUserPool(UserPoolInterface):
    """User pool backed by a USER_POOL XML document, for tests that have no endpoint to talk to."""

    document: XmlDocument
    unavailable_user_ids: frozenset[int] = Field(
        default_factory=frozenset,
        description="Users whose info call fails with UserInfoError",
    )

    def _find_user(self, condition: str, **variables: str) -> XmlDocument | None:
        root = etree.fromstring(self.document.text.encode("utf-8"))
        matches = root.xpath(f"/USER_POOL/USER[{condition}]", **variables)
        if not matches:
            return None
        return XmlDocument(text=etree.tostring(matches[0], encoding="unicode"))

    def lookup_user_id(self, user_name: UserName) -> ResourceId:
        user_doc = self._find_user("NAME=$name", name=str(user_name))
        if user_doc is None:
            raise UserNotFoundError(user_name)
        return extract_resource_id(user_doc, ResourceKind.USER)

    def fetch_user_info(self, user_id: ResourceId) -> XmlDocument:
        if user_id in self.unavailable_user_ids:
            raise UserInfoError(user_id, "info call rejected")
        user_doc = self._find_user("ID=$user_id", user_id=str(user_id))
        if user_doc is None:
            raise UserInfoError(user_id, "no such user id")
        return user_doc
