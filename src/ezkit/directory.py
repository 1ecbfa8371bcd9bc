"""In-memory directory of users, roles and privileges.

A :class:`Directory` owns three flat collections. Privileges are atomic named
permissions, roles bundle privileges, and users hold roles plus direct
privileges. Names are unique within each collection and are the identity of
an entity: every membership test compares names, never object identity.

References are validated when they are created, granted or assigned. Dropping
a privilege or role does not prune roles and users that still reference it.
Parameters that take several references reject a bare string, which would
otherwise be read one character at a time.

Entities can be referenced either by instance or by name::

    directory = Directory()
    directory.privileges.create("orders.read")
    admin = directory.roles.create("admin", ["orders.read"])
    alice = directory.users.create("alice", "s3cret", roles=[admin])
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, MutableSequence
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from .errors import (
    DirectoryError,
    DuplicateNameError,
    UnknownPrivilegeError,
    UnknownRoleError,
)
from .logging import log_context

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Privilege:
    name: str


@dataclass(eq=False)
class Role:
    name: str
    privileges: list[Privilege] = field(default_factory=list)


@dataclass(eq=False)
class User:
    name: str
    password: str = field(repr=False)
    roles: list[Role] = field(default_factory=list)
    privileges: list[Privilege] = field(default_factory=list)


class Named(Protocol):
    name: str


E = TypeVar("E", Privilege, Role, User)
Ref = Named | str


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _as_refs(refs: Iterable[Ref], param: str) -> list[Ref]:
    if isinstance(refs, (str, bytes)):
        raise TypeError(f"{param} must be an iterable of names or entities, not a bare {type(refs).__name__}")
    return list(refs)


def name_of(item: Ref) -> str:
    if isinstance(item, str):
        return item
    return item.name


def all_present(candidates: Iterable[Ref], container: Iterable[Ref]) -> bool:
    """Return ``True`` when every candidate name appears in ``container``."""

    names = {name_of(item) for item in container}
    return all(name_of(candidate) in names for candidate in _as_refs(candidates, "candidates"))


def none_present(candidates: Iterable[Ref], container: Iterable[Ref]) -> bool:
    """Return ``True`` when no candidate name appears in ``container``."""

    names = {name_of(item) for item in container}
    return not any(name_of(candidate) in names for candidate in _as_refs(candidates, "candidates"))


def missing_names(candidates: Iterable[Ref], container: Iterable[Ref]) -> list[str]:
    names = {name_of(item) for item in container}
    return list(dict.fromkeys(n for n in map(name_of, candidates) if n not in names))


def _reject(event: str, error: DirectoryError, **ctx: object) -> DirectoryError:
    logger.warning(
        event,
        extra=log_context(error=type(error).__name__, names=",".join(error.names), **ctx),
    )
    return error


def _add_missing(target: MutableSequence[E], items: Iterable[E]) -> list[E]:
    added: list[E] = []
    for item in items:
        if none_present([item], target):
            target.append(item)
            added.append(item)
    return added


def _remove_named(target: MutableSequence[E], refs: Iterable[Ref]) -> list[E]:
    names = {name_of(ref) for ref in refs}
    removed: list[E] = []
    for index in reversed(range(len(target))):
        if target[index].name in names:
            removed.append(target[index])
            del target[index]
    removed.reverse()
    return removed


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


class _Collection(Generic[E]):
    """Shared read access and ``drop`` for one named collection."""

    kind = "entity"

    def __init__(self, directory: Directory, items: MutableSequence[E]) -> None:
        self._directory = directory
        self._items = items

    def __iter__(self) -> Iterator[E]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return self.get(item) is not None
        name = getattr(item, "name", None)
        return isinstance(name, str) and self.get(name) is not None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.names()!r}>"

    @property
    def items(self) -> MutableSequence[E]:
        return self._items

    def get(self, name: str) -> E | None:
        for item in self._items:
            if item.name == name:
                return item
        return None

    def names(self) -> list[str]:
        return [item.name for item in self._items]

    def drop(self, entities: Iterable[Ref]) -> list[E]:
        """Remove every entry whose name matches one of ``entities``.

        Unmatched names are ignored. Returns the removed entries.
        """

        refs = _as_refs(entities, "entities")
        with self._directory.lock:
            removed = _remove_named(self._items, refs)
        logger.debug(
            f"directory.{self.kind}.drop",
            extra=log_context(requested=len(refs), removed=",".join(item.name for item in removed)),
        )
        return removed

    def _ensure_unique(self, name: str) -> None:
        if self.get(name) is not None:
            raise _reject(
                f"directory.{self.kind}.create.rejected",
                DuplicateNameError(f"{self.kind.title()} '{name}' already exists", names=[name]),
            )


class PrivilegeCollection(_Collection[Privilege]):
    kind = "privilege"

    def create(self, name: str) -> Privilege:
        """Create a privilege; raises :class:`DuplicateNameError` if it exists."""

        with self._directory.lock:
            self._ensure_unique(name)
            privilege = Privilege(name=name)
            self._items.append(privilege)
        logger.debug("directory.privilege.create", extra=log_context(privilege=name))
        return privilege

    def resolve(self, refs: Iterable[Ref]) -> list[Privilege]:
        """Return the stored privileges named by ``refs``, failing on any unknown name."""

        refs = _as_refs(refs, "privileges")
        missing = missing_names(refs, self._items)
        if missing:
            raise _reject(
                "directory.privilege.resolve.rejected",
                UnknownPrivilegeError(
                    f"Privileges {missing} are not valid because they don't exist",
                    names=missing,
                ),
            )
        resolved = [self.get(name) for name in dict.fromkeys(map(name_of, refs))]
        return [item for item in resolved if item is not None]


class _Grantee(_Collection[E]):
    """Collections whose entries hold privileges (roles and users)."""

    def grant(self, entity: Role | User, privileges: Iterable[Ref]) -> list[Privilege]:
        """Add ``privileges`` to ``entity``.

        Every privilege must exist in the directory, otherwise nothing is
        granted. Privileges already held are skipped. Returns the privileges
        actually added.
        """

        with self._directory.lock:
            resolved = self._directory.privileges.resolve(privileges)
            added = _add_missing(entity.privileges, resolved)
        logger.debug(
            f"directory.{self.kind}.grant",
            extra=log_context(**{self.kind: entity}, privileges=added),
        )
        return added

    def revoke(self, entity: Role | User, privileges: Iterable[Ref]) -> list[Privilege]:
        """Remove ``privileges`` from ``entity``; privileges not held are ignored."""

        with self._directory.lock:
            removed = _remove_named(entity.privileges, _as_refs(privileges, "privileges"))
        logger.debug(
            f"directory.{self.kind}.revoke",
            extra=log_context(**{self.kind: entity}, privileges=removed),
        )
        return removed


class RoleCollection(_Grantee[Role]):
    kind = "role"

    def create(self, name: str, privileges: Iterable[Ref] = ()) -> Role:
        """Create a role bundling existing privileges.

        Raises :class:`UnknownPrivilegeError` for unknown privileges, then
        :class:`DuplicateNameError` if the role name is taken.
        """

        with self._directory.lock:
            resolved = self._directory.privileges.resolve(privileges)
            self._ensure_unique(name)
            role = Role(name=name, privileges=resolved)
            self._items.append(role)
        logger.debug("directory.role.create", extra=log_context(role=role, privileges=resolved))
        return role

    def resolve(self, refs: Iterable[Ref]) -> list[Role]:
        """Return the stored roles named by ``refs``, failing on any unknown name."""

        refs = _as_refs(refs, "roles")
        missing = missing_names(refs, self._items)
        if missing:
            raise _reject(
                "directory.role.resolve.rejected",
                UnknownRoleError(
                    f"Roles {missing} are not valid because they don't exist",
                    names=missing,
                ),
            )
        resolved = [self.get(name) for name in dict.fromkeys(map(name_of, refs))]
        return [item for item in resolved if item is not None]


class UserCollection(_Grantee[User]):
    kind = "user"

    def create(
        self,
        name: str,
        password: str,
        roles: Iterable[Ref] = (),
        privileges: Iterable[Ref] = (),
    ) -> User:
        """Create a user.

        Raises :class:`DuplicateNameError`, :class:`UnknownRoleError` or
        :class:`UnknownPrivilegeError`, checked in that order.
        """

        with self._directory.lock:
            self._ensure_unique(name)
            resolved_roles = self._directory.roles.resolve(roles)
            resolved_privileges = self._directory.privileges.resolve(privileges)
            user = User(
                name=name,
                password=password,
                roles=resolved_roles,
                privileges=resolved_privileges,
            )
            self._items.append(user)
        logger.debug(
            "directory.user.create",
            extra=log_context(user=user, roles=resolved_roles, privileges=resolved_privileges),
        )
        return user

    def assign_roles(self, user: User, roles: Iterable[Ref]) -> list[Role]:
        """Give ``roles`` to ``user``; all of them must exist, already held ones are skipped."""

        with self._directory.lock:
            resolved = self._directory.roles.resolve(roles)
            added = _add_missing(user.roles, resolved)
        logger.debug("directory.user.assign_roles", extra=log_context(user=user, roles=added))
        return added

    def revoke_roles(self, user: User, roles: Iterable[Ref]) -> list[Role]:
        with self._directory.lock:
            removed = _remove_named(user.roles, _as_refs(roles, "roles"))
        logger.debug("directory.user.revoke_roles", extra=log_context(user=user, roles=removed))
        return removed

    def find(
        self,
        *,
        names: Iterable[str] | None = None,
        roles: Iterable[Ref] | None = None,
        privileges: Iterable[Ref] | None = None,
    ) -> list[User]:
        """Return users matching any of the supplied criteria.

        A user matches ``names`` when its name is listed, and ``roles`` /
        ``privileges`` when it directly holds at least one of them. With no
        criteria nothing matches.
        """

        name_set = set(_as_refs(names, "names")) if names is not None else None
        role_names = {name_of(role) for role in _as_refs(roles, "roles")} if roles is not None else None
        privilege_names = (
            {name_of(privilege) for privilege in _as_refs(privileges, "privileges")}
            if privileges is not None
            else None
        )

        def _matches(user: User) -> bool:
            if name_set is not None and user.name in name_set:
                return True
            if role_names is not None and not none_present(role_names, user.roles):
                return True
            if privilege_names is not None and not none_present(privilege_names, user.privileges):
                return True
            return False

        return [user for user in self._items if _matches(user)]


# ---------------------------------------------------------------------------
# Directory
# ---------------------------------------------------------------------------


class Directory:
    """Users, roles and privileges sharing one lock.

    The three backing sequences can be injected (for example after loading
    them from a durable store); they are mutated in place.
    """

    def __init__(
        self,
        *,
        privileges: MutableSequence[Privilege] | None = None,
        roles: MutableSequence[Role] | None = None,
        users: MutableSequence[User] | None = None,
    ) -> None:
        self.lock = threading.RLock()
        self.privileges = PrivilegeCollection(self, privileges if privileges is not None else [])
        self.roles = RoleCollection(self, roles if roles is not None else [])
        self.users = UserCollection(self, users if users is not None else [])

    @property
    def storage(self) -> dict[str, MutableSequence]:
        """The raw backing sequences, keyed ``users`` / ``roles`` / ``privileges``."""

        return {
            "users": self.users.items,
            "roles": self.roles.items,
            "privileges": self.privileges.items,
        }

    def effective_privileges(self, user: User) -> list[Privilege]:
        """Direct privileges plus those inherited through roles, deduplicated by name."""

        collected: list[Privilege] = []
        _add_missing(collected, user.privileges)
        for role in user.roles:
            _add_missing(collected, role.privileges)
        return collected

    def assert_privileges(
        self,
        user: User,
        privileges: Iterable[Ref],
        *,
        include_roles: bool = False,
    ) -> bool:
        """Return ``True`` when ``user`` holds every one of ``privileges``.

        Only direct privileges count unless ``include_roles`` is set.
        """

        held = self.effective_privileges(user) if include_roles else user.privileges
        return all_present(privileges, held)


__all__ = [
    "Directory",
    "Privilege",
    "PrivilegeCollection",
    "Role",
    "RoleCollection",
    "User",
    "UserCollection",
    "all_present",
    "missing_names",
    "name_of",
    "none_present",
]
