import fnmatch
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from icsctl.controller.privilege import require_admin
from icsctl.exceptions import (
    AmbiguousConnectionNameError,
    ConnectionNotEnabledError,
    ConnectionNotFoundError,
    SharingValidationError,
)
from icsctl.logging_utility import logger
from icsctl.model.sharing_apply import disable_sharing, enable_sharing
from icsctl.model.sharing_model import (
    Connection,
    ConnectionStatus,
    SharingRole,
    SharingState,
    get_connections,
)
from icsctl.view.console import confirm_action

WILDCARD_CHARS = "*?["

_ROLE_ORDER = {SharingRole.PUBLIC: 0, SharingRole.PRIVATE: 1, None: 2}


@dataclass
class SharingResult:
    """Outcome of SharingController.set_sharing()"""
    changed: bool = False
    already_set: bool = False
    dry_run: bool = False
    cancelled: bool = False
    public: str = ""
    private: str = ""
    disabled: list[str] = field(default_factory=list)
    statuses: list[ConnectionStatus] = field(default_factory=list)


# ------------------------------------------------------------
# Name matching
# ------------------------------------------------------------
def has_wildcard(name: str) -> bool:
    return any(ch in name for ch in WILDCARD_CHARS)


def match_connections(pattern: str, connections: Iterable[Connection]) -> list[Connection]:
    """
    Return the connections whose name matches ``pattern``, ignoring case.

    An exact name match wins over wildcard interpretation, so a connection
    literally named "Ethernet [2]" can still be addressed by its name.
    """
    connections = list(connections)
    key = pattern.casefold()
    exact = [c for c in connections if c.name.casefold() == key]
    if exact or not has_wildcard(pattern):
        return exact
    return [c for c in connections if fnmatch.fnmatchcase(c.name.casefold(), key)]


def resolve(pattern: str, connections: Iterable[Connection]) -> Connection:
    """Resolve a name or pattern to exactly one connection."""
    matches = match_connections(pattern, connections)
    if not matches:
        raise ConnectionNotFoundError(f"Connection '{pattern}' was not found", pattern)
    if len(matches) > 1:
        candidates = sorted(c.name for c in matches)
        raise AmbiguousConnectionNameError(
            f"'{pattern}' matches more than one connection: {', '.join(candidates)}",
            pattern,
            candidates,
        )
    return matches[0]


def check_enabled(public: Connection, private: Connection) -> bool:
    return (public.sharing is SharingState.ENABLED_AS_PUBLIC
            and private.sharing is SharingState.ENABLED_AS_PRIVATE)


def sort_statuses(statuses: Iterable[ConnectionStatus], order: str = "name") -> list[ConnectionStatus]:
    """Sort by name, or by role (public, private, none) then media type then name."""
    if order == "state":
        return sorted(statuses, key=lambda s: (_ROLE_ORDER[s.role], s.media_type.casefold(), s.name.casefold()))
    return sorted(statuses, key=lambda s: s.name.casefold())


# ------------------------------------------------------------
# Main Controller
# ------------------------------------------------------------
class SharingController:
    """
    Resolves connection names and drives the sharing component.

    Each operation checks for elevation first, then re-reads the live
    connection set. Mutations are only issued when the requested state
    differs from the current one.
    """

    def __init__(self, share=None, wmi_conn=None,
                 privilege_check: Callable[[], None] = require_admin,
                 prompt: Callable[[str], bool] = confirm_action):
        self.share = share
        self.wmi_conn = wmi_conn
        self.privilege_check = privilege_check
        self.prompt = prompt

    def _connections(self) -> list[Connection]:
        return get_connections(self.share, self.wmi_conn)

    def _approved(self, question: str, confirm: bool) -> bool:
        if not confirm:
            return True
        if self.prompt(question):
            return True
        logger.warning("Operation cancelled, no changes made")
        return False

    # ------------------------------------------------------------
    # set-sharing
    # ------------------------------------------------------------
    def set_sharing(self, public_name: str, private_name: str, pass_through: bool = False,
                    dry_run: bool = False, confirm: bool = False) -> SharingResult:
        self.privilege_check()

        if public_name.casefold() == private_name.casefold():
            raise SharingValidationError(
                f"'{public_name}' cannot be both the public and the private connection", public_name
            )

        connections = self._connections()
        public = resolve(public_name, connections)
        private = resolve(private_name, connections)

        if public is private:
            raise SharingValidationError(
                f"'{public_name}' and '{private_name}' both resolve to '{public.name}'; "
                "the public and private connections must differ",
                public.name,
            )
        if not private.is_up:
            raise ConnectionNotEnabledError(
                f"Private connection '{private.name}' is not up (status: {private.status.value}). "
                "Sharing can only be enabled on a connection that is up",
                private.name,
            )

        if check_enabled(public, private):
            logger.info(
                f"Sharing is already set: '{public.name}' is public and '{private.name}' is private"
            )
            result = SharingResult(already_set=True, public=public.name, private=private.name)
            if pass_through:
                result.statuses = [public.to_status(), private.to_status()]
            return result

        to_disable = [c for c in connections if c.sharing_enabled]
        result = SharingResult(dry_run=dry_run, public=public.name, private=private.name,
                               disabled=[c.name for c in to_disable])

        if dry_run:
            for conn in to_disable:
                logger.info(f"What if: disable sharing on '{conn.name}'")
            logger.info(f"What if: enable public sharing on '{public.name}'")
            logger.info(f"What if: enable private sharing on '{private.name}'")
            return result

        question = f"Share '{public.name}' (public) with '{private.name}' (private)?"
        if not self._approved(question, confirm):
            return SharingResult(cancelled=True, public=public.name, private=private.name)

        for conn in to_disable:
            disable_sharing(conn)
        enable_sharing(public, SharingRole.PUBLIC)
        enable_sharing(private, SharingRole.PRIVATE)
        result.changed = True
        logger.info(f"Sharing '{public.name}' (public) with '{private.name}' (private)")

        if pass_through:
            refreshed = self._connections()
            result.statuses = [resolve(c.name, refreshed).to_status() for c in (public, private)]
        return result

    # ------------------------------------------------------------
    # get-status
    # ------------------------------------------------------------
    def get_status(self, names: Optional[list[str]] = None, scope: str = "all",
                   sort: str = "name", strict: bool = True) -> list[ConnectionStatus]:
        self.privilege_check()
        connections = self._connections()

        if names:
            selected: dict[str, Connection] = {}
            for name in names:
                matches = match_connections(name, connections)
                if not matches:
                    if strict:
                        raise ConnectionNotFoundError(f"Connection '{name}' was not found", name)
                    logger.warning(f"Connection '{name}' was not found, skipping")
                    continue
                for conn in matches:
                    selected.setdefault(conn.name, conn)
            chosen = list(selected.values())
        else:
            chosen = connections

        if scope == "enabled":
            chosen = [c for c in chosen if c.sharing_enabled]

        return sort_statuses((c.to_status() for c in chosen), sort)

    # ------------------------------------------------------------
    # disable-sharing
    # ------------------------------------------------------------
    def disable_all(self, dry_run: bool = False, confirm: bool = False) -> list[str]:
        """Disable sharing everywhere and return the names actually changed."""
        self.privilege_check()
        enabled = [c for c in self._connections() if c.sharing_enabled]

        if not enabled:
            logger.info("Sharing is not enabled on any connection")
            return []

        if dry_run:
            for conn in enabled:
                logger.info(f"What if: disable sharing on '{conn.name}'")
            return []

        names = ", ".join(f"'{c.name}'" for c in enabled)
        if not self._approved(f"Disable sharing on {names}?", confirm):
            return []

        changed = []
        for conn in enabled:
            disable_sharing(conn)
            changed.append(conn.name)
        return changed
