"""
Owner resolution for read endpoints.

A read request may ask for the template showcase, for a specific public
profile by handle, or for the caller's own collection. The resolver walks an
ordered list of strategies and returns the subject id of the first one that
matches:

1. TemplateOverrideStrategy  - ``owner=template``
2. HandleStrategy            - ``handle=<h>``, case-insensitive
3. AuthenticatedStrategy     - the verified caller
4. TemplateFallbackStrategy  - everyone else

A strategy that matches but cannot find its target raises OwnerNotFound;
resolution stops there instead of falling through, so a request for a
nonexistent handle never returns somebody else's data.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from ..telemetry import TelemetryEvents, track_event
from .errors import HandleNotFound, OwnerNotFound, TemplateOwnerMissing
from .identity import Authenticated, AuthenticationOutcome
from .store import IdentityStore

logger = logging.getLogger(__name__)

TEMPLATE_OVERRIDE = "template"


@dataclass(frozen=True)
class OwnerQuery:
    """Owner-selecting query parameters of a read request."""

    owner: str | None = None
    handle: str | None = None


@dataclass(frozen=True)
class Match:
    subject_id: str
    strategy: str


class ResolverStrategy(Protocol):
    name: str

    async def match(self, query: OwnerQuery, outcome: AuthenticationOutcome) -> Match | None: ...


class TemplateOwnerLookup:
    """Subject id of the reserved template account.

    A hit is cached for the life of the process. A miss is not, so an account
    created after start-up is found on the next request.
    """

    def __init__(self, store: IdentityStore, email: str):
        self.store = store
        self.email = email
        self._subject_id: str | None = None

    async def get(self) -> str:
        if self._subject_id is not None:
            return self._subject_id

        user = await self.store.find_user_by_email(self.email)
        if user is None:
            raise TemplateOwnerMissing(f"No template account with email {self.email!r}")

        self._subject_id = user.subject_id
        logger.info(f"Template owner resolved to {user.subject_id}")
        return self._subject_id

    def invalidate(self) -> None:
        self._subject_id = None


class TemplateOverrideStrategy:
    name = "template_override"

    def __init__(self, template: TemplateOwnerLookup):
        self.template = template

    async def match(self, query: OwnerQuery, outcome: AuthenticationOutcome) -> Match | None:
        if query.owner != TEMPLATE_OVERRIDE:
            return None
        return Match(await self.template.get(), self.name)


class HandleStrategy:
    name = "handle"

    def __init__(self, store: IdentityStore):
        self.store = store

    async def match(self, query: OwnerQuery, outcome: AuthenticationOutcome) -> Match | None:
        if not query.handle:
            return None

        user = await self.store.find_user_by_handle(query.handle)
        if user is None:
            raise HandleNotFound(query.handle)
        return Match(user.subject_id, self.name)


class AuthenticatedStrategy:
    name = "authenticated"

    async def match(self, query: OwnerQuery, outcome: AuthenticationOutcome) -> Match | None:
        if isinstance(outcome, Authenticated):
            return Match(outcome.subject_id, self.name)
        return None


class TemplateFallbackStrategy:
    name = "template_fallback"

    def __init__(self, template: TemplateOwnerLookup):
        self.template = template

    async def match(self, query: OwnerQuery, outcome: AuthenticationOutcome) -> Match | None:
        return Match(await self.template.get(), self.name)


class OwnerResolver:
    """Computes the effective owner of a read request."""

    def __init__(self, strategies: Sequence[ResolverStrategy]):
        self.strategies = list(strategies)

    @classmethod
    def default(cls, store: IdentityStore, template_owner_email: str) -> OwnerResolver:
        template = TemplateOwnerLookup(store, template_owner_email)
        return cls(
            [
                TemplateOverrideStrategy(template),
                HandleStrategy(store),
                AuthenticatedStrategy(),
                TemplateFallbackStrategy(template),
            ]
        )

    async def resolve(self, query: OwnerQuery, outcome: AuthenticationOutcome) -> str:
        """Return the subject id whose records the request should read.

        Raises:
            HandleNotFound: handle given but no user carries it
            TemplateOwnerMissing: template selected but the account is absent
            StoreUnavailable: If the identity store cannot be reached
        """
        for strategy in self.strategies:
            try:
                match = await strategy.match(query, outcome)
            except OwnerNotFound as e:
                track_event(
                    TelemetryEvents.OWNER_NOT_FOUND,
                    {"strategy": strategy.name, "error_type": type(e).__name__},
                )
                raise

            if match is not None:
                track_event(
                    TelemetryEvents.OWNER_RESOLVED,
                    {"strategy": match.strategy, "owner_id": match.subject_id},
                )
                return match.subject_id

        raise OwnerNotFound("No resolver strategy matched")
