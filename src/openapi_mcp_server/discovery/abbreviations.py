"""Word tables used when compressing operation identifiers into tool names.

Operation IDs in real-world specs are verbose ("getUserConfigurationById").
The stoplist removes filler words; the abbreviation map shortens common long
words. Both are immutable so a single instance can be shared process-wide.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

COMMON_WORDS_TO_REMOVE: frozenset[str] = frozenset(
    {
        "a",
        "an",
        "and",
        "api",
        "at",
        "by",
        "for",
        "from",
        "get",
        "in",
        "into",
        "of",
        "on",
        "or",
        "the",
        "to",
        "using",
        "via",
        "with",
    }
)

WORD_ABBREVIATIONS: Mapping[str, str] = MappingProxyType(
    {
        # Identity / access
        "identifier": "id",
        "identifiers": "ids",
        "authentication": "auth",
        "authorization": "authz",
        "administrator": "admin",
        "administration": "admin",
        "password": "pwd",
        "permission": "perm",
        "permissions": "perms",
        # Resources
        "account": "acct",
        "accounts": "accts",
        "address": "addr",
        "application": "app",
        "applications": "apps",
        "attribute": "attr",
        "attributes": "attrs",
        "category": "cat",
        "categories": "cats",
        "configuration": "config",
        "configurations": "configs",
        "database": "db",
        "description": "desc",
        "directory": "dir",
        "document": "doc",
        "documents": "docs",
        "environment": "env",
        "environments": "envs",
        "image": "img",
        "images": "imgs",
        "information": "info",
        "message": "msg",
        "messages": "msgs",
        "notification": "notif",
        "notifications": "notifs",
        "organization": "org",
        "organizations": "orgs",
        "parameter": "param",
        "parameters": "params",
        "reference": "ref",
        "references": "refs",
        "repository": "repo",
        "repositories": "repos",
        "request": "req",
        "requests": "reqs",
        "response": "resp",
        "service": "svc",
        "services": "svcs",
        "specification": "spec",
        "statistics": "stats",
        "subscription": "sub",
        "subscriptions": "subs",
        "transaction": "txn",
        "transactions": "txns",
        "version": "ver",
        "versions": "vers",
        # Qualifiers
        "development": "dev",
        "production": "prod",
        "maximum": "max",
        "minimum": "min",
        "number": "num",
        "previous": "prev",
        "temporary": "temp",
        "utility": "util",
        "utilities": "utils",
        "value": "val",
        "values": "vals",
        # Verbs
        "calculate": "calc",
        "generate": "gen",
        "initialize": "init",
        "synchronize": "sync",
    }
)


@dataclass(frozen=True)
class AbbreviationTables:
    """Stoplist and abbreviation map consumed by the compression stages."""

    common_words: frozenset[str] = COMMON_WORDS_TO_REMOVE
    abbreviations: Mapping[str, str] = field(
        default_factory=lambda: WORD_ABBREVIATIONS
    )
    abbreviation_values: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        values = frozenset(v.lower() for v in self.abbreviations.values())
        object.__setattr__(self, "abbreviation_values", values)

    @classmethod
    def from_dicts(
        cls, common_words: set[str] | list[str], abbreviations: dict[str, str]
    ) -> AbbreviationTables:
        """Build tables from plain collections (handy for test fixtures)."""
        return cls(
            common_words=frozenset(w.lower() for w in common_words),
            abbreviations=MappingProxyType(
                {k.lower(): v for k, v in abbreviations.items()}
            ),
        )


DEFAULT_TABLES = AbbreviationTables()
