"""Shared type definitions for type checking.

Uses NewType for identifiers that must not be mixed with arbitrary strings,
and TypeAlias for structural types.
"""

from typing import NewType, TypeAlias

# Normalized (trimmed, lower-cased) subscriber email, the directory's key
EmailAddress = NewType("EmailAddress", str)

# GitHub identifiers
ActorHandle: TypeAlias = str  # actor.login
RepoName: TypeAlias = str  # owner/name
DateString: TypeAlias = str  # ISO 8601 format
