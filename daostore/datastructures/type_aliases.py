"""
Semantic type aliases for daostore datastructures.

This module provides meaningful type aliases that make the codebase more
self-documenting by replacing raw types like str and int with semantic
aliases.
"""

from typing import Any

# Time and timestamp types
type TimestampNanoseconds = int

# Identity types
type DaoId = str
type ProposalId = str
type PrincipalId = str

# Free-form record text
type DaoName = str
type DaoShortDescription = str
type AvatarUrl = str
type ProposalTitle = str
type ProposalDetails = str

# Storage types
type NamespaceName = str
type StoreKey = str

# Serialization types
type JsonDict = dict[str, Any]

# Counts
type VoteCount = int
type ErrorMessage = str
