"""Encoding of multi-asset token bundles into device records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union

from .params import ParamSpec, validate_params


@dataclass(frozen=True)
class AssetGroupWithTokens:
    """Tokens minted under a single policy, as supplied by the caller."""

    policy_id: str
    tokens: Sequence[Any]


@dataclass(frozen=True)
class AssetGroup:
    """Wire-ready asset group carrying its own token count."""

    policy_id: str
    tokens: tuple[Any, ...]
    tokens_count: int

    def header_message(self) -> dict[str, Any]:
        return {"policy_id": self.policy_id, "tokens_count": self.tokens_count}

    def to_dict(self) -> dict[str, Any]:
        return {**self.header_message(), "tokens": list(self.tokens)}


AssetGroupInput = Union[AssetGroupWithTokens, Mapping[str, Any]]

_ASSET_GROUP_SCHEMA = [
    ParamSpec("policyId", "string", required=True),
    ParamSpec("tokens", "array", required=True),
]


def _as_group(group: AssetGroupInput) -> AssetGroupWithTokens:
    if isinstance(group, AssetGroupWithTokens):
        return group
    validate_params(group, _ASSET_GROUP_SCHEMA)
    return AssetGroupWithTokens(policy_id=group["policyId"], tokens=group["tokens"])


def token_bundle_to_proto(token_bundle: Sequence[AssetGroupInput]) -> list[AssetGroup]:
    """Encode *token_bundle* group by group, preserving caller order.

    Groups are expected to be merged per policy already; tokens are passed
    through untouched.
    """

    encoded: list[AssetGroup] = []
    for raw_group in token_bundle:
        group = _as_group(raw_group)
        tokens = tuple(group.tokens)
        encoded.append(
            AssetGroup(policy_id=group.policy_id, tokens=tokens, tokens_count=len(tokens))
        )
    return encoded
