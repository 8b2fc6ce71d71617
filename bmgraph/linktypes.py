# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
"""
Link-type tables: the reverse name of every link type and the set of
link types whose direction is canonical.

A leading ``-`` denotes the reverse of a link type, so ``-x`` is the
reverse of ``x`` unless a reverse name has been defined for ``x``.
Symmetric link types map to themselves.
"""
import re
from typing import AbstractSet, Dict, Optional, Set

# Reverse names understood on input. Writers emit "-name" instead.
BUILTIN_REVERSE_LINKTYPES: Dict[str, str] = {
    "refers_to": "referred_by",
    "codes_for": "coded_by",
    "has_child": "has_parent",
    "contains": "contained_by",
    "affects": "affected_by",
    "belongs_to": "has_member",
    "has_variant": "is_variant_of",
    "has_function": "is_function_of",
    "subsumes": "subsumed_by",
    "targets": "targeted_by",
    "is_located_in": "is_location_of",
    "is_part_of": "has_part",
    "participates_in": "has_participant",
    "resolves_to": "resolved_from",
    "has_name": "names",
    "": "-",
}

BUILTIN_SYMMETRIC_LINKTYPES = frozenset({
    "is_related_to",
    "interacts_with",
    "is_homologous_to",
    "functionally_associated_to",
    "has_synonym",
    "overlaps",
})

_DOUBLE_NEGATIONS = re.compile(r"^(?:--)*")

class LinkTypes:
    def __init__(self, builtins: bool = True):
        self._reverse: Dict[str, str] = {}
        self._canonical: Set[str] = set()
        if builtins:
            for forward, reverse in BUILTIN_REVERSE_LINKTYPES.items():
                self.define_reverse(forward, reverse)
                self.define_reverse(forward, "-" + forward)
            for linktype in BUILTIN_SYMMETRIC_LINKTYPES:
                self.define_symmetric(linktype)

    def copy(self) -> "LinkTypes":
        other = LinkTypes(builtins=False)
        other._reverse = dict(self._reverse)
        other._canonical = set(self._canonical)
        return other

    def define_reverse(self, forward: str, reverse: Optional[str] = None) -> None:
        """Make ``forward`` canonical with ``reverse`` as its reverse name."""
        if reverse is None:
            reverse = "-" + forward
        if forward != reverse:
            self._canonical.discard(reverse)
            self._reverse[reverse] = forward
        self._canonical.add(forward)
        self._reverse[forward] = reverse

    def define_symmetric(self, linktype: str) -> None:
        self._canonical.add(linktype)
        self._reverse[linktype] = linktype

    def undefine_reverse_types(self) -> None:
        """Forget reverse names: every non-symmetric type reverts to ``-name``."""
        for linktype in list(self._canonical):
            if not self.is_symmetric(linktype):
                reverse = "-" + linktype
                self._reverse[linktype] = reverse
                self._reverse[reverse] = linktype

    def definitions(self) -> AbstractSet[str]:
        return frozenset(self._canonical)

    def canonical_name(self, linktype: str) -> str:
        linktype = _DOUBLE_NEGATIONS.sub("", linktype, count=1)
        if linktype.startswith("-"):
            result = self._reverse.get(linktype[1:])
            return linktype if result is None else result
        # Double lookup resolves reverse names registered for reading
        # (e.g. "referred_by" -> "refers_to" -> "-refers_to")
        result = self._reverse.get(linktype)
        if result is None:
            return linktype
        result = self._reverse.get(result)
        return linktype if result is None else result

    def reverse_name(self, linktype: str) -> str:
        result = self._reverse.get(linktype)
        if result is None:
            name = _DOUBLE_NEGATIONS.sub("", linktype, count=1)
            if name != linktype:
                return self.reverse_name(name)
            if linktype.startswith("-"):
                result = linktype[1:]
            else:
                result = "-" + linktype
            # "-x" must not clobber a reverse name defined for "x"
            self._reverse.setdefault(result, linktype)
            self._reverse[linktype] = result
        return result

    def is_symmetric(self, linktype: str) -> bool:
        return self._reverse.get(linktype) == linktype

    def is_canonical_direction(self, linktype: str) -> bool:
        if linktype in self._canonical:
            return self._reverse.get(linktype) != linktype
        # A defined reverse name such as "liked_by" for "likes"
        forward = self._reverse.get(linktype)
        if forward is not None and forward != linktype and forward in self._canonical:
            return False
        return not linktype.startswith("-")
