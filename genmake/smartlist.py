"""A list with the extra operations the makefile generator relies on."""

from __future__ import annotations

import functools
from typing import Any, Callable, Optional

Compare = Callable[[Any, Any], int]
FreeFn = Callable[[Any], None]


class SmartList(list):
    """A resizeable list with swap-delete, de-duplication and binary search.

    Comparison functions follow the classic convention: negative when the
    first argument precedes the second, positive when it follows, zero when
    they are equal.
    """

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self):
            raise IndexError(f"index {index} out of range for list of length {len(self)}")

    def delete_swap(self, index: int) -> None:
        """Remove the element at ``index``, moving the last element into its place."""
        self._check_index(index)
        last = self.pop()
        if index < len(self):
            self[index] = last

    def delete_keep_order(self, index: int) -> None:
        """Remove the element at ``index``, shifting later elements down by one."""
        self._check_index(index)
        del self[index]

    def wipe(self, free_fn: FreeFn) -> None:
        """Call ``free_fn`` on every element, then empty the list."""
        for item in self:
            free_fn(item)
        self.clear()

    def duplicates(self, compare: Compare) -> int:
        """Count elements equal to their predecessor (the list should be sorted)."""
        return sum(1 for prev, cur in zip(self, self[1:]) if compare(prev, cur) == 0)

    def make_unique(self, compare: Compare, free_fn: Optional[FreeFn] = None) -> None:
        """Drop elements equal to their predecessor, keeping order.

        ``free_fn``, when given, is called on each element that is removed.
        """
        if not self:
            return
        kept = [self[0]]
        for item in self[1:]:
            if compare(kept[-1], item) == 0:
                if free_fn is not None:
                    free_fn(item)
            else:
                kept.append(item)
        self[:] = kept

    def sort_with(self, compare: Compare) -> None:
        """Sort in place using a three-way comparison function."""
        self.sort(key=functools.cmp_to_key(compare))

    def bsearch_index(self, key: Any, compare: Compare) -> tuple[int, bool]:
        """Binary-search a sorted list for ``key``.

        ``compare(key, member)`` is three-way. Returns ``(index, found)``: the
        index of a matching member, or else of the first member greater than
        ``key`` (``len(self)`` if there is none).
        """
        lo, hi = 0, len(self) - 1
        while lo <= hi:
            mid = lo + (hi - lo) // 2
            cmp = compare(key, self[mid])
            if cmp == 0:
                return mid, True
            if cmp > 0:
                lo = mid + 1
            else:
                hi = mid - 1
        return lo, False

    def bsearch(self, key: Any, compare: Compare) -> Any:
        """Return the member matching ``key`` in a sorted list, or None."""
        index, found = self.bsearch_index(key, compare)
        return self[index] if found else None