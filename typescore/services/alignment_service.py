import logging
from typing import List

from typescore.models.edit_operation import EditOperation

logger = logging.getLogger(__name__)


class EditAlignmentService:
    """
    Character-level edit-distance alignment (DP table + backtracking).
    Unit costs for insert, delete and substitute.
    """

    @staticmethod
    def _table(reference: str, typed: str) -> List[int]:
        """Fill the (m+1) x (n+1) distance table, stored row-major in a flat list."""
        m, n = len(reference), len(typed)
        width = n + 1
        dp = [0] * ((m + 1) * width)

        for i in range(m + 1):
            dp[i * width] = i
        for j in range(n + 1):
            dp[j] = j

        for i in range(1, m + 1):
            row = i * width
            prev = row - width
            ref_ch = reference[i - 1]
            for j in range(1, n + 1):
                if ref_ch == typed[j - 1]:
                    dp[row + j] = dp[prev + j - 1]
                else:
                    dp[row + j] = 1 + min(
                        dp[prev + j],      # delete
                        dp[row + j - 1],   # insert
                        dp[prev + j - 1],  # substitute
                    )
        return dp

    @staticmethod
    def _backtrack(dp: List[int], reference: str, typed: str) -> List[EditOperation]:
        width = len(typed) + 1
        i, j = len(reference), len(typed)
        path: List[EditOperation] = []

        # Precedence on ties: match, substitute, delete, insert.
        while i > 0 or j > 0:
            here = dp[i * width + j]
            if i > 0 and j > 0 and reference[i - 1] == typed[j - 1]:
                path.append(EditOperation.equal(reference[i - 1], typed[j - 1]))
                i -= 1
                j -= 1
            elif i > 0 and j > 0 and here == dp[(i - 1) * width + j - 1] + 1:
                path.append(EditOperation.substitute(reference[i - 1], typed[j - 1]))
                i -= 1
                j -= 1
            elif i > 0 and here == dp[(i - 1) * width + j] + 1:
                path.append(EditOperation.delete(reference[i - 1]))
                i -= 1
            else:
                path.append(EditOperation.insert(typed[j - 1]))
                j -= 1

        return path[::-1]

    def distance(self, reference: str, typed: str) -> int:
        dp = self._table(reference, typed)
        return dp[-1]

    def align(self, reference: str, typed: str) -> List[EditOperation]:
        """Return a minimum-cost operation sequence from ``reference`` to ``typed``, left to right."""
        dp = self._table(reference, typed)
        ops = self._backtrack(dp, reference, typed)
        logger.debug("Aligned %d/%d chars with distance %d.", len(reference), len(typed), dp[-1])
        return ops


_default_service = EditAlignmentService()


def align(reference: str, typed: str) -> List[EditOperation]:
    return _default_service.align(reference, typed)


def edit_distance(reference: str, typed: str) -> int:
    return _default_service.distance(reference, typed)
