"""
Core Byte Pair Encoding (BPE) merge operation.
"""

from typing import Callable

from .types import Symbol, SymbolId, SymbolList

type RankLookup = Callable[[SymbolId, SymbolId], tuple[int, SymbolId] | None]


def bpe_merge(symbols: SymbolList, ranks: RankLookup) -> SymbolList:
    """
    Greedily merge adjacent symbols until no pair has a known rank.

    Each pass looks at every adjacent pair, picks the one with the lowest
    rank (leftmost wins on ties) and replaces it with its merged symbol. The
    merged symbol covers the source length of both halves.

    Runs in O(n^2) over the number of symbols, which is fine for word-sized
    chunks.

    :param symbols: ``(symbol_id, source_length)`` pairs of one chunk.
    :param ranks: Lookup returning ``(rank, merged_id)`` for a pair, or ``None``.
    :return: New symbol list; ``symbols`` is not modified.
    """
    out: list[Symbol] = list(symbols)

    while len(out) > 1:
        best_rank: int | None = None
        best_pos = -1
        best_id = -1

        for i in range(len(out) - 1):
            found = ranks(out[i][0], out[i + 1][0])
            if found is None:
                continue
            rank, merged = found
            # strict comparison keeps the leftmost pair on ties
            if best_rank is None or rank < best_rank:
                best_rank, best_pos, best_id = rank, i, merged

        if best_rank is None:
            break

        left, right = out[best_pos], out[best_pos + 1]
        out[best_pos : best_pos + 2] = [(best_id, left[1] + right[1])]

    return out
