"""
Core types for tokenization.
"""

type Token = int
type SymbolId = int
# (symbol id, number of source characters the symbol covers)
type Symbol = tuple[SymbolId, int]
type SymbolList = list[Symbol]
type SymbolPair = tuple[SymbolId, SymbolId]
# pair -> (rank, merged symbol id)
type MergeRanks = dict[SymbolPair, tuple[int, SymbolId]]
type OffsetPair = tuple[int, int]
type OffsetMapping = list[OffsetPair]
