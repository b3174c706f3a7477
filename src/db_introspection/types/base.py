"""
Vendor-agnostic normalization policy.

Vendor type maps live in each engine module (types/postgres.py, etc.). This
module holds only the lookup policy shared by every engine: key extraction,
exact-match lookup, the unknown-type failure and arity derivation.
"""

import re
from typing import Dict, Optional, Tuple

from ..errors import UnknownRawType
from ..models import ColumnArity, ColumnType, ColumnTypeFamily

_PARAMETERS = re.compile(r"\([^)]*\)")
_WHITESPACE = re.compile(r"\s+")


def derive_arity(nullable: bool, is_list: bool = False) -> ColumnArity:
    """Arity comes from catalog flags; arrays collapse to List whatever their nullability."""
    if is_list:
        return ColumnArity.LIST
    return ColumnArity.NULLABLE if nullable else ColumnArity.REQUIRED


class TypeNormalizer:
    """Maps raw vendor type strings onto the ColumnTypeFamily vocabulary.

    Subclasses provide TYPE_MAP, keyed by lower-cased base keywords, and may
    override the hooks below for vendor syntax the map cannot express.
    """

    engine: str = "generic"
    TYPE_MAP: Dict[str, ColumnTypeFamily] = {}
    # Tokens that qualify a type without changing its family (MySQL "unsigned").
    IGNORED_MODIFIERS: Tuple[str, ...] = ()

    def base_keyword(self, raw: str) -> str:
        """varchar(255) -> varchar, timestamp(3) with time zone -> timestamp with time zone."""
        cleaned = _PARAMETERS.sub(" ", raw.lower())
        tokens = [t for t in _WHITESPACE.split(cleaned.strip()) if t and t not in self.IGNORED_MODIFIERS]
        return " ".join(tokens)

    def split_array(self, raw: str) -> Tuple[str, bool]:
        """Return the element type and whether the vendor spelled an array type."""
        return raw, False

    def fallback_family(self, key: str) -> Optional[ColumnTypeFamily]:
        """Last chance before UnknownRawType; vendors with documented fallback rules override this."""
        return None

    def classify(
        self,
        raw: str,
        table: Optional[str] = None,
        column: Optional[str] = None,
    ) -> ColumnTypeFamily:
        element, _ = self.split_array(raw)
        key = self.base_keyword(element)
        family = self.TYPE_MAP.get(key)
        if family is None:
            family = self.fallback_family(key)
        if family is None:
            raise UnknownRawType(raw, table=table, column=column, engine=self.engine)
        return family

    def normalize(
        self,
        raw: str,
        nullable: bool,
        is_list: bool = False,
        table: Optional[str] = None,
        column: Optional[str] = None,
    ) -> Tuple[ColumnType, ColumnArity]:
        """Classify a catalog column.

        Args:
            raw: The vendor type string, kept verbatim in ColumnType.raw.
            nullable: The catalog's nullability flag.
            is_list: The catalog's own array flag, if it reports one separately.
            table: Owning table, for diagnostics.
            column: Column name, for diagnostics.

        Raises:
            UnknownRawType: If the type is outside the engine's vocabulary.
        """
        family = self.classify(raw, table=table, column=column)
        _, spelled_as_array = self.split_array(raw)
        arity = derive_arity(nullable, is_list or spelled_as_array)
        return ColumnType(raw=raw, family=family), arity
