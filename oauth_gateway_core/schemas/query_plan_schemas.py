"""
Query plan schemas for the fallback search.

A QueryPlan is built once per search intent and never changes afterwards.
Each QueryStep is a pure descriptor: the query string to send, the page size
to request, and how (if at all) to post-filter what comes back.
"""

import math
import re
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..constants import Limits

# <field> contains '<term>'
CONTAINS_PATTERN = re.compile(r"^\s*(?P<field>\w+)\s+contains\s+'(?P<term>[^']+)'\s*$", re.IGNORECASE)


class QueryStep(BaseModel):
    """One relaxation in a fallback search."""

    model_config = ConfigDict(frozen=True)

    strategy: str = Field(description="Stable name of the relaxation")
    query: str = Field(min_length=1)
    page_size: int = Field(gt=0)
    result_limit: int = Field(gt=0, description="Maximum results returned from this step")
    name_filter: Optional[str] = Field(
        default=None, description="Keep only items whose name contains this, case-insensitively"
    )

    def apply_filter(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Client-side filtering and truncation of a step's raw results."""
        if self.name_filter is not None:
            needle = self.name_filter.casefold()
            items = [item for item in items if needle in str(_item_name(item)).casefold()]
        return list(items)[: self.result_limit]


def _item_name(item: Any) -> str:
    if isinstance(item, dict):
        return item.get("name") or ""
    return getattr(item, "name", "") or ""


class QueryPlan(BaseModel):
    """Ordered, immutable sequence of query relaxations."""

    model_config = ConfigDict(frozen=True)

    raw_query: str
    steps: Tuple[QueryStep, ...]

    @property
    def strategies(self) -> List[str]:
        return [step.strategy for step in self.steps]

    @classmethod
    def build(
        cls,
        raw_query: str,
        max_results: int,
        document_predicate: str,
        tabular_predicate: str,
        prefix_min_length: int = Limits.PREFIX_MIN_LENGTH,
        prefix_ratio: float = Limits.PREFIX_RATIO,
        recall_multiplier: int = Limits.PREFIX_RECALL_MULTIPLIER,
    ) -> "QueryPlan":
        """
        Derive the plan for ``raw_query``.

        Steps, in order (a step is left out when its precondition fails):
        1. the raw query verbatim
        2. ``<field> contains '<term>'`` with the term lower-cased
        3. the same with the term upper-cased
        4. a prefix of the term (term length >= prefix_min_length), fetched
           with a widened page and filtered back to names containing the term
        5. the lower-cased term restricted to document-shaped items
        6. the lower-cased term restricted to tabular items
        """
        steps = [
            QueryStep(
                strategy="verbatim",
                query=raw_query,
                page_size=max_results,
                result_limit=max_results,
            )
        ]

        match = CONTAINS_PATTERN.match(raw_query)
        if match:
            field, term = match.group("field"), match.group("term")
            lower = _contains(field, term.lower())
            steps.append(
                QueryStep(strategy="lowercase", query=lower, page_size=max_results, result_limit=max_results)
            )
            steps.append(
                QueryStep(
                    strategy="uppercase",
                    query=_contains(field, term.upper()),
                    page_size=max_results,
                    result_limit=max_results,
                )
            )
            if len(term) >= prefix_min_length:
                prefix_length = max(prefix_min_length, math.floor(prefix_ratio * len(term)))
                steps.append(
                    QueryStep(
                        strategy="prefix",
                        query=_contains(field, term[:prefix_length]),
                        page_size=recall_multiplier * max_results,
                        result_limit=max_results,
                        name_filter=term,
                    )
                )
            steps.append(
                QueryStep(
                    strategy="document_subtype",
                    query=f"{lower} and {document_predicate}",
                    page_size=max_results,
                    result_limit=max_results,
                )
            )
            steps.append(
                QueryStep(
                    strategy="tabular_subtype",
                    query=f"{lower} and {tabular_predicate}",
                    page_size=max_results,
                    result_limit=max_results,
                )
            )

        return cls(raw_query=raw_query, steps=tuple(steps))


def _contains(field: str, term: str) -> str:
    return f"{field} contains '{term}'"
