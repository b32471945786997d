"""
Fallback query engine.

Runs a QueryPlan left to right against a remote search function and returns
the first non-empty (post-filtered) result. A step whose remote call fails is
classified, logged and skipped; it never aborts the search.
"""

from typing import Any, Callable, List, Optional

from ..config import SearchConfig, get_config
from ..constants import LogContextKey
from ..schemas.query_plan_schemas import QueryPlan
from ..utils.logger import get_logger
from .error_classifier import ErrorClassifier

# (query, page_size) -> items, each with a "name"
RemoteSearchFn = Callable[[str, int], List[Any]]


class FallbackQueryEngine:
    """Executes query relaxations until one yields results."""

    def __init__(
        self,
        search_config: Optional[SearchConfig] = None,
        classifier: Optional[ErrorClassifier] = None,
        enable_fallback: Optional[bool] = None,
    ):
        app_config = get_config()
        self.config = search_config or app_config.search
        self.classifier = classifier or ErrorClassifier()
        self.enable_fallback = (
            enable_fallback if enable_fallback is not None else app_config.features.enable_fallback_search
        )
        self.logger = get_logger()

    def build_plan(self, raw_query: str, max_results: Optional[int] = None) -> QueryPlan:
        """Plan for ``raw_query``; only the verbatim step when fallback is disabled."""
        max_results = self._max_results(max_results)
        plan = QueryPlan.build(
            raw_query,
            max_results,
            document_predicate=self.config.document_predicate,
            tabular_predicate=self.config.tabular_predicate,
            prefix_min_length=self.config.prefix_min_length,
            prefix_ratio=self.config.prefix_ratio,
            recall_multiplier=self.config.recall_multiplier,
        )
        if not self.enable_fallback:
            return QueryPlan(raw_query=plan.raw_query, steps=plan.steps[:1])
        return plan

    def search(
        self,
        raw_query: str,
        remote_search_fn: RemoteSearchFn,
        max_results: Optional[int] = None,
    ) -> List[Any]:
        """
        Search with fallback.

        Args:
            raw_query: The caller's query
            remote_search_fn: Remote search taking (query, page_size)
            max_results: Result cap (default: from config)

        Returns:
            The first non-empty step's results, or an empty list
        """
        if raw_query is None or not raw_query.strip():
            self.logger.warning("Empty search query; nothing to run")
            return []

        plan = self.build_plan(raw_query, max_results)

        for index, step in enumerate(plan.steps, start=1):
            try:
                raw_items = remote_search_fn(step.query, step.page_size)
            except Exception as e:
                classified = self.classifier.classify(e)
                self.logger.warning(
                    "Search step failed; moving to next relaxation",
                    extra={
                        LogContextKey.STRATEGY.value: step.strategy,
                        "step": index,
                        LogContextKey.ERROR_KIND.value: classified.kind.value,
                        "detail": classified.message,
                    },
                )
                continue

            items = step.apply_filter(list(raw_items or []))
            self.logger.debug(
                "Search step completed",
                extra={
                    LogContextKey.STRATEGY.value: step.strategy,
                    "step": index,
                    "result_count": len(items),
                },
            )
            if items:
                if index > 1:
                    self.logger.info(
                        "Search matched after relaxation",
                        extra={LogContextKey.STRATEGY.value: step.strategy, "step": index},
                    )
                return items

        self.logger.info(
            "Search exhausted all relaxations without results",
            extra={"steps": len(plan.steps)},
        )
        return []

    def _max_results(self, max_results: Optional[int]) -> int:
        if max_results is None:
            return self.config.default_max_results
        if max_results < 1:
            raise ValueError(f"max_results must be positive, got {max_results}")
        return max_results
