"""Question pool sent by simulated users."""

from __future__ import annotations

from pathlib import Path

import yaml

DEFAULT_QUERY_POOL: tuple[str, ...] = (
    "What are the six key economic sectors identified in the Post COVID-19 Development Strategy 2030?",
    "What are the seven enablers identified in the Post COVID-19 Development Strategy 2030?",
    "How do the economic sectors and enablers interact to drive economic prosperity in Sarawak?",
    "What are the differences between seven strategic thrusts and seven enablers?",
    "What are the key objectives and initiatives related to environmental sustainability "
    "within the Post COVID-19 Development Strategy 2030?",
    "How does PCDS 2030 address Sarawak’s economic challenges?",
    "What are the seven strategic thrusts of PCDS 2030?",
    "Summarize the key points in PCDS 2030",
    "What happened during COVID-19 pandemic in Sarawak?",
    "What are the conclusion from PCDS 2030?",
    "Briefly explain the first key economic sector in PCDS 2030.",
)


def load_query_pool(path: Path | None) -> tuple[str, ...]:
    """
    Load a question pool from a YAML list, or return the default pool.

    Args:
        path: YAML file containing a top-level list of strings, or
            ``None`` to use :data:`DEFAULT_QUERY_POOL`.

    Raises:
        ValueError: If the file does not hold a non-empty list of
            non-empty strings.
    """
    if path is None:
        return DEFAULT_QUERY_POOL

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)

    if not isinstance(data, list) or not data:
        raise ValueError(f"Query pool file {path} must contain a non-empty YAML list")

    queries = tuple(str(item).strip() for item in data if isinstance(item, str) and item.strip())
    if len(queries) != len(data):
        raise ValueError(f"Query pool file {path} must only contain non-empty strings")
    return queries
