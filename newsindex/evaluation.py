"""
TREC-style evaluation of result files against relevance judgments.

Measures per topic (topics are taken from the qrels):
- ap             average precision over the full result list
- ndcg_cut_10    nDCG at 10, binary gains, log2(rank + 1) discount
- ndcg_cut_1000  nDCG at 1000
- P_10           precision at 10
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path

from .bm25 import ResultEntry

logger = logging.getLogger(__name__)

MEASURES = ("ap", "ndcg_cut_10", "ndcg_cut_1000", "P_10")


@dataclass(frozen=True)
class Judgment:
    topic_id: int
    doc_no: str
    relevance: int


def load_results(path: Path) -> list[ResultEntry]:
    """
    Read a result file. Lines with fewer than six fields are skipped; a line
    with non-numeric topic, rank or score makes the whole file invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")
    results: list[ResultEntry] = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            parts = line.split()
            if len(parts) < 6:
                continue
            try:
                results.append(
                    ResultEntry(
                        topic_id=int(parts[0]),
                        rank=int(parts[3]),
                        doc_no=parts[2],
                        score=float(parts[4]),
                        run_tag=parts[5],
                    )
                )
            except ValueError as e:
                raise ValueError(f"{path}:{lineno}: improper result line: {line.strip()!r}") from e
    return results


def load_qrels(path: Path) -> list[Judgment]:
    """Read `<topicId> <ignored> <docNo> <judgment>` lines; short or non-numeric lines are skipped."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Qrels file not found: {path}")
    judgments: list[Judgment] = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            parts = line.split()
            if len(parts) < 4:
                continue
            try:
                judgments.append(Judgment(int(parts[0]), parts[2], int(parts[3])))
            except ValueError:
                logger.warning("%s:%d: skipped qrels line %r", path, lineno, line.strip())
    return judgments


def relevance_by_topic(judgments: list[Judgment]) -> dict[int, dict[str, int]]:
    relevance: dict[int, dict[str, int]] = defaultdict(dict)
    for j in judgments:
        relevance[j.topic_id][j.doc_no] = j.relevance
    return dict(sorted(relevance.items()))


def _is_relevant(doc_no: str, relevance: dict[str, int]) -> bool:
    return relevance.get(doc_no, 0) > 0


def average_precision(ranked: list[str], relevance: dict[str, int]) -> float:
    total_relevant = sum(1 for r in relevance.values() if r > 0)
    if total_relevant == 0:
        return 0.0
    hits = 0
    precision_sum = 0.0
    for i, doc_no in enumerate(ranked, start=1):
        if _is_relevant(doc_no, relevance):
            hits += 1
            precision_sum += hits / i
    return precision_sum / total_relevant


def precision_at_k(ranked: list[str], relevance: dict[str, int], k: int = 10) -> float:
    hits = sum(1 for doc_no in ranked[:k] if _is_relevant(doc_no, relevance))
    return hits / k


def ndcg_at_k(ranked: list[str], relevance: dict[str, int], k: int) -> float:
    dcg = sum(
        1.0 / math.log2(i + 2)
        for i, doc_no in enumerate(ranked[:k])
        if _is_relevant(doc_no, relevance)
    )
    ideal_hits = min(k, sum(1 for r in relevance.values() if r > 0))
    idcg = sum(1.0 / math.log2(i + 2) for i in range(ideal_hits))
    return dcg / idcg if idcg else 0.0


def evaluate(results: list[ResultEntry], judgments: list[Judgment]) -> dict[str, dict[int, float]]:
    """Scores per measure, per topic. Results are taken in file order per topic."""
    by_topic: dict[int, list[str]] = defaultdict(list)
    for entry in results:
        by_topic[entry.topic_id].append(entry.doc_no)

    scores: dict[str, dict[int, float]] = {m: {} for m in MEASURES}
    for topic_id, relevance in relevance_by_topic(judgments).items():
        ranked = by_topic.get(topic_id, [])
        scores["ap"][topic_id] = average_precision(ranked, relevance)
        scores["ndcg_cut_10"][topic_id] = ndcg_at_k(ranked, relevance, 10)
        scores["ndcg_cut_1000"][topic_id] = ndcg_at_k(ranked, relevance, 1000)
        scores["P_10"][topic_id] = precision_at_k(ranked, relevance, 10)
    return scores


def format_score(measure: str, topic_id: int, value: float) -> str:
    return f"{measure:<20}\t{topic_id}\t{value:.4f}"


def write_scores(path: Path, scores: dict[str, dict[int, float]]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for measure in MEASURES:
            for topic_id, value in scores[measure].items():
                f.write(format_score(measure, topic_id, value) + "\n")
