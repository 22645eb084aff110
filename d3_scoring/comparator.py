"""
Version comparator

Diffs consecutive configurations structurally (weights, formula text) and,
given a shared test environment, behaviourally (composite score delta).
"""
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from core.exceptions import InputError
from core.logging import get_logger
from core.utils import decimal_difference, round_half_up
from d1_extraction import VariableEnvironment

from .calculator import score_environment
from .constants import FINAL_SCORE_DECIMALS, MIN_COMPARE_VERSIONS
from .exceptions import ScoringError
from .types import ComparisonReport, ConfigurationDiff, FormulaChange, ScoreOutcome, ScoringConfiguration, WeightChange

logger = get_logger("scoring.comparator", domain="d3_scoring")


def _ordered_names(before: Mapping[str, Any], after: Mapping[str, Any]) -> Iterable[str]:
    """Names on the ``before`` side in order, then names only on the ``after`` side"""
    yield from before
    yield from (name for name in after if name not in before)


def diff_weights(before: Mapping[str, float], after: Mapping[str, float]) -> List[WeightChange]:
    changes = []
    for name in _ordered_names(before, after):
        old, new = before.get(name), after.get(name)
        if old != new:
            changes.append(WeightChange(competency=name, old=old, new=new, delta=decimal_difference(new, old)))
    return changes


def diff_formulas(before: Mapping[str, str], after: Mapping[str, str]) -> List[FormulaChange]:
    """Verbatim text comparison; equivalent but differently spelled formulas count as changed"""
    changes = []
    for name in _ordered_names(before, after):
        old, new = before.get(name), after.get(name)
        if old != new:
            changes.append(FormulaChange(competency=name, old_text=old, new_text=new))
    return changes


def score_configurations(
    configurations: Sequence[ScoringConfiguration],
    test_environment: Mapping[str, Any],
    labels: Optional[Sequence[str]] = None,
) -> List[ScoreOutcome]:
    """Score each configuration against one environment, keeping failures per configuration"""
    labels = _resolve_labels(configurations, labels)
    environment = VariableEnvironment(test_environment)

    outcomes = []
    for label, configuration in zip(labels, configurations):
        try:
            outcomes.append(ScoreOutcome(label=label, result=score_environment(configuration, environment)))
        except ScoringError as exc:
            outcomes.append(ScoreOutcome(label=label, error=exc))
    return outcomes


def _resolve_labels(configurations: Sequence[ScoringConfiguration], labels: Optional[Sequence[str]]) -> List[str]:
    if labels is None:
        return [str(index) for index in range(len(configurations))]
    if len(labels) != len(configurations):
        raise InputError(f"Got {len(labels)} labels for {len(configurations)} configurations", field="labels")
    return [str(label) for label in labels]


def build_comparison(
    configurations: Sequence[ScoringConfiguration],
    test_environment: Optional[Mapping[str, Any]] = None,
    labels: Optional[Sequence[str]] = None,
) -> ComparisonReport:
    """
    Score (when an environment is given) and diff configurations in order.

    Returns:
        ComparisonReport with one outcome per configuration (``None`` without
        an environment) and N-1 pairwise diffs
    """
    if len(configurations) < MIN_COMPARE_VERSIONS:
        raise InputError(
            f"Need at least {MIN_COMPARE_VERSIONS} configurations to compare, got {len(configurations)}",
            field="configurations",
        )
    labels = _resolve_labels(configurations, labels)

    outcomes = None
    if test_environment is not None:
        outcomes = score_configurations(configurations, test_environment, labels)

    differences = []
    for index in range(1, len(configurations)):
        before, after = configurations[index - 1], configurations[index]

        score_delta = None
        if outcomes is not None and outcomes[index - 1].succeeded and outcomes[index].succeeded:
            score_delta = round_half_up(
                decimal_difference(outcomes[index].result.final_score, outcomes[index - 1].result.final_score),
                FINAL_SCORE_DECIMALS,
            )

        differences.append(
            ConfigurationDiff(
                from_version=labels[index - 1],
                to_version=labels[index],
                weight_changes=diff_weights(before.final_weights, after.final_weights),
                formula_changes=diff_formulas(before.competency_formulas, after.competency_formulas),
                score_delta=score_delta,
            )
        )

    logger.debug(f"Compared {len(configurations)} configurations")
    return ComparisonReport(outcomes=outcomes, differences=differences)


def compare(
    configurations: Sequence[ScoringConfiguration],
    test_environment: Optional[Mapping[str, Any]] = None,
    labels: Optional[Sequence[str]] = None,
) -> List[ConfigurationDiff]:
    """Pairwise diffs between consecutive configurations, in input order"""
    return build_comparison(configurations, test_environment, labels).differences
