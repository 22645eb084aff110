"""
Scoring service

Operations behind the scoring and game routes. The service owns no state of
its own: it wires the pure calculator/comparator to the configuration and
session stores it is given.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.exceptions import InputError, NotFoundError
from core.logging import get_logger
from d1_extraction import VariableEnvironment
from d1_extraction import available_variables as strategy_variables
from d2_formulas import FormulaValidationError, check_formula, test_formula, validate_formula

from .calculator import calculate_scores
from .calculator import preview as preview_scores
from .comparator import build_comparison
from .exceptions import ScoringError
from .repository import ConfigurationStore, SessionStore
from .types import ScoringConfiguration, VersionedConfiguration

logger = get_logger("scoring.service", domain="d3_scoring")


def validate_configuration(configuration: ScoringConfiguration) -> None:
    """Reject a configuration if any of its formulas fails validation"""
    for competency, text in configuration.competency_formulas.items():
        try:
            validate_formula(text)
        except FormulaValidationError as exc:
            raise ScoringError(competency, exc, prefix="Invalid formula for") from exc


class ScoringService:
    """Submit, preview, compare and version scoring configurations"""

    def __init__(self, config_store: ConfigurationStore, session_store: SessionStore):
        self.config_store = config_store
        self.session_store = session_store

    def _require_active(self, game_type: str) -> VersionedConfiguration:
        version = self.config_store.get_active(game_type)
        if version is None:
            raise NotFoundError("Active scoring configuration", game_type)
        return version

    def submit(self, game_type: str, user_id: str, raw_data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Score a completed session with the active configuration and record it.

        Nothing is persisted when scoring fails.
        """
        if not user_id:
            raise InputError("user_id is required", field="user_id")

        version = self._require_active(game_type)
        result = calculate_scores(game_type, version.configuration, raw_data)

        session_id = self.session_store.record_submission(
            user_id=user_id,
            game_type=game_type,
            version_id=version.id,
            final_scores=result.to_dict(),
            completed_at=datetime.now(timezone.utc),
            raw_data=raw_data,
        )

        logger.with_context(game_type=game_type, user_id=user_id).info(
            f"Scored session {session_id} with {version.version_name}: {result.final_score}",
            extra={"session_id": session_id},
        )
        return {"session_id": session_id, "version_used": version.version_name, "scores": result.to_dict()}

    def validate_formula(self, formula: str, test_variables: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Validate formula text and optionally evaluate it against sample variables.

        A formula that parses but fails against the supplied variables is
        reported as invalid with the evaluation error.
        """
        check = check_formula(formula)
        response: Dict[str, Any] = {
            "valid": check.valid,
            "error": check.error_message,
            "error_kind": check.error.error_code if check.error else None,
            "variables": sorted(check.variables),
        }

        if check.valid and test_variables is not None:
            outcome = test_formula(formula, VariableEnvironment(test_variables))
            if outcome.success:
                response["test_result"] = outcome.result
            else:
                response.update(valid=False, error=outcome.error_message, error_kind=outcome.error_kind)
        return response

    def preview(
        self,
        game_type: Optional[str],
        formulas: Mapping[str, str],
        weights: Mapping[str, float],
        test_variables: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """Score unsaved formulas and weights against hand-supplied variables"""
        try:
            result = preview_scores(formulas, weights, test_variables, game_type=game_type)
        except ScoringError as exc:
            return {"success": False, "error": exc.to_error_payload()}
        return {"success": True, "scores": result.to_dict(), "test_variables": dict(test_variables)}

    def compare(
        self,
        game_type: str,
        version_ids: Sequence[str],
        test_data: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Compare stored versions in the requested order.

        Raises:
            InputError: fewer than two ids, or a version of another game type
            NotFoundError: any requested version does not exist
        """
        if len(version_ids) < 2:
            raise InputError("At least two versions are required for comparison", field="version_ids")

        versions = self.config_store.get_many(version_ids)
        if len(versions) < len(version_ids):
            found = {version.id for version in versions}
            missing = [version_id for version_id in version_ids if version_id not in found]
            raise NotFoundError("Scoring version", ", ".join(missing))

        for version in versions:
            if version.game_type != game_type:
                raise InputError(
                    f"Version {version.version_name} belongs to '{version.game_type}', not '{game_type}'",
                    field="version_ids",
                )

        report = build_comparison(
            [version.configuration for version in versions],
            test_environment=test_data,
            labels=[version.version_name for version in versions],
        )

        comparisons = []
        for index, version in enumerate(versions):
            entry: Dict[str, Any] = {
                "version_id": version.id,
                "version_name": version.version_name,
                "description": version.description,
                "formulas": dict(version.configuration.competency_formulas),
                "weights": dict(version.configuration.final_weights),
            }
            if report.outcomes is not None:
                outcome = report.outcomes[index]
                if outcome.succeeded:
                    entry["scores"] = outcome.result.to_dict()
                else:
                    entry["error"] = outcome.error.to_error_payload()
            comparisons.append(entry)

        return {
            "comparisons": comparisons,
            "differences": [diff.to_dict() for diff in report.differences],
            "test_data": dict(test_data) if test_data is not None else None,
        }

    def save(
        self,
        game_type: str,
        formulas: Mapping[str, str],
        weights: Mapping[str, float],
        settings: Optional[Mapping[str, Any]] = None,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
        activate: bool = True,
    ) -> Dict[str, Any]:
        """Validate and store a new configuration version"""
        configuration = ScoringConfiguration(
            game_type=game_type,
            competency_formulas=formulas,
            final_weights=weights,
            settings=settings or {},
        )
        if not configuration.competency_formulas:
            raise InputError("At least one competency formula is required", field="competency_formulas")
        validate_configuration(configuration)

        version = self.config_store.save(
            configuration, description=description, created_by=created_by, activate=activate
        )
        return version.to_dict()

    def set_active(self, game_type: str, version_name: str) -> Dict[str, Any]:
        """Make one stored version the active configuration for its game type"""
        target = next(
            (version for version in self.config_store.list_versions(game_type) if version.version_name == version_name),
            None,
        )
        if target is None:
            raise NotFoundError(f"Scoring version for {game_type}", version_name)
        validate_configuration(target.configuration)

        return self.config_store.set_active(game_type, version_name).to_dict()

    def get_active(self, game_type: str) -> Dict[str, Any]:
        return self._require_active(game_type).to_dict()

    def list_versions(self, game_type: str) -> List[Dict[str, Any]]:
        return [version.to_dict() for version in self.config_store.list_versions(game_type)]

    def available_variables(self, game_type: str) -> Dict[str, Any]:
        return {"game_type": game_type, "variables": strategy_variables(game_type)}

    def list_results(self, game_type: str, user_id: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
        return self.session_store.list_sessions(game_type, user_id=user_id, limit=limit)
