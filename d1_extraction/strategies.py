"""
Built-in extraction strategies

Percent-valued variables (accuracy, completion, ...) are on a 0-100 scale so
they line up with competency scores.
"""
import math
from typing import Any, Dict, Mapping

from .exceptions import MissingTelemetryField
from .registry import ExtractionStrategy, register_strategy


@register_strategy
class ReactionTimeStrategy(ExtractionStrategy):
    """Stimulus/response trials with per-trial reaction times"""

    game_type = "reaction_time"
    variables = {
        "total_trials": "Number of trials presented",
        "correct_trials": "Number of trials answered correctly",
        "errors": "Number of incorrect trials",
        "accuracy": "Correct trials as a percentage of all trials (0-100)",
        "avg_reaction_ms": "Mean reaction time in milliseconds",
        "min_reaction_ms": "Fastest reaction time in milliseconds",
        "max_reaction_ms": "Slowest reaction time in milliseconds",
        "reaction_std_ms": "Population standard deviation of reaction times",
        "trials_per_minute": "Trials completed per minute of play",
    }

    def extract(self, raw: Mapping[str, Any]) -> Dict[str, float]:
        trials = self.require_list(raw, "trials")
        duration = self.optional_number(raw, "duration_seconds")

        reaction_times = []
        correct = 0
        for index, trial in enumerate(trials):
            if not isinstance(trial, Mapping):
                raise MissingTelemetryField(f"trials[{index}]", "not an object")
            reaction_times.append(self.require_number(trial, "reaction_ms"))
            if "correct" not in trial or not isinstance(trial["correct"], bool):
                raise MissingTelemetryField(f"trials[{index}].correct", "missing or not a boolean")
            correct += 1 if trial["correct"] else 0

        total = len(trials)
        mean = sum(reaction_times) / total if total else 0.0
        variance = sum((rt - mean) ** 2 for rt in reaction_times) / total if total else 0.0

        return {
            "total_trials": float(total),
            "correct_trials": float(correct),
            "errors": float(total - correct),
            "accuracy": self.ratio(correct, total, 100.0),
            "avg_reaction_ms": mean,
            "min_reaction_ms": min(reaction_times) if reaction_times else 0.0,
            "max_reaction_ms": max(reaction_times) if reaction_times else 0.0,
            "reaction_std_ms": math.sqrt(variance),
            "trials_per_minute": self.ratio(total, duration, 60.0),
        }


@register_strategy
class MemoryMatchStrategy(ExtractionStrategy):
    """Card-pair matching game"""

    game_type = "memory_match"
    variables = {
        "pairs_total": "Number of pairs on the board",
        "pairs_matched": "Number of pairs found",
        "attempts": "Number of pair flips attempted",
        "completion": "Matched pairs as a percentage of all pairs (0-100)",
        "efficiency": "Successful attempts as a percentage of all attempts (0-100)",
        "duration_seconds": "Time spent playing in seconds",
        "pairs_per_minute": "Pairs matched per minute of play",
    }

    def extract(self, raw: Mapping[str, Any]) -> Dict[str, float]:
        pairs_total = self.require_number(raw, "pairs_total")
        pairs_matched = self.require_number(raw, "pairs_matched")
        attempts = self.require_number(raw, "attempts")
        duration = self.require_number(raw, "duration_seconds")

        if pairs_matched > pairs_total:
            raise MissingTelemetryField("pairs_matched", "greater than pairs_total")

        return {
            "pairs_total": pairs_total,
            "pairs_matched": pairs_matched,
            "attempts": attempts,
            "completion": self.ratio(pairs_matched, pairs_total, 100.0),
            "efficiency": self.ratio(pairs_matched, attempts, 100.0),
            "duration_seconds": duration,
            "pairs_per_minute": self.ratio(pairs_matched, duration, 60.0),
        }


@register_strategy
class FocusTaskStrategy(ExtractionStrategy):
    """Go/no-go attention task with targets and distractors"""

    game_type = "focus_task"
    variables = {
        "targets_hit": "Targets responded to",
        "misses": "Targets not responded to",
        "false_alarms": "Responses to distractors",
        "hit_rate": "Targets hit as a percentage of targets shown (0-100)",
        "false_alarm_rate": "False alarms as a percentage of distractors shown (0-100)",
        "accuracy": "Correct decisions as a percentage of all stimuli (0-100)",
        "duration_seconds": "Time spent playing in seconds",
    }

    def extract(self, raw: Mapping[str, Any]) -> Dict[str, float]:
        targets_shown = self.require_number(raw, "targets_shown")
        targets_hit = self.require_number(raw, "targets_hit")
        distractors_shown = self.require_number(raw, "distractors_shown")
        false_alarms = self.require_number(raw, "false_alarms")
        duration = self.optional_number(raw, "duration_seconds")

        if targets_hit > targets_shown:
            raise MissingTelemetryField("targets_hit", "greater than targets_shown")
        if false_alarms > distractors_shown:
            raise MissingTelemetryField("false_alarms", "greater than distractors_shown")

        correct_rejections = distractors_shown - false_alarms
        stimuli = targets_shown + distractors_shown

        return {
            "targets_hit": targets_hit,
            "misses": targets_shown - targets_hit,
            "false_alarms": false_alarms,
            "hit_rate": self.ratio(targets_hit, targets_shown, 100.0),
            "false_alarm_rate": self.ratio(false_alarms, distractors_shown, 100.0),
            "accuracy": self.ratio(targets_hit + correct_rejections, stimuli, 100.0),
            "duration_seconds": duration,
        }
