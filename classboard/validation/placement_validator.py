"""
Gap and duration validator.

Checks a candidate placement against its neighbours and the controller
settings. Pure and deterministic: used by the cascade mutator, the
optimizer and the global adjustment coordinator before they commit.
"""

from typing import Dict, Optional, Sequence, Tuple

from ..models.event import EventNode
from ..models.policy import CascadePolicy
from ..models.settings import ControllerSettings
from ..utils.time_utils import MINUTES_PER_DAY, minutes_to_time
from .validators import ValidationReason, ValidationResult


class PlacementValidator:
    """
    Validator for event placement inside a chain.

    Checks, in order:
    - duration within [min_duration, max_duration]
    - start not before the predecessor's end plus the required gap
    - end plus the required gap not after the successor's start
    - start inside the configured day window, end no later than 24:00

    In LOCKED mode the required gap collapses to zero; in RESPECTING mode
    it is settings.gap_minutes.

    Examples:
        >>> validator = PlacementValidator(ControllerSettings(gap_minutes=15))
        >>> result = validator.validate(candidate, previous=head)
        >>> if not result.is_valid:
        ...     print(result.reason)
    """

    def __init__(self, settings: ControllerSettings):
        """
        Initialize validator.

        Args:
            settings: Controller settings to validate against
        """
        self.settings = settings

    def required_gap(self, policy: CascadePolicy) -> int:
        """Minimum minutes between neighbours under policy."""
        return 0 if policy.is_locked else self.settings.gap_minutes

    def validate(
        self,
        candidate: EventNode,
        previous: Optional[EventNode] = None,
        next_node: Optional[EventNode] = None,
        policy: CascadePolicy = CascadePolicy.RESPECTING
    ) -> ValidationResult:
        """
        Validate one placement.

        Args:
            candidate: Event with its proposed start and duration
            previous: Intended predecessor (None at the head)
            next_node: Intended successor (None at the tail)
            policy: Cascade policy in force

        Returns:
            ValidationResult, invalid with the first failing reason
        """
        checks = (
            self._check_duration(candidate),
            self._check_previous(candidate, previous, policy),
            self._check_next(candidate, next_node, policy),
            self._check_bounds(candidate),
        )
        for result in checks:
            if not result.is_valid:
                return result
        return ValidationResult.valid()

    def validate_chain(
        self,
        nodes: Sequence[EventNode],
        policy: CascadePolicy = CascadePolicy.RESPECTING
    ) -> ValidationResult:
        """
        Validate every node of an ordered chain against its neighbours.

        Args:
            nodes: Chain in order
            policy: Cascade policy in force

        Returns:
            The first invalid result, or a valid result
        """
        for index, node in enumerate(nodes):
            previous = nodes[index - 1] if index > 0 else None
            next_node = nodes[index + 1] if index + 1 < len(nodes) else None
            result = self.validate(node, previous, next_node, policy)
            if not result.is_valid:
                return result
        return ValidationResult.valid()

    def validate_changes(
        self,
        before: Sequence[EventNode],
        after: Sequence[EventNode],
        policy: CascadePolicy = CascadePolicy.RESPECTING
    ) -> ValidationResult:
        """
        Validate what a mutation changed.

        Only new or resized events get the duration check, only moved or
        new events get the day-window check, and only adjacent pairs whose
        gap shrank (or that were not neighbours before) get the overlap
        check. Spacing the mutation did not touch is not judged again.

        Args:
            before: Chain before the mutation
            after: Proposed chain after the mutation
            policy: Cascade policy in force

        Returns:
            The first invalid result, or a valid result
        """
        previous_by_id: Dict[str, EventNode] = {node.id: node for node in before}
        gaps_before: Dict[Tuple[str, str], int] = {
            (a.id, b.id): a.gap_after(b) for a, b in zip(before, before[1:])
        }

        for node in after:
            old = previous_by_id.get(node.id)
            if old is None or old.duration != node.duration:
                result = self._check_duration(node)
                if not result.is_valid:
                    return result

        for index in range(len(after) - 1):
            left, right = after[index], after[index + 1]
            old_gap = gaps_before.get((left.id, right.id))
            if old_gap is not None and left.gap_after(right) >= old_gap:
                continue

            old_right = previous_by_id.get(right.id)
            right_moved = old_right is None or old_right.start_time != right.start_time
            if right_moved:
                result = self._check_previous(right, left, policy)
            else:
                result = self._check_next(left, right, policy)
            if not result.is_valid:
                return result

        for node in after:
            old = previous_by_id.get(node.id)
            if old is None or old.start_time != node.start_time or old.duration != node.duration:
                result = self._check_bounds(node)
                if not result.is_valid:
                    return result

        return ValidationResult.valid()

    def _check_duration(self, candidate: EventNode) -> ValidationResult:
        settings = self.settings
        if not (settings.min_duration <= candidate.duration <= settings.max_duration):
            return ValidationResult.invalid(
                ValidationReason.DURATION_OUT_OF_RANGE,
                f"Duration {candidate.duration}min outside "
                f"[{settings.min_duration}, {settings.max_duration}]"
            )
        return ValidationResult.valid()

    def _check_previous(
        self,
        candidate: EventNode,
        previous: Optional[EventNode],
        policy: CascadePolicy
    ) -> ValidationResult:
        if previous is None:
            return ValidationResult.valid()

        earliest = previous.end_time + self.required_gap(policy)
        if candidate.start_time < earliest:
            return ValidationResult.invalid(
                ValidationReason.OVERLAPS_PREVIOUS,
                f"Event {candidate.id} at {minutes_to_time(candidate.start_time)} "
                f"would overlap previous event {previous.id} "
                f"(earliest start {minutes_to_time(earliest)})"
            )
        return ValidationResult.valid()

    def _check_next(
        self,
        candidate: EventNode,
        next_node: Optional[EventNode],
        policy: CascadePolicy
    ) -> ValidationResult:
        if next_node is None:
            return ValidationResult.valid()

        latest_end = next_node.start_time - self.required_gap(policy)
        if candidate.end_time > latest_end:
            return ValidationResult.invalid(
                ValidationReason.OVERLAPS_NEXT,
                f"Event {candidate.id} ending {minutes_to_time(candidate.end_time)} "
                f"would overlap next event {next_node.id} "
                f"(latest end {minutes_to_time(latest_end)})"
            )
        return ValidationResult.valid()

    def _check_bounds(self, candidate: EventNode) -> ValidationResult:
        settings = self.settings
        if candidate.start_time < settings.min_time_minutes:
            return ValidationResult.invalid(
                ValidationReason.OUT_OF_DAY_BOUNDS,
                f"Event {candidate.id} would start before "
                f"{minutes_to_time(settings.min_time_minutes)}"
            )

        if candidate.start_time > settings.max_time_minutes or candidate.end_time > MINUTES_PER_DAY:
            return ValidationResult.invalid(
                ValidationReason.OUT_OF_DAY_BOUNDS,
                f"Event {candidate.id} at {minutes_to_time(candidate.start_time)} "
                f"does not fit in the day"
            )
        return ValidationResult.valid()
