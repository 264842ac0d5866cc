"""Navigation policy: what the user may do from the current step."""

from dataclasses import dataclass, field

from stepwise.wizard.models import NavigationMode, WizardConfig, WizardState


@dataclass(frozen=True)
class NavigationInfo:
    """Navigation permissions derived from a config and a state."""

    can_go_next: bool
    can_go_previous: bool
    is_first_step: bool
    is_last_step: bool
    current_step_number: int
    total_steps: int
    progress: float
    _reachable: tuple[bool, ...] = field(default=(), repr=False)

    def can_go_to_step(self, index: int) -> bool:
        """Whether the step at ``index`` can be selected directly."""
        if not 0 <= index < len(self._reachable):
            return False
        return self._reachable[index]


def compute_progress(config: WizardConfig, state: WizardState) -> float:
    """Share of steps completed or skipped, as a percentage capped at 100."""
    total = len(config.steps)
    if total == 0:
        return 0.0
    done = len(state.completed_steps) + len(state.skipped_steps)
    return min(100.0, done / total * 100)


def compute_navigation(config: WizardConfig, state: WizardState) -> NavigationInfo:
    """
    Compute navigation permissions.

    Args:
        config: Wizard configuration.
        state: Current wizard state.

    Returns:
        Navigation info for the current step.
    """
    total = len(config.steps)
    index = state.current_step_index
    step = config.steps[index]
    is_first = index == 0
    is_last = index == total - 1
    non_linear = config.navigation_mode == NavigationMode.NON_LINEAR

    if is_last:
        can_go_next = False
    elif non_linear:
        can_go_next = True
    else:
        can_go_next = (
            step.id in state.completed_steps
            or not state.step_errors.get(step.id)
            or step.optional
            or step.skippable
        )

    can_go_previous = not is_first and config.allow_back_navigation

    reachable = []
    for target in range(total):
        if target == index:
            reachable.append(True)
        elif target < index:
            reachable.append(config.allow_back_navigation)
        elif non_linear:
            reachable.append(True)
        else:
            reachable.append(target == index + 1 and can_go_next)

    return NavigationInfo(
        can_go_next=can_go_next,
        can_go_previous=can_go_previous,
        is_first_step=is_first,
        is_last_step=is_last,
        current_step_number=index + 1,
        total_steps=total,
        progress=compute_progress(config, state),
        _reachable=tuple(reachable),
    )
