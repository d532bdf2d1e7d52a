"""Status transition validation for simulated instructions."""

from swish_client.shared.models import INSTRUCTION_TRANSITIONS, InstructionStatus


class InvalidTransitionError(Exception):
    def __init__(self, instruction_id: str, current: str, target: str):
        self.instruction_id = instruction_id
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid transition for {instruction_id}: {current} -> {target}"
        )


def validate_transition(instruction_id: str, current: str, target: str) -> bool:
    current_state = InstructionStatus(current)
    target_state = InstructionStatus(target)
    allowed = INSTRUCTION_TRANSITIONS.get(current_state, [])
    if target_state not in allowed:
        raise InvalidTransitionError(instruction_id, current, target)
    return True
