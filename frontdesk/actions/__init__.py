"""Call actions and the turn state machine.

The executor is imported from frontdesk.actions.executor directly; this
package only re-exports the models so session state can depend on it.
"""

from frontdesk.actions.models import ActionTransition, CallAction, TransitionTrigger

__all__ = [
    "ActionTransition",
    "CallAction",
    "TransitionTrigger",
]
