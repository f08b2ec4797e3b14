"""Trigger pipeline.

Triggers run synchronously, one at a time, in declaration order. For each
trigger:

1. a name matching a registered route dispatches that route's handler chain
   as trigger-originated (it is not recorded as a current route);
2. otherwise a cache-marked trigger whose record is already ``done`` is
   skipped, else its record is marked done;
3. the name and its arguments (``[]`` when absent, a scalar wrapped as one
   argument) go to the router's event dispatcher.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from .definitions import DetailedTrigger, NamedTrigger, as_trigger, normalize_args

if TYPE_CHECKING:  # pragma: no cover
    from .base_router import BaseRouter

__all__ = ["TriggerPipeline"]


class TriggerPipeline:
    __slots__ = ("_router",)

    def __init__(self, router: "BaseRouter") -> None:
        self._router = router

    def process_triggers(self, triggers: Any) -> None:
        if isinstance(triggers, (list, tuple)):
            for trigger in triggers:
                self.process_trigger(trigger)
        elif isinstance(triggers, (str, Mapping, NamedTrigger, DetailedTrigger)):
            self.process_trigger(triggers)
        else:
            self._router.log(
                "[smartnav.process_triggers] Bad triggers format, needs to be a string,"
                " a mapping, or a list of strings or mappings"
            )

    def process_trigger(self, raw: Any) -> bool:
        """Process one trigger; return whether anything was dispatched."""
        router = self._router
        trigger = as_trigger(raw)
        if trigger is None:
            router.log(
                "[smartnav.process_trigger] Bad trigger format, needs to be a string "
                "or a mapping with a name, given: %s",
                type(raw).__name__,
            )
            return False

        args = trigger.args if isinstance(trigger, DetailedTrigger) else ()
        if router.exists(name=trigger.name):
            router.process_controllers(trigger.name, args, trigger=True)
            return True

        if isinstance(trigger, DetailedTrigger) and trigger.cache:
            if not router.cache.consume(trigger.name):
                router.log("[smartnav] Trigger '%s' has been skipped (cached)", trigger.name)
                return False

        router.dispatcher.emit(trigger.name, *normalize_args(args))
        return True
